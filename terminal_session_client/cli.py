"""
Command-line interface for the Terminal Session Client.

This module provides the ``terminal-session-client`` entry point for listing,
creating, renaming, feeding and terminating sessions on a running server.
"""

import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

from tabulate import tabulate

from . import __version__
from .client import SessionClient
from .config import Config, load_config, create_default_config_file
from .exceptions import ConfigurationError, ServerNotRunningError, TerminalSessionClientError
from .models import Session, TitleMode
from .utils import setup_logging, format_error_for_display


SESSION_TABLE_HEADERS = ["ID", "Status", "Name", "Working Dir"]


def session_table(sessions: List[Session]) -> str:
    """Render sessions as a grid table for ``list`` output."""
    table_data = [
        [session.session_id, session.status.value, session.display_name, session.working_dir]
        for session in sessions
    ]
    return tabulate(table_data, headers=SESSION_TABLE_HEADERS, tablefmt='grid')


async def run_command(args: argparse.Namespace, config: Config) -> int:
    """
    Execute a parsed subcommand.

    Returns:
        int: Process exit status
    """
    async with SessionClient(config) as client:
        service = client.service

        if args.command == 'list':
            if not client.server.is_running:
                raise ServerNotRunningError(details=config.server_address)
            sessions = client.monitor.visible_sessions(hide_exited=args.hide_exited or None)
            if client.monitor.last_error is not None:
                raise client.monitor.last_error
            if args.json:
                print(json.dumps([session.to_dict() for session in sessions], indent=2))
            elif not sessions:
                print("No sessions")
            else:
                print(session_table(list(sessions)))
            return 0

        if args.command == 'create':
            command = list(args.session_command)
            if command and command[0] == '--':
                command = command[1:]
            if not command:
                print("❌ A command to run is required", file=sys.stderr)
                return 2
            session_id = await service.create_session(
                command=command,
                working_dir=args.cwd,
                name=args.name,
                title_mode=args.title_mode,
                spawn_terminal=args.spawn,
                cols=args.cols,
                rows=args.rows,
            )
            print(session_id)
            return 0

        if args.command == 'rename':
            await service.rename_session(args.session_id, args.name)
            print(f"✅ Renamed {args.session_id}")
            return 0

        if args.command == 'kill':
            await service.terminate_session(args.session_id)
            print(f"✅ Terminated {args.session_id}")
            return 0

        if args.command == 'send':
            await service.send_input(args.session_id, args.text)
            return 0

        if args.command == 'key':
            await service.send_key(args.session_id, args.key)
            return 0

        if args.command == 'cleanup':
            removed = await service.cleanup_exited_sessions()
            print(f"✅ Removed {removed} exited sessions")
            return 0

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="terminal-session-client",
        description="Terminal Session Client - manage sessions on a terminal-hosting server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  terminal-session-client list --hide-exited
  terminal-session-client create --cwd ~/src --name build -- make -j4
  terminal-session-client send SESSION_ID "ls -la"
  terminal-session-client key SESSION_ID enter
  terminal-session-client kill SESSION_ID
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file (default: ~/.terminal-session-client/config.yaml)"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides configuration)"
    )
    parser.add_argument("--log-file", type=str, help="Log file path")
    parser.add_argument(
        "--init-config",
        metavar="PATH",
        help="Write a default configuration file and exit"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Terminal Session Client {__version__}"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    list_parser = subparsers.add_parser('list', help='List sessions')
    list_parser.add_argument('--hide-exited', action='store_true', help='Hide exited sessions')
    list_parser.add_argument('--json', action='store_true', help='Print sessions as JSON')

    create_parser = subparsers.add_parser('create', help='Create a session')
    create_parser.add_argument('--cwd', default=os.getcwd(), help='Working directory')
    create_parser.add_argument('--name', help='Session name')
    create_parser.add_argument('--title-mode', choices=[mode.value for mode in TitleMode],
                               default=TitleMode.DYNAMIC.value, help='Terminal title handling')
    create_parser.add_argument('--spawn', action='store_true',
                               help='Open a native terminal window on the server host')
    create_parser.add_argument('--cols', type=int, default=120, help='Terminal width')
    create_parser.add_argument('--rows', type=int, default=30, help='Terminal height')
    create_parser.add_argument('session_command', nargs=argparse.REMAINDER,
                               help='Command and arguments to run')

    rename_parser = subparsers.add_parser('rename', help='Rename a session')
    rename_parser.add_argument('session_id')
    rename_parser.add_argument('name')

    kill_parser = subparsers.add_parser('kill', help='Terminate a session')
    kill_parser.add_argument('session_id')

    send_parser = subparsers.add_parser('send', help='Send text to a session')
    send_parser.add_argument('session_id')
    send_parser.add_argument('text')

    key_parser = subparsers.add_parser('key', help='Send a named key to a session')
    key_parser.add_argument('session_id')
    key_parser.add_argument('key')

    subparsers.add_parser('cleanup', help='Remove exited sessions on the server')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.init_config:
        create_default_config_file(args.init_config)
        print(f"✅ Wrote default configuration to {args.init_config}")
        return

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        print("💡 Tip: Run 'terminal-session-client --init-config PATH' to create a configuration.",
              file=sys.stderr)
        sys.exit(1)

    logger = setup_logging(args.log_level or config.log_level,
                           args.log_file or config.log_file,
                           structured=config.structured_logs)

    try:
        exit_code = asyncio.run(run_command(args, config))
    except TerminalSessionClientError as e:
        print(format_error_for_display(e), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()

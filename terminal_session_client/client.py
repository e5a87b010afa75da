"""
Wiring of the session components.

SessionClient builds one transport, server manager, monitor, window tracker
and service from a Config and owns their lifetimes.
"""

import logging
from typing import Optional

from .config import Config
from .server.server_manager import ServerManager
from .server.transport import SessionTransport
from .session_manager.session_monitor import SessionMonitor
from .session_manager.session_service import SessionService
from .session_manager.window_tracker import WindowCloser, WindowTracker


class SessionClient:
    """Owns the collaborators behind a SessionService."""

    def __init__(self, config: Config, window_closer: Optional[WindowCloser] = None,
                 transport: Optional[SessionTransport] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.transport = transport or SessionTransport(config.server)
        self.server = ServerManager(config.server)
        self.monitor = SessionMonitor(self.server, self.transport, config.monitor)
        self.window_tracker = WindowTracker(window_closer)
        self.service = SessionService(self.server, self.transport, self.monitor, self.window_tracker)

    async def __aenter__(self) -> "SessionClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def connect(self) -> bool:
        """
        Probe the server and load the initial session list.

        Returns:
            bool: Whether the server is running
        """
        running = await self.server.check_health(self.transport)
        if running:
            await self.monitor.refresh()
        else:
            self.logger.warning(f"No server reachable at {self.config.server_address}")
        return running

    async def close(self) -> None:
        await self.monitor.stop()
        await self.transport.close()

"""
Session service for driving remote terminal sessions.

This module is the single gateway for session state transitions initiated by
this client: creating, renaming, feeding input to and terminating sessions.
Every request is authenticated, every failure is translated into the
SessionServiceError taxonomy, and successful mutations are followed by the
side effects that keep local state converged with the server.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union
from urllib.parse import quote

from yarl import URL

from ..exceptions import (
    CreateFailedError,
    InvalidNameError,
    InvalidResponseError,
    InvalidURLError,
    RequestFailedError,
    ServerNotRunningError,
)
from ..models import TitleMode
from ..server.server_manager import ServerManager
from ..server.transport import SessionTransport, TransportResponse
from ..utils import normalize_name
from .session_monitor import SessionMonitor
from .window_tracker import WindowTracker


CONTENT_TYPE_JSON = "application/json"
ACCEPTED_STATUSES = (200, 204)


class SessionService:
    """
    High-level session operations against the terminal server.

    Collaborators are injected so tests can substitute fakes. Operations on
    the same session id are not serialized here; concurrent callers get
    last-response-wins semantics.
    """

    def __init__(self, server: ServerManager, transport: SessionTransport,
                 monitor: SessionMonitor, window_tracker: WindowTracker):
        self.server = server
        self.transport = transport
        self.monitor = monitor
        self.window_tracker = window_tracker
        self.logger = logging.getLogger(__name__)

    async def create_session(
        self,
        command: Sequence[str],
        working_dir: str,
        name: Optional[str] = None,
        title_mode: Union[TitleMode, str] = TitleMode.DYNAMIC,
        spawn_terminal: bool = False,
        cols: int = 120,
        rows: int = 30,
    ) -> str:
        """
        Create a new session.

        Args:
            command: Program and arguments to run
            working_dir: Directory the process starts in
            name: Optional display name; blank names are omitted
            title_mode: How the server manages the terminal title
            spawn_terminal: Ask the server to open a native terminal window
                instead of a headless pty sized by ``cols``/``rows``
            cols: Terminal width for headless sessions
            rows: Terminal height for headless sessions

        Returns:
            str: Identifier assigned by the server

        Raises:
            ServerNotRunningError: If the server is not running
            CreateFailedError: If the server refuses the request
            InvalidResponseError: If a 200 response carries no session id
            ValueError: If the title mode or terminal size is invalid
        """
        if not self.server.is_running:
            raise ServerNotRunningError()

        body: Dict[str, Any] = {
            "command": list(command),
            "workingDir": working_dir,
            "titleMode": TitleMode(title_mode).value,
        }

        trimmed_name = normalize_name(name)
        if trimmed_name is not None:
            body["name"] = trimmed_name

        if spawn_terminal:
            body["spawn_terminal"] = True
        else:
            # Headless sessions need terminal dimensions
            for label, value in (("cols", cols), ("rows", rows)):
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise ValueError(f"{label} must be a positive integer, got {value!r}")
            body["cols"] = cols
            body["rows"] = rows

        url = self._url()
        response = await self._send("POST", url, json_body=body)

        if response.status != 200:
            message = _error_message(response) or CreateFailedError.DEFAULT_MESSAGE
            self.logger.error(f"Failed to create session ({response.status}): {message}")
            raise CreateFailedError(message)

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidResponseError(details=str(e)) from e

        session_id = payload.get("sessionId") if isinstance(payload, dict) else None
        if not isinstance(session_id, str):
            raise InvalidResponseError(details="missing sessionId")

        self.logger.info(f"Created session {session_id} running {' '.join(command)}")

        if spawn_terminal:
            self.window_tracker.register_window(session_id)

        await self.monitor.refresh()
        return session_id

    async def rename_session(self, session_id: str, new_name: str) -> None:
        """
        Rename a session.

        Raises:
            InvalidNameError: If the name is blank; no request is made
            RequestFailedError: If the server does not answer 200
        """
        trimmed_name = normalize_name(new_name)
        if trimmed_name is None:
            raise InvalidNameError()

        url = self._url(session_id)
        response = await self._send("PATCH", url, json_body={"name": trimmed_name})

        if response.status != 200:
            raise RequestFailedError(response.status)

        self.logger.info(f"Renamed session {session_id} to {trimmed_name!r}")
        await self.monitor.refresh()

    async def send_input(self, session_id: str, text: str) -> None:
        """Send free text to a session's input."""
        await self._post_input(session_id, {"text": text})

    async def send_key(self, session_id: str, key: str) -> None:
        """Send a named key (e.g. ``enter``, ``ctrl_c``) to a session."""
        await self._post_input(session_id, {"key": key})

    async def terminate_session(self, session_id: str) -> None:
        """
        Terminate a session.

        Termination happens in two steps:
        1. DELETE the session and wait for the server's acknowledgment. The
           server escalates from a polite signal to a forced kill after its
           own grace period; this client only waits for the response.
        2. Close the terminal window if this client opened it. This step is
           best-effort: its failure is logged, never raised.

        No refresh is triggered; the monitor's polling picks up the change.

        Raises:
            RequestFailedError: If the server does not acknowledge with 200
                or 204. The window, if any, is left open.
        """
        url = self._url(session_id)
        response = await self._send("DELETE", url)

        if response.status not in ACCEPTED_STATUSES:
            self.logger.warning(f"Server refused to terminate session {session_id}: {response.status}")
            raise RequestFailedError(response.status)

        self.logger.info(f"Terminated session {session_id}")

        try:
            self.window_tracker.close_window_if_opened_by_us(session_id)
        except Exception as cleanup_error:
            self.logger.warning(
                f"Error closing window for session {session_id}: {cleanup_error}",
                exc_info=True
            )

    async def cleanup_exited_sessions(self) -> int:
        """
        Ask the server to forget all exited sessions.

        Returns:
            int: Number of sessions the server removed, 0 if not reported

        Raises:
            ServerNotRunningError: If the server is not running
            RequestFailedError: If the server does not answer 200 or 204
        """
        if not self.server.is_running:
            raise ServerNotRunningError()

        url = self._url_for(self.server.config.cleanup_endpoint)
        response = await self._send("POST", url)

        if response.status not in ACCEPTED_STATUSES:
            raise RequestFailedError(response.status)

        removed = 0
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("removed"), int):
            removed = payload["removed"]

        self.logger.info(f"Cleaned up {removed} exited sessions")
        await self.monitor.refresh()
        return removed

    async def _post_input(self, session_id: str, body: Mapping[str, str]) -> None:
        if not self.server.is_running:
            raise ServerNotRunningError()

        url = self._url(session_id, "input")
        response = await self._send("POST", url, json_body=dict(body))

        if response.status not in ACCEPTED_STATUSES:
            raise RequestFailedError(response.status)

    def _url(self, session_id: Optional[str] = None, *suffix: str) -> URL:
        """Build ``{sessions}[/{id}[/suffix...]]``."""
        path = self.server.config.sessions_endpoint.rstrip("/")
        if session_id is not None:
            if not session_id:
                raise InvalidURLError(details="empty session id")
            path += "/" + quote(session_id, safe="")
        for part in suffix:
            path += "/" + part
        return self._url_for(path)

    def _url_for(self, path: str) -> URL:
        return self.transport.build_url(path)

    async def _send(self, method: str, url: URL,
                    json_body: Optional[Dict[str, Any]] = None) -> TransportResponse:
        headers = {"Host": self.server.config.host_header}
        if json_body is not None:
            headers["Content-Type"] = CONTENT_TYPE_JSON
        self.server.authenticate(headers)
        return await self.transport.request(method, url, headers=headers, json_body=json_body)


def _error_message(response: TransportResponse) -> Optional[str]:
    """Extract the ``error`` string from a JSON error payload, if any."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return None

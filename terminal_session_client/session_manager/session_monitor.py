"""
Session monitor holding the last known server session list.

The monitor is the only place the session list is mutated. Each refresh
fetches the full list and swaps it in as one immutable snapshot, so readers
see either the previous list or the new one, never a mix.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from ..config import MonitorConfig
from ..exceptions import InvalidResponseError, RequestFailedError, SessionServiceError
from ..models import Session
from ..server.server_manager import ServerManager
from ..server.transport import SessionTransport


class SessionMonitor:
    """
    Pull-based mirror of the server's session list.

    SessionService awaits :meth:`refresh` after create and rename; the
    polling task started with :meth:`start` converges everything else,
    including terminations.
    """

    def __init__(self, server: ServerManager, transport: SessionTransport,
                 config: Optional[MonitorConfig] = None):
        self.server = server
        self.transport = transport
        self.config = config or MonitorConfig()
        self.logger = logging.getLogger(__name__)

        self._sessions: Tuple[Session, ...] = ()
        self.last_refresh: Optional[datetime] = None
        self.last_error: Optional[Exception] = None

        self.poll_task: Optional[asyncio.Task] = None
        self.is_polling = False

    @property
    def sessions(self) -> Tuple[Session, ...]:
        """The current snapshot."""
        return self._sessions

    def get_session(self, session_id: str) -> Optional[Session]:
        for session in self._sessions:
            if session.session_id == session_id:
                return session
        return None

    def visible_sessions(self, hide_exited: Optional[bool] = None) -> List[Session]:
        """Sessions to present, optionally without exited ones."""
        if hide_exited is None:
            hide_exited = self.config.hide_exited
        snapshot = self._sessions
        if hide_exited:
            return [session for session in snapshot if not session.is_exited()]
        return list(snapshot)

    def running_sessions(self) -> List[Session]:
        return [session for session in self._sessions if session.is_running()]

    def exited_sessions(self) -> List[Session]:
        return [session for session in self._sessions if session.is_exited()]

    async def refresh(self) -> None:
        """
        Replace the snapshot with the server's current session list.

        Failures are logged and kept in ``last_error``; the previous snapshot
        stays in place and nothing is raised.
        """
        if not self.server.is_running:
            self._sessions = ()
            self.last_error = None
            return

        try:
            sessions = await self._fetch_sessions()
        except SessionServiceError as e:
            self.last_error = e
            self.logger.warning(f"Failed to refresh sessions: {e}")
            return

        self._sessions = sessions
        self.last_refresh = datetime.now()
        self.last_error = None
        self.logger.debug(f"Session list refreshed: {len(sessions)} sessions")

    async def _fetch_sessions(self) -> Tuple[Session, ...]:
        config = self.server.config
        url = self.transport.build_url(config.sessions_endpoint)
        headers = {"Host": config.host_header}
        self.server.authenticate(headers)

        response = await self.transport.request("GET", url, headers=headers)
        if response.status != 200:
            raise RequestFailedError(response.status)

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidResponseError(details=str(e)) from e

        if isinstance(payload, dict):
            payload = payload.get("sessions")
        if not isinstance(payload, list):
            raise InvalidResponseError(details="session list is not an array")

        sessions = []
        for entry in payload:
            try:
                sessions.append(Session.from_dict(entry))
            except ValueError as e:
                self.logger.warning(f"Skipping malformed session entry: {e}")
        return tuple(sessions)

    async def start(self) -> None:
        """Start periodic polling."""
        if self.is_polling:
            return

        self.is_polling = True
        self.poll_task = asyncio.create_task(self._poll_loop())
        self.logger.info(f"Session monitor polling every {self.config.refresh_interval}s")

    async def stop(self) -> None:
        """Stop periodic polling."""
        if not self.is_polling:
            return

        self.is_polling = False
        if self.poll_task:
            self.poll_task.cancel()
            try:
                await self.poll_task
            except asyncio.CancelledError:
                pass
            self.poll_task = None
        self.logger.info("Session monitor stopped")

    async def _poll_loop(self) -> None:
        """Background task refreshing the snapshot."""
        while self.is_polling:
            await self.refresh()
            await asyncio.sleep(self.config.refresh_interval)

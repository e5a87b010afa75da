"""
Server state as seen from this client.

The server process itself is owned elsewhere; ServerManager only records
whether it is reachable and signs requests on its behalf.
"""

import logging
from typing import MutableMapping, Optional

from ..config import ServerConfig
from ..exceptions import SessionServiceError
from .auth import Authenticator, create_authenticator
from .transport import SessionTransport


class ServerManager:
    """Tracks whether the terminal server is running and authenticates requests."""

    def __init__(self, config: ServerConfig, authenticator: Optional[Authenticator] = None,
                 is_running: bool = False):
        self.config = config
        self.authenticator = authenticator or create_authenticator(config)
        self.logger = logging.getLogger(__name__)
        self._is_running = is_running

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def port(self) -> int:
        return self.config.port

    def mark_running(self) -> None:
        if not self._is_running:
            self.logger.info(f"Server at port {self.config.port} is running")
        self._is_running = True

    def mark_stopped(self) -> None:
        if self._is_running:
            self.logger.info(f"Server at port {self.config.port} is no longer running")
        self._is_running = False

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        """Attach credentials to an outgoing request's headers."""
        self.authenticator.authenticate(headers)

    async def check_health(self, transport: SessionTransport) -> bool:
        """
        Probe the health endpoint and update the running state.

        Returns:
            bool: True if the server answered 200
        """
        headers = {"Host": self.config.host_header}
        self.authenticate(headers)

        try:
            url = transport.build_url(self.config.health_endpoint)
            response = await transport.request("GET", url, headers=headers)
        except SessionServiceError as e:
            self.logger.debug(f"Health check failed: {e}")
            self.mark_stopped()
            return False

        if response.status == 200:
            self.mark_running()
            return True

        self.logger.debug(f"Health check returned status {response.status}")
        self.mark_stopped()
        return False

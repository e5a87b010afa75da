"""
Request authentication for the terminal server.

Authenticators attach credentials to the headers of an outgoing request.
They hold no state beyond the credential they were built with, so one
instance can sign any number of concurrent requests.
"""

from abc import ABC, abstractmethod
from typing import MutableMapping

from ..config import ServerConfig
from ..exceptions import ConfigurationError


LOCAL_AUTH_HEADER = "X-Terminal-Local-Auth"


class Authenticator(ABC):
    """Attaches credentials to an outgoing request."""

    @abstractmethod
    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        """
        Add authentication to the request headers in place.

        Args:
            headers: Header mapping of the request about to be sent
        """


class NoAuthAuthenticator(Authenticator):
    """For servers started without authentication."""

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        return None


class BearerTokenAuthenticator(Authenticator):
    """Sends ``Authorization: Bearer <token>``."""

    def __init__(self, token: str):
        if not token:
            raise ConfigurationError("Bearer authentication requires a token")
        self._token = token

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        headers["Authorization"] = f"Bearer {self._token}"


class LocalTokenAuthenticator(Authenticator):
    """Sends the per-launch token the local server trusts for loopback clients."""

    def __init__(self, token: str, header_name: str = LOCAL_AUTH_HEADER):
        if not token:
            raise ConfigurationError("Local authentication requires a token")
        self._token = token
        self.header_name = header_name

    def authenticate(self, headers: MutableMapping[str, str]) -> None:
        headers[self.header_name] = self._token


def create_authenticator(config: ServerConfig) -> Authenticator:
    """
    Create the authenticator selected by ``config.auth_mode``.

    Raises:
        ConfigurationError: If the mode is unknown or its token is missing
    """
    mode = config.auth_mode.lower()
    if mode == "none":
        return NoAuthAuthenticator()
    if mode == "bearer":
        return BearerTokenAuthenticator(config.auth_token)
    if mode == "local":
        return LocalTokenAuthenticator(config.auth_token)
    raise ConfigurationError(f"Unknown auth mode: {config.auth_mode}")

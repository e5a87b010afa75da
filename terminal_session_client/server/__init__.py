"""
Server access module for the Terminal Session Client.

This module handles request authentication, HTTP transport and the
client's view of whether the server is running.
"""

from .auth import (
    Authenticator,
    NoAuthAuthenticator,
    BearerTokenAuthenticator,
    LocalTokenAuthenticator,
    create_authenticator,
)
from .transport import SessionTransport, TransportResponse
from .server_manager import ServerManager

__all__ = [
    "Authenticator",
    "NoAuthAuthenticator",
    "BearerTokenAuthenticator",
    "LocalTokenAuthenticator",
    "create_authenticator",
    "SessionTransport",
    "TransportResponse",
    "ServerManager",
]

"""
Terminal Session Client - drive sessions on a remote terminal-hosting server.

This package creates, renames, feeds input to and terminates long-lived
remote process sessions, and keeps a local session list converged with the
server through polling refresh.
"""

__version__ = "0.1.0"

from .models import Session, SessionStatus, TitleMode, WindowRecord
from .config import Config, ServerConfig, MonitorConfig, load_config
from .exceptions import (
    TerminalSessionClientError,
    ConfigurationError,
    SessionServiceError,
    InvalidNameError,
    InvalidURLError,
    ServerNotRunningError,
    RequestFailedError,
    CreateFailedError,
    InvalidResponseError,
)
from .session_manager import SessionService, SessionMonitor, WindowTracker
from .client import SessionClient

__all__ = [
    "Session",
    "SessionStatus",
    "TitleMode",
    "WindowRecord",
    "Config",
    "ServerConfig",
    "MonitorConfig",
    "load_config",
    "TerminalSessionClientError",
    "ConfigurationError",
    "SessionServiceError",
    "InvalidNameError",
    "InvalidURLError",
    "ServerNotRunningError",
    "RequestFailedError",
    "CreateFailedError",
    "InvalidResponseError",
    "SessionService",
    "SessionMonitor",
    "WindowTracker",
    "SessionClient",
]

"""
Session manager module for the Terminal Session Client.

This module handles the session lifecycle protocol, the polled session list
and the windows this client opened for spawned terminals.
"""

from .session_service import SessionService
from .session_monitor import SessionMonitor
from .window_tracker import WindowTracker

__all__ = [
    "SessionService",
    "SessionMonitor",
    "WindowTracker"
]

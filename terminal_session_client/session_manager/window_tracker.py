"""
Registry of terminal windows this client opened.

Only sessions whose terminal this client caused to spawn are tracked, so
terminating a session never closes a window that belongs to an externally
attached client.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..models import WindowRecord


WindowCloser = Callable[[WindowRecord], None]


class WindowTracker:
    """
    Maps session ids to windows this client owns.

    All mutations go through one lock. Removal is idempotent: closing or
    forgetting an id that is not tracked is a no-op.
    """

    def __init__(self, window_closer: Optional[WindowCloser] = None):
        """
        Args:
            window_closer: Callable that closes the native window described by
                a record. When None, closing only drops the record.
        """
        self.window_closer = window_closer
        self.logger = logging.getLogger(__name__)
        self._windows: Dict[str, WindowRecord] = {}
        self._lock = threading.Lock()

    def register_window(self, session_id: str, window_ref: Any = None) -> WindowRecord:
        """Record that this client opened a window for ``session_id``."""
        record = WindowRecord(session_id=session_id, window_ref=window_ref)
        with self._lock:
            self._windows[session_id] = record
        self.logger.debug(f"Tracking window for session {session_id}")
        return record

    def is_tracked(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._windows

    def tracked_session_ids(self) -> List[str]:
        with self._lock:
            return list(self._windows)

    def close_window_if_opened_by_us(self, session_id: str) -> bool:
        """
        Close the window for ``session_id`` if this client opened it.

        The record is removed before the closer runs, so a second call for
        the same id is a no-op even if the first close raised.

        Returns:
            bool: True if a tracked window was found and closed

        Raises:
            Exception: Whatever the window closer raises
        """
        with self._lock:
            record = self._windows.pop(session_id, None)

        if record is None:
            self.logger.debug(f"No window opened by us for session {session_id}")
            return False

        if self.window_closer is not None:
            self.window_closer(record)
        self.logger.info(f"Closed window for terminated session {session_id}")
        return True

    def window_closed_externally(self, session_id: str) -> bool:
        """Forget a window the user closed; returns True if one was tracked."""
        with self._lock:
            return self._windows.pop(session_id, None) is not None

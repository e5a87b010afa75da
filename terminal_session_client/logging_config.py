"""
Structured logging and request timing.

This module provides a JSON formatter for machine-readable log files and a
timer that records the duration and outcome of every request sent to the
terminal server.
"""

import json
import logging
import time
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional


_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'message', 'taskName',
))


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if self.include_extra:
            for key, value in record.__dict__.items():
                if key not in _RESERVED_ATTRS:
                    log_data[key] = value

        return json.dumps(log_data, default=str)


class RequestOutcome:
    """Mutable holder the timed block fills in with the response status."""

    def __init__(self):
        self.status: Optional[int] = None


class RequestTimer:
    """Logs method, target, status and duration of server requests."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("terminal_session_client.requests")

    @contextmanager
    def time_request(self, method: str, url: str):
        """
        Context manager timing a single request.

        The block sets ``outcome.status`` once a response is available.
        """
        outcome = RequestOutcome()
        start_time = time.perf_counter()

        try:
            yield outcome
        except Exception as e:
            duration = time.perf_counter() - start_time
            self.logger.warning(
                f"{method} {url} failed after {duration:.3f}s: {e}",
                extra={
                    'http_method': method,
                    'url': url,
                    'phase': 'error',
                    'duration_seconds': duration,
                    'error': str(e),
                }
            )
            raise

        duration = time.perf_counter() - start_time
        self.logger.debug(
            f"{method} {url} -> {outcome.status} in {duration:.3f}s",
            extra={
                'http_method': method,
                'url': url,
                'phase': 'complete',
                'status': outcome.status,
                'duration_seconds': duration,
            }
        )

"""
Custom exceptions for the Terminal Session Client.

This module defines the exception hierarchy used throughout the application.
Session service failures form a closed set; each kind carries a fixed,
user-presentable description so callers never need to inspect raw transport
errors to render a message.
"""

from typing import Optional


class TerminalSessionClientError(Exception):
    """Base exception for all Terminal Session Client errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message

    @property
    def description(self) -> str:
        """Human readable description suitable for direct display."""
        return self.message


class ConfigurationError(TerminalSessionClientError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str = "Configuration error", details: Optional[str] = None):
        super().__init__(message, details)


class SessionServiceError(TerminalSessionClientError):
    """Base class for failures of session lifecycle operations."""

    def __init__(self, message: str = "Session operation failed", details: Optional[str] = None):
        super().__init__(message, details)


class InvalidNameError(SessionServiceError):
    """Raised when a session name is empty after trimming."""

    def __init__(self, message: str = "Session name cannot be empty", details: Optional[str] = None):
        super().__init__(message, details)


class InvalidURLError(SessionServiceError):
    """Raised when a request target cannot be built."""

    def __init__(self, message: str = "Invalid server URL", details: Optional[str] = None):
        super().__init__(message, details)


class ServerNotRunningError(SessionServiceError):
    """Raised when an operation requires a running server and there is none."""

    def __init__(self, message: str = "Server is not running", details: Optional[str] = None):
        super().__init__(message, details)


class RequestFailedError(SessionServiceError):
    """
    Raised when the server answers with an unexpected status.

    ``status_code`` is -1 when no HTTP status could be obtained at all,
    e.g. the connection failed before a response existed.
    """

    def __init__(self, status_code: int = -1, details: Optional[str] = None):
        self.status_code = status_code
        super().__init__(f"Request failed with status code: {status_code}", details)


class CreateFailedError(SessionServiceError):
    """Raised when the server refuses to create a session."""

    DEFAULT_MESSAGE = "Failed to create session"

    def __init__(self, message: str = DEFAULT_MESSAGE, details: Optional[str] = None):
        super().__init__(message, details)


class InvalidResponseError(SessionServiceError):
    """Raised when a success response is malformed or incomplete."""

    def __init__(self, message: str = "Invalid server response", details: Optional[str] = None):
        super().__init__(message, details)

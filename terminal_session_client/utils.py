"""
Utility functions and helpers for the Terminal Session Client.

This module provides common utilities for logging setup and for turning
errors into messages a user can read.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from .exceptions import TerminalSessionClientError, RequestFailedError
from .logging_config import StructuredFormatter


LOGGER_NAME = "terminal_session_client"


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None,
                  structured: bool = False) -> logging.Logger:
    """
    Set up logging configuration for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path. If None, logs to console only.
        structured: Write JSON records to the log file instead of plain text.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console output goes to stderr so command output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        ensure_directory_exists(str(Path(log_file).parent))

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3
        )
        file_handler.setFormatter(StructuredFormatter() if structured else formatter)
        logger.addHandler(file_handler)

    return logger


def format_error_for_display(error: Exception) -> str:
    """
    Format an error for display on the command line.

    Args:
        error: The exception to format

    Returns:
        str: User-facing message
    """
    if isinstance(error, TerminalSessionClientError):
        message = f"Error: {error.description}"
        if error.details and not isinstance(error, RequestFailedError):
            message += f" ({error.details})"
        return message
    return f"Unexpected error: {error}"


def normalize_name(name: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace; return None when nothing is left."""
    if name is None:
        return None
    trimmed = name.strip()
    return trimmed or None


def ensure_directory_exists(path: str) -> None:
    """
    Ensure that a directory exists, creating it if necessary.

    Raises:
        OSError: If directory cannot be created
    """
    Path(path).mkdir(parents=True, exist_ok=True)

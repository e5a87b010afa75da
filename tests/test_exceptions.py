"""
Unit tests for the exceptions module.
"""

import pytest
from terminal_session_client.exceptions import (
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


class TestTerminalSessionClientError:
    """Test the base exception class."""

    def test_basic_exception(self):
        error = TerminalSessionClientError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details is None

    def test_exception_with_details(self):
        error = TerminalSessionClientError("Test error", "Additional details")
        assert str(error) == "Test error: Additional details"
        assert error.description == "Test error"


class TestSessionServiceErrors:
    """Test the fixed descriptions of the session error taxonomy."""

    @pytest.mark.parametrize("error_class,description", [
        (InvalidNameError, "Session name cannot be empty"),
        (InvalidURLError, "Invalid server URL"),
        (ServerNotRunningError, "Server is not running"),
        (CreateFailedError, "Failed to create session"),
        (InvalidResponseError, "Invalid server response"),
    ])
    def test_default_descriptions(self, error_class, description):
        error = error_class()
        assert error.description == description
        assert isinstance(error, SessionServiceError)
        assert isinstance(error, TerminalSessionClientError)

    def test_request_failed_carries_status(self):
        error = RequestFailedError(404)
        assert error.status_code == 404
        assert error.description == "Request failed with status code: 404"

    def test_request_failed_without_response(self):
        error = RequestFailedError()
        assert error.status_code == -1
        assert error.description == "Request failed with status code: -1"

    def test_details_do_not_change_description(self):
        error = InvalidURLError(details="http://:0/api")
        assert error.description == "Invalid server URL"
        assert str(error) == "Invalid server URL: http://:0/api"

    def test_create_failed_with_server_message(self):
        error = CreateFailedError("disk full")
        assert error.description == "disk full"

    def test_configuration_error_is_not_a_session_error(self):
        assert not isinstance(ConfigurationError(), SessionServiceError)

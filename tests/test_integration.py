"""
End-to-end tests of SessionClient against the fake terminal server.
"""

from unittest.mock import MagicMock

import pytest

from terminal_session_client.client import SessionClient
from terminal_session_client.config import Config, ServerConfig
from terminal_session_client.exceptions import (
    CreateFailedError,
    RequestFailedError,
    ServerNotRunningError,
)
from terminal_session_client.models import SessionStatus
from tests.conftest import TEST_TOKEN


pytestmark = pytest.mark.integration


class TestSessionLifecycle:
    """Drive a full session lifecycle over HTTP."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, terminal_server, live_config):
        closer = MagicMock()

        async with SessionClient(live_config, window_closer=closer) as client:
            assert client.server.is_running
            service = client.service

            session_id = await service.create_session(
                command=["ls"], working_dir="/tmp", name=" listing ", cols=80, rows=24
            )
            session = client.monitor.get_session(session_id)
            assert session is not None
            assert session.name == "listing"
            assert session.command == ("ls",)

            await service.rename_session(session_id, "renamed")
            assert client.monitor.get_session(session_id).name == "renamed"

            await service.send_input(session_id, "echo hi\n")
            await service.send_key(session_id, "enter")
            assert terminal_server.inputs == [
                {"session_id": session_id, "text": "echo hi\n"},
                {"session_id": session_id, "key": "enter"},
            ]

            await service.terminate_session(session_id)
            closer.assert_not_called()

            await client.monitor.refresh()
            assert client.monitor.get_session(session_id).status == SessionStatus.EXITED
            assert client.monitor.visible_sessions(hide_exited=True) == []

            removed = await service.cleanup_exited_sessions()
            assert removed == 1
            assert client.monitor.sessions == ()

    @pytest.mark.asyncio
    async def test_spawned_session_window_closed_on_terminate(self, terminal_server, live_config):
        closer = MagicMock()

        async with SessionClient(live_config, window_closer=closer) as client:
            session_id = await client.service.create_session(
                command=["zsh"], working_dir="/", spawn_terminal=True
            )
            assert client.window_tracker.is_tracked(session_id)

            await client.service.terminate_session(session_id)
            await client.service.terminate_session(session_id)

        closer.assert_called_once()
        assert closer.call_args[0][0].session_id == session_id

    @pytest.mark.asyncio
    async def test_every_request_is_authenticated(self, terminal_server, live_config):
        async with SessionClient(live_config) as client:
            session_id = await client.service.create_session(command=["ls"], working_dir="/")
            await client.service.rename_session(session_id, "x")

        for request in terminal_server.requests:
            assert request['headers']['Authorization'] == f"Bearer {TEST_TOKEN}"
            assert request['headers']['Host'] == "localhost"

    @pytest.mark.asyncio
    async def test_terminate_unknown_session(self, terminal_server, live_config):
        async with SessionClient(live_config) as client:
            with pytest.raises(RequestFailedError) as exc_info:
                await client.service.terminate_session("missing")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_create_failure_message(self, terminal_server, live_config):
        terminal_server.create_error = {"error": "disk full"}

        async with SessionClient(live_config) as client:
            with pytest.raises(CreateFailedError) as exc_info:
                await client.service.create_session(command=["ls"], working_dir="/")

        assert exc_info.value.message == "disk full"

    @pytest.mark.asyncio
    async def test_wrong_token_is_rejected(self, terminal_server, live_config):
        live_config.server.auth_token = "wrong"

        async with SessionClient(live_config) as client:
            assert not client.server.is_running
            with pytest.raises(RequestFailedError) as exc_info:
                await client.service.rename_session("any", "name")

        assert exc_info.value.status_code == 401


class TestServerDown:
    """Behaviour when nothing is listening."""

    @pytest.mark.asyncio
    async def test_operations_require_running_server(self, free_port):
        config = Config(server=ServerConfig(port=free_port, request_timeout=2.0))

        async with SessionClient(config) as client:
            assert not client.server.is_running
            assert client.monitor.sessions == ()

            with pytest.raises(ServerNotRunningError):
                await client.service.send_input("abc123", "x")
            with pytest.raises(ServerNotRunningError):
                await client.service.create_session(command=["ls"], working_dir="/")

            with pytest.raises(RequestFailedError) as exc_info:
                await client.service.terminate_session("abc123")
            assert exc_info.value.status_code == -1

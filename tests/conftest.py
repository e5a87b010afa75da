"""
Test configuration and fixtures for Terminal Session Client.

This module provides shared fixtures: a recording transport for unit tests
of the service and monitor, and an in-process aiohttp server that mimics the
terminal server's session API for transport and end-to-end tests.
"""

import itertools
import json
import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from terminal_session_client.config import Config, ServerConfig, MonitorConfig
from terminal_session_client.server.server_manager import ServerManager
from terminal_session_client.server.transport import SessionTransport, TransportResponse
from terminal_session_client.session_manager.session_monitor import SessionMonitor
from terminal_session_client.session_manager.session_service import SessionService
from terminal_session_client.session_manager.window_tracker import WindowTracker


TEST_PORT = 4020
TEST_TOKEN = "test-token-12345"
TEST_SESSION_ID = "abc123"


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: Dict[str, str]
    json_body: Any = None


class RecordingTransport(SessionTransport):
    """Transport that records requests and replays queued responses."""

    def __init__(self, config: ServerConfig):
        super().__init__(config)
        self.calls: List[RecordedRequest] = []
        self.responses: List[Any] = []

    def queue(self, status: int, body: Any = None) -> None:
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf-8")
        elif isinstance(body, str):
            body = body.encode("utf-8")
        self.responses.append(TransportResponse(status=status, body=body or b""))

    def queue_error(self, error: Exception) -> None:
        self.responses.append(error)

    async def request(self, method, url, headers=None, json_body=None):
        self.calls.append(RecordedRequest(method, str(url), dict(headers or {}), json_body))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so they don't outlive a test."""
    yield
    logger = logging.getLogger("terminal_session_client")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def free_port():
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def server_config():
    return ServerConfig(port=TEST_PORT, auth_mode="bearer", auth_token=TEST_TOKEN)


@pytest.fixture
def server_manager(server_config):
    return ServerManager(server_config, is_running=True)


@pytest.fixture
def transport(server_config):
    return RecordingTransport(server_config)


@pytest.fixture
def monitor():
    fake = MagicMock(spec=SessionMonitor)
    fake.refresh = AsyncMock()
    return fake


@pytest.fixture
def window_closer():
    return MagicMock()


@pytest.fixture
def window_tracker(window_closer):
    return WindowTracker(window_closer)


@pytest.fixture
def service(server_manager, transport, monitor, window_tracker):
    return SessionService(server_manager, transport, monitor, window_tracker)


def make_session_entry(session_id: str, status: str = "running", **overrides) -> Dict[str, Any]:
    entry = {
        "id": session_id,
        "name": f"name-{session_id}",
        "command": ["bash", "-l"],
        "workingDir": "/tmp",
        "status": status,
        "pid": 4242,
        "startedAt": "2024-05-01T10:00:00.000Z",
        "lastModified": "2024-05-01T10:05:00.000Z",
        "initialCols": 120,
        "initialRows": 30,
    }
    entry.update(overrides)
    return entry


class FakeTerminalServer:
    """Minimal in-memory rendition of the terminal server's session API."""

    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.inputs: List[Dict[str, Any]] = []
        self.requests: List[Dict[str, Any]] = []
        self.create_error: Optional[Dict[str, Any]] = None
        self.port: Optional[int] = None
        self._ids = (f"session-{n}" for n in itertools.count(1))

        self.app = web.Application(middlewares=[self._record])
        self.app.router.add_get('/api/health', self._health)
        self.app.router.add_get('/api/sessions', self._list)
        self.app.router.add_post('/api/sessions', self._create)
        self.app.router.add_patch('/api/sessions/{session_id}', self._rename)
        self.app.router.add_delete('/api/sessions/{session_id}', self._delete)
        self.app.router.add_post('/api/sessions/{session_id}/input', self._input)
        self.app.router.add_post('/api/cleanup-exited', self._cleanup)

    @web.middleware
    async def _record(self, request, handler):
        self.requests.append({
            'method': request.method,
            'path': request.path,
            'headers': dict(request.headers),
        })
        if self.token and request.headers.get('Authorization') != f"Bearer {self.token}":
            return web.json_response({'error': 'Unauthorized'}, status=401)
        return await handler(request)

    async def _health(self, request):
        return web.json_response({'status': 'ok'})

    async def _list(self, request):
        return web.json_response(list(self.sessions.values()))

    async def _create(self, request):
        body = await request.json()
        if self.create_error is not None:
            return web.json_response(self.create_error, status=400)
        session_id = next(self._ids)
        self.sessions[session_id] = make_session_entry(
            session_id,
            name=body.get('name', ''),
            command=body['command'],
            workingDir=body['workingDir'],
            titleMode=body.get('titleMode'),
        )
        return web.json_response({'sessionId': session_id})

    async def _rename(self, request):
        session = self.sessions.get(request.match_info['session_id'])
        if session is None:
            return web.json_response({'error': 'Session not found'}, status=404)
        body = await request.json()
        session['name'] = body['name']
        return web.json_response({'success': True})

    async def _delete(self, request):
        session = self.sessions.get(request.match_info['session_id'])
        if session is None:
            return web.json_response({'error': 'Session not found'}, status=404)
        session['status'] = 'exited'
        return web.json_response({'success': True})

    async def _input(self, request):
        if request.match_info['session_id'] not in self.sessions:
            return web.json_response({'error': 'Session not found'}, status=404)
        self.inputs.append({'session_id': request.match_info['session_id'], **await request.json()})
        return web.Response(status=204)

    async def _cleanup(self, request):
        exited = [sid for sid, s in self.sessions.items() if s['status'] == 'exited']
        for sid in exited:
            del self.sessions[sid]
        return web.json_response({'removed': len(exited)})


@pytest_asyncio.fixture
async def terminal_server():
    """Start a fake terminal server on a free local port."""
    fake = FakeTerminalServer(token=TEST_TOKEN)
    server = TestServer(fake.app, host="127.0.0.1")
    await server.start_server()
    fake.port = server.port
    yield fake
    await server.close()


@pytest.fixture
def live_config(terminal_server):
    """Configuration pointing at the fake terminal server."""
    return Config(
        server=ServerConfig(
            base_url="http://127.0.0.1",
            port=terminal_server.port,
            auth_mode="bearer",
            auth_token=TEST_TOKEN,
            request_timeout=5.0,
        ),
        monitor=MonitorConfig(refresh_interval=0.05),
    )

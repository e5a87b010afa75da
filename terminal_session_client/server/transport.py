"""
HTTP transport for the terminal server.

SessionTransport issues one request at a time against the configured server
and hands back the status code and raw body. It knows nothing about
sessions; building paths, headers and bodies is the caller's job.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp
from yarl import URL

from ..config import ServerConfig
from ..exceptions import InvalidURLError, RequestFailedError
from ..logging_config import RequestTimer


@dataclass(frozen=True)
class TransportResponse:
    """Status code and body of a completed request."""
    status: int
    body: bytes = b""

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Raises:
            ValueError: If the body is empty or not valid JSON
        """
        return json.loads(self.body.decode("utf-8"))


class SessionTransport:
    """
    aiohttp-backed request executor.

    The underlying ``aiohttp.ClientSession`` is created on first use and
    released by :meth:`close` unless it was supplied by the caller.
    """

    def __init__(self, config: ServerConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.timer = RequestTimer()
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SessionTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def build_url(self, path: str) -> URL:
        """
        Compose the configured base URL, port and an already-encoded path.

        Raises:
            InvalidURLError: If no valid URL can be built
        """
        port = self.config.port
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port <= 65535:
            raise InvalidURLError(details=f"port {port!r}")

        try:
            base = URL(self.config.base_url)
        except (TypeError, ValueError) as e:
            raise InvalidURLError(details=str(e)) from e

        if base.scheme not in ("http", "https") or not base.raw_host:
            raise InvalidURLError(details=self.config.base_url)

        try:
            return URL.build(
                scheme=base.scheme,
                host=base.raw_host,
                port=port,
                path=path,
                encoded=True,
            )
        except (TypeError, ValueError) as e:
            raise InvalidURLError(details=f"{self.config.base_url}:{port}{path}") from e

    async def request(
        self,
        method: str,
        url: URL,
        headers: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> TransportResponse:
        """
        Execute a single request.

        Args:
            method: HTTP method
            url: Target built with :meth:`build_url`
            headers: Complete request headers, authentication included
            json_body: Object to serialize as the JSON request body

        Returns:
            TransportResponse: Status and body of the response

        Raises:
            RequestFailedError: With status -1 if no response was obtained
        """
        session = self._get_session()
        data = json.dumps(json_body).encode("utf-8") if json_body is not None else None

        with self.timer.time_request(method, str(url)) as outcome:
            try:
                async with session.request(method, url, headers=dict(headers or {}), data=data) as response:
                    body = await response.read()
                    outcome.status = response.status
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise RequestFailedError(-1, details=str(e) or type(e).__name__) from e

        return TransportResponse(status=outcome.status, body=body)

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

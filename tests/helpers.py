"""
Test helpers: a fake Streamline control plane served by aiohttp and session doubles.
"""

from collections import deque
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from aiohttp import test_utils, web

from streamline.core.config import StreamlineOptions
from streamline.resilience import RetryPolicy, RetryPolicyOptions


class FakeBroker:
    """Minimal control plane: /health with scripted status codes and a /v1 echo API."""

    def __init__(self):
        self.health_statuses = deque()
        self.default_status = 200
        self.health_hits = 0
        self.requests = []

        self.app = web.Application()
        self.app.router.add_get("/health", self._health)
        self.app.router.add_route("*", "/v1/{tail:.*}", self._api)
        self.server = test_utils.TestServer(self.app)

    async def _health(self, request: web.Request) -> web.Response:
        self.health_hits += 1
        status = self.health_statuses.popleft() if self.health_statuses else self.default_status
        return web.Response(status=status)

    async def _api(self, request: web.Request) -> web.Response:
        body = await request.read()
        self.requests.append((request.method, request.path, body))
        return web.json_response({"method": request.method, "path": request.path})

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def base_url(self) -> str:
        return f"http://{self.server.host}:{self.server.port}"

    def options(self) -> StreamlineOptions:
        return StreamlineOptions(bootstrap_servers=f"{self.server.host}:9092", http_port=self.port)


def fast_retry_policy(max_retries: int = 2) -> RetryPolicy:
    """Retry policy with millisecond backoff for tests."""
    return RetryPolicy(RetryPolicyOptions(
        max_retries=max_retries,
        base_delay=timedelta(milliseconds=1),
        max_delay=timedelta(milliseconds=5),
    ))


def mock_session(health_status: int = 200) -> MagicMock:
    """Session double whose /health probe returns health_status and whose request() is an AsyncMock."""
    session = MagicMock()
    probe_response = MagicMock(status=health_status)
    session.get.return_value.__aenter__.return_value = probe_response
    session.get.return_value.__aexit__.return_value = False
    session.request = AsyncMock()
    session.close = AsyncMock()
    return session


def mock_response(status: int = 200, body: bytes = b"{}") -> MagicMock:
    response = MagicMock(status=status)
    response.read = AsyncMock(return_value=body)
    return response

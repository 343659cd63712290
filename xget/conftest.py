from typing import Callable, Optional

import httpx
import pytest

from xget.deps.upstream import get_http_client
from xget.main import app

ResponseFactory = Callable[[httpx.Request], httpx.Response]


class StreamedBody(httpx.AsyncByteStream):
    """Response body delivered in chunks, the way a network transport does."""

    def __init__(self, body: bytes, chunk_size: int = 16):
        self.body = body
        self.chunk_size = chunk_size

    async def __aiter__(self):
        for start in range(0, len(self.body), self.chunk_size):
            yield self.body[start : start + self.chunk_size]


class FakeUpstream:
    """In-memory stand-in for upstream registries and their token servers.

    Responses are registered per (method, scheme://host/path); every request
    that reaches the fake is recorded in ``requests``.
    """

    def __init__(self):
        self.handlers: dict[tuple[str, str], ResponseFactory] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, status_code: int = 200, **kwargs):
        self.handlers[(method, url)] = lambda request: httpx.Response(
            status_code, **kwargs
        )

    def add_handler(self, method: str, url: str, handler: ResponseFactory):
        self.handlers[(method, url)] = handler

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if _route_url(r) == url]

    def last_request(self, url: str) -> Optional[httpx.Request]:
        matching = self.requests_to(url)
        return matching[-1] if matching else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.get((request.method, _route_url(request)))
        if handler is None:
            response = httpx.Response(404, json={"errors": [{"code": "NOT_FOUND"}]})
        else:
            response = handler(request)
        # Responses built from json=/content= are already read; hand the
        # bytes back as an unread stream so callers can relay them raw.
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            stream=StreamedBody(response.content),
        )


def _route_url(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


@pytest.fixture(scope="function")
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture(scope="function")
async def upstream_client(upstream: FakeUpstream):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(upstream), follow_redirects=True
    ) as client:
        yield client


@pytest.fixture(scope="function")
async def client(upstream_client: httpx.AsyncClient):
    """
    Provide a test client for the proxy with upstream traffic going to the fake.
    """
    app.dependency_overrides[get_http_client] = lambda: upstream_client

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://proxy.example.com",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

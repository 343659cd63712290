"""Shared upstream HTTP client dependency.

One httpx.AsyncClient is created in the application lifespan and stored on
``app.state``; route handlers receive it through ``UpstreamClient``.
"""

from typing import Annotated

import httpx
from fastapi import Depends, Request

from xget.settings import settings


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.UPSTREAM_CONNECT_TIMEOUT,
            read=settings.UPSTREAM_READ_TIMEOUT,
            write=settings.UPSTREAM_WRITE_TIMEOUT,
            pool=settings.UPSTREAM_POOL_TIMEOUT,
        ),
        # Docker Hub answers blob requests with a 307 to its storage backend
        follow_redirects=True,
    )


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


UpstreamClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]

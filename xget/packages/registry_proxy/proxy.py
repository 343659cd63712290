"""Generic HTTP proxy utilities for Docker Registry API.

This module provides pure utility functions for proxying HTTP requests.
No dependencies on xget.* modules to maintain independence and reusability.
"""

from typing import AsyncIterator, Optional

import httpx
import structlog
from fastapi import Request
from fastapi.responses import StreamingResponse

from .types import RegistryTarget

logger = structlog.stdlib.get_logger(__name__)

FORWARDED_REQUEST_HEADERS = [
    "Accept",
    "Content-Type",
    "Content-Length",
    "Docker-Content-Digest",
    "Range",
]

HOP_BY_HOP_HEADERS = [
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
]

URL_HEADERS = ["location", "docker-upload-location"]

REGISTRY_API_VERSION = "registry/2.0"


async def stream_request_body(request: Request) -> AsyncIterator[bytes]:
    """Stream request body from client in chunks.

    Args:
        request: FastAPI request object

    Yields:
        Chunks of request body data
    """
    async for chunk in request.stream():
        yield chunk


async def send_upstream(
    client: httpx.AsyncClient,
    request: Request,
    target_url: str,
    authorization: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> httpx.Response:
    """Send the client's request to the upstream registry.

    The response is opened in streaming mode; the caller owns it and must
    either hand it to ``build_proxy_response`` or close it.

    Args:
        client: Shared HTTP client
        request: Original FastAPI request from the Docker client
        target_url: Full upstream URL
        authorization: Authorization header value to send, if any
        user_agent: User-Agent to present upstream

    Raises:
        httpx.HTTPError: If the upstream request fails
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent
    if authorization:
        headers["Authorization"] = authorization

    for header_name in FORWARDED_REQUEST_HEADERS:
        if header_name.lower() in request.headers:
            headers[header_name] = request.headers[header_name.lower()]

    query_params = dict(request.query_params)

    if request.method in ["POST", "PUT", "PATCH"]:
        upstream_request = client.build_request(
            method=request.method,
            url=target_url,
            headers=headers,
            params=query_params,
            content=stream_request_body(request),
        )
    else:
        upstream_request = client.build_request(
            method=request.method,
            url=target_url,
            headers=headers,
            params=query_params,
        )

    try:
        response = await client.send(upstream_request, stream=True)
    except httpx.TimeoutException as e:
        logger.error(
            "Timeout while proxying request",
            error=str(e),
            target_url=target_url,
        )
        raise
    except httpx.HTTPError as e:
        logger.error(
            "HTTP error while proxying request",
            error=str(e),
            target_url=target_url,
        )
        raise

    logger.info(
        "Proxy response received",
        method=request.method,
        status_code=response.status_code,
        target_url=target_url,
    )
    return response


def rewrite_location(value: str, target: RegistryTarget, proxy_base_url: str) -> str:
    """Point an upstream Location back at the proxy.

    FROM: https://quay.io/v2/coreos/etcd/blobs/uploads/abc
    TO:   https://proxy.example.com/v2/cr/quay/coreos/etcd/blobs/uploads/abc
    """
    if value.startswith(f"{target.origin}/v2/"):
        return proxy_base_url + target.proxy_path(value[len(target.origin):])
    if value.startswith("/v2/"):
        return target.proxy_path(value)
    return value


async def relay_body(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """Yield the raw upstream body, closing the upstream response on exit.

    The close also runs when the client disconnects and the stream is
    abandoned part way through.
    """
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    finally:
        await upstream.aclose()


def build_proxy_response(
    upstream: httpx.Response,
    target: RegistryTarget,
    proxy_base_url: str,
) -> StreamingResponse:
    """Stream an upstream response back to the client.

    Hop-by-hop headers are dropped, upload/redirect locations are rewritten to
    the proxy and the registry API version header is always set. The upstream
    response is closed once the body has been sent or abandoned.
    """
    response_headers = {}
    for header_name, header_value in upstream.headers.items():
        if header_name.lower() not in HOP_BY_HOP_HEADERS:
            response_headers[header_name.lower()] = header_value

    for header_name in URL_HEADERS:
        if header_name in response_headers:
            original_value = response_headers[header_name]
            rewritten_value = rewrite_location(original_value, target, proxy_base_url)
            if rewritten_value != original_value:
                response_headers[header_name] = rewritten_value
                logger.debug(
                    "Rewrote Location header",
                    header_name=header_name,
                    original=original_value,
                    rewritten=rewritten_value,
                )

    response_headers["docker-distribution-api-version"] = REGISTRY_API_VERSION

    return StreamingResponse(
        content=relay_body(upstream),
        status_code=upstream.status_code,
        headers=response_headers,
    )

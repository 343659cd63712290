from typing import Any, Optional

import httpx
from fastapi import Response
from fastapi.responses import JSONResponse

from xget.packages.registry_proxy.proxy import HOP_BY_HOP_HEADERS, REGISTRY_API_VERSION

# httpx has already decoded the body we relay
DECODED_BODY_HEADERS = ["content-encoding", "content-length"]


def docker_error_response(
    status_code: int,
    error_code: str,
    message: str,
    detail: Optional[Any] = None,
) -> JSONResponse:
    """Create a Docker Registry v2 API compliant error response.

    See: https://docs.docker.com/registry/spec/api/#errors
    """
    error_obj = {
        "code": error_code,
        "message": message,
    }
    if detail:
        error_obj["detail"] = detail

    return JSONResponse(
        status_code=status_code,
        content={"errors": [error_obj]},
        headers={"Docker-Distribution-API-Version": REGISTRY_API_VERSION},
    )


def passthrough_response(upstream: httpx.Response) -> Response:
    """Return a fully read upstream response to the client as it arrived.

    Status, body and end-to-end headers are kept.
    """
    headers = {}
    for header_name, header_value in upstream.headers.items():
        name = header_name.lower()
        if name in HOP_BY_HOP_HEADERS or name in DECODED_BODY_HEADERS:
            continue
        headers[name] = header_value
    headers.setdefault("docker-distribution-api-version", REGISTRY_API_VERSION)

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=headers,
    )

"""WWW-Authenticate handling for the Docker Registry v2 token flow.

Parses the Bearer challenge returned by upstream registries and builds the
challenge the proxy sends to its own clients, so that clients come back to the
proxy's /v2/auth endpoint for their tokens.
"""

import re
from typing import Union

import structlog
from fastapi.responses import JSONResponse
from starlette.datastructures import URL

from .exceptions import MalformedChallenge
from .types import AuthChallenge

logger = structlog.stdlib.get_logger(__name__)

PROXY_SERVICE = "Xget"

# Every double-quoted value that directly follows an "="
_QUOTED_VALUE = re.compile(r'(?<==")(?:\\.|[^"\\])*(?=")')


def parse_authenticate(header_value: str) -> AuthChallenge:
    """Extract realm and service from a Bearer challenge.

    Values are taken by position, not by attribute name: the first quoted
    value is the realm, the second the service.

    Example:
        Bearer realm="https://auth.docker.io/token",service="registry.docker.io"

    Raises:
        MalformedChallenge: fewer than two quoted values were found
    """
    matches = _QUOTED_VALUE.findall(header_value or "")
    if len(matches) < 2:
        logger.warning("Malformed WWW-Authenticate header", header=header_value)
        raise MalformedChallenge(header_value)

    return AuthChallenge(realm=matches[0], service=matches[1])


def build_unauthorized(request_url: Union[str, URL]) -> JSONResponse:
    """Build the 401 that points the client at the proxy's own token endpoint.

    Args:
        request_url: URL the client requested; only its hostname is used

    Returns:
        401 JSONResponse with a Bearer WWW-Authenticate header
    """
    hostname = URL(str(request_url)).hostname
    return JSONResponse(
        status_code=401,
        content={"message": "UNAUTHORIZED"},
        headers={
            "WWW-Authenticate": (
                f'Bearer realm="https://{hostname}/v2/auth",service="{PROXY_SERVICE}"'
            ),
        },
    )

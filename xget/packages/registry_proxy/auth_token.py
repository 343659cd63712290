"""Bearer token acquisition from a registry's token server."""

from typing import Optional

import httpx
import structlog

from .types import AuthChallenge, TokenRequest

logger = structlog.stdlib.get_logger(__name__)


async def request_token(
    token_request: TokenRequest,
    client: httpx.AsyncClient,
) -> httpx.Response:
    """Send one GET to the realm of a token request.

    The response is returned as-is. Network errors propagate and non-2xx
    responses are not treated as failures here; the caller decides.

    Args:
        token_request: Challenge, scope and credentials for the call
        client: Shared HTTP client (its timeouts apply)

    Returns:
        Response from the token server

    Raises:
        httpx.HTTPError: If the token server could not be reached
    """
    challenge = token_request.challenge

    params = {}
    if challenge.service:
        params["service"] = challenge.service
    if token_request.scope:
        params["scope"] = token_request.scope

    headers = {}
    if token_request.authorization:
        headers["Authorization"] = token_request.authorization

    logger.info(
        "Requesting registry token",
        realm=challenge.realm,
        service=challenge.service,
        scope=token_request.scope,
        authenticated=bool(token_request.authorization),
    )

    try:
        response = await client.get(challenge.realm, params=params, headers=headers)
    except httpx.HTTPError as e:
        logger.error(
            "HTTP error while requesting registry token",
            realm=challenge.realm,
            error=str(e),
        )
        raise

    logger.info(
        "Token response received",
        realm=challenge.realm,
        status_code=response.status_code,
    )
    return response


async def fetch_token(
    challenge: AuthChallenge,
    scope: Optional[str],
    authorization: Optional[str],
    client: httpx.AsyncClient,
) -> httpx.Response:
    """Request a token for ``scope`` from the realm named in ``challenge``."""
    return await request_token(
        TokenRequest(challenge=challenge, scope=scope, authorization=authorization),
        client,
    )


def bearer_from_response(response: httpx.Response) -> Optional[str]:
    """Pull the bearer token out of a successful token server response.

    Token servers answer with ``token``, ``access_token`` or both.
    """
    if not response.is_success:
        return None

    try:
        payload = response.json()
    except ValueError:
        logger.warning(
            "Token server returned a non-JSON body",
            status_code=response.status_code,
        )
        return None

    if not isinstance(payload, dict):
        return None
    return payload.get("token") or payload.get("access_token")

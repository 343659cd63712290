"""Docker Registry v2 API Proxy.

This module implements the Docker Registry HTTP API V2 surface of the proxy,
forwarding requests to the upstream registry selected by the Host header
(``quay.proxy.example.com``) or by a ``/v2/cr/<registry>/`` path prefix.

Authentication is brokered: an upstream 401 is answered with a challenge
pointing at this proxy's ``/v2/auth``, which in turn obtains the token from
the upstream registry's own token server.

See: https://docs.docker.com/registry/spec/api/
"""

from typing import Optional

import httpx
import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

from xget.deps.upstream import UpstreamClient
from xget.packages.registry_proxy import (
    RegistryTarget,
    build_proxy_response,
    build_unauthorized,
    bearer_from_response,
    complete_docker_hub_scope,
    fetch_token,
    handle_docker_hub_library_redirect,
    is_docker_hub,
    parse_authenticate,
    repository_from_path,
    resolve_scope,
    resolve_target,
    route_keys,
    send_upstream,
)
from xget.packages.registry_proxy.proxy import REGISTRY_API_VERSION
from xget.settings import settings
from xget.utils.response_helpers import docker_error_response, passthrough_response

logger = structlog.stdlib.get_logger(__name__)

router = APIRouter(tags=["Docker Proxy"])

RETRYABLE_METHODS = ["GET", "HEAD"]


def _proxy_base_url(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


def _unauthorized(request: Request) -> JSONResponse:
    response = build_unauthorized(request.url)
    response.headers["Docker-Distribution-API-Version"] = REGISTRY_API_VERSION
    return response


def _unsupported_registry(target: RegistryTarget) -> JSONResponse:
    logger.info("No upstream registry for request", key=target.key)
    return docker_error_response(
        status_code=404,
        error_code="UNSUPPORTED",
        message="unsupported registry",
        detail={"key": target.key, "routes": route_keys()},
    )


async def _fetch_bearer(
    client: httpx.AsyncClient,
    target: RegistryTarget,
    challenge_header: Optional[str],
    authorization: Optional[str],
) -> Optional[str]:
    """Obtain a pull token for the repository addressed by ``target``.

    Raises:
        MalformedChallenge: upstream challenge could not be parsed
    """
    if not challenge_header:
        return None

    challenge = parse_authenticate(challenge_header)

    repository = repository_from_path(target.upstream_path)
    scope = f"repository:{repository}:pull" if repository else None
    if is_docker_hub(target.origin):
        scope = complete_docker_hub_scope(scope)

    token_response = await fetch_token(challenge, scope, authorization, client)
    return bearer_from_response(token_response)


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/v2/", status_code=301)


@router.api_route("/v2/", methods=["GET", "HEAD"])
async def registry_version_check(request: Request, client: UpstreamClient):
    """Docker Registry API version check.

    Host-routed requests probe the upstream registry so that its auth
    requirement reaches the client as our own challenge. Path-routed
    deployments have no registry to probe yet and answer 200 directly.
    """
    target = resolve_target(
        request.headers.get("host"), "", settings.FALLBACK_UPSTREAM
    )
    if not target.found:
        logger.debug("Docker registry version check")
        return JSONResponse(
            status_code=200,
            content={},
            headers={"Docker-Distribution-API-Version": REGISTRY_API_VERSION},
        )

    upstream = await send_upstream(
        client,
        request,
        f"{target.origin}/v2/",
        authorization=request.headers.get("authorization"),
        user_agent=settings.USER_AGENT,
    )
    if upstream.status_code == 401:
        await upstream.aclose()
        return _unauthorized(request)

    return build_proxy_response(upstream, target, _proxy_base_url(request))


@router.api_route("/v2/auth", methods=["GET", "HEAD"])
async def registry_token(request: Request, client: UpstreamClient):
    """Token endpoint advertised in our WWW-Authenticate challenge.

    Discovers the upstream token server from the upstream's own challenge and
    returns its token response unchanged.
    """
    target, scope = resolve_scope(
        request.headers.get("host"),
        request.query_params.get("scope"),
        settings.FALLBACK_UPSTREAM,
    )
    if not target.found:
        return _unsupported_registry(target)

    probe = await client.get(
        f"{target.origin}/v2/", headers={"User-Agent": settings.USER_AGENT}
    )
    if probe.status_code != 401:
        return passthrough_response(probe)

    challenge_header = probe.headers.get("www-authenticate")
    if challenge_header is None:
        return passthrough_response(probe)

    challenge = parse_authenticate(challenge_header)

    if is_docker_hub(target.origin):
        scope = complete_docker_hub_scope(scope)

    logger.info(
        "Docker token request",
        key=target.key,
        origin=target.origin,
        scope=scope,
    )

    token_response = await fetch_token(
        challenge, scope, request.headers.get("authorization"), client
    )
    return passthrough_response(token_response)


@router.api_route(
    "/v2/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
)
async def proxy_registry(request: Request, path: str, client: UpstreamClient):
    """Forward a manifest, blob, tag or upload request upstream.

    Args:
        path: Request path after /v2/ (e.g., "cr/docker/busybox/manifests/latest")

    Returns:
        Streaming upstream response, a library redirect for Docker Hub short
        names, or our 401 challenge
    """
    target = resolve_target(
        request.headers.get("host"), path, settings.FALLBACK_UPSTREAM
    )
    if not target.found:
        return _unsupported_registry(target)

    if is_docker_hub(target.origin):
        library_path = handle_docker_hub_library_redirect(target.upstream_path)
        if library_path is not None:
            redirect_url = request.url.replace(path=target.proxy_path(library_path))
            logger.info(
                "Redirecting to Docker Hub library image",
                original=request.url.path,
                redirect=redirect_url.path,
            )
            return RedirectResponse(url=str(redirect_url), status_code=301)

    target_url = f"{target.origin}{target.upstream_path}"
    authorization = request.headers.get("authorization")

    logger.info(
        "Proxying registry request",
        method=request.method,
        key=target.key,
        target_url=target_url,
    )

    upstream = await send_upstream(
        client,
        request,
        target_url,
        authorization=authorization,
        user_agent=settings.USER_AGENT,
    )
    if upstream.status_code != 401:
        return build_proxy_response(upstream, target, _proxy_base_url(request))

    challenge_header = upstream.headers.get("www-authenticate")
    await upstream.aclose()

    has_bearer = bool(authorization) and authorization.lower().startswith("bearer ")
    if (
        not settings.TRANSPARENT_TOKEN_AUTH
        or request.method not in RETRYABLE_METHODS
        or has_bearer
    ):
        return _unauthorized(request)

    token = await _fetch_bearer(client, target, challenge_header, authorization)
    if not token:
        logger.info("No token obtained for upstream request", key=target.key)
        return _unauthorized(request)

    upstream = await send_upstream(
        client,
        request,
        target_url,
        authorization=f"Bearer {token}",
        user_agent=settings.USER_AGENT,
    )
    if upstream.status_code == 401:
        await upstream.aclose()
        return _unauthorized(request)

    return build_proxy_response(upstream, target, _proxy_base_url(request))


"""Registry proxy package for Docker Registry v2 API.

This package provides routing, authentication and path helpers for proxying
Docker Registry API requests to upstream container registries.
"""

from .auth_token import bearer_from_response, fetch_token, request_token
from .challenge import PROXY_SERVICE, build_unauthorized, parse_authenticate
from .exceptions import MalformedChallenge, RegistryProxyError
from .library import complete_docker_hub_scope, handle_docker_hub_library_redirect
from .proxy import build_proxy_response, send_upstream, stream_request_body
from .route_table import (
    DOCKER_HUB_URL,
    DOCKER_ROUTES,
    is_container_registry,
    is_docker_hub,
    route_by_host,
    route_keys,
)
from .target import repository_from_path, resolve_scope, resolve_target
from .types import AuthChallenge, RegistryTarget, RouteEntry, TokenRequest

__all__ = [
    # Types
    "AuthChallenge",
    "RegistryTarget",
    "RouteEntry",
    "TokenRequest",
    # Errors
    "MalformedChallenge",
    "RegistryProxyError",
    # Routing
    "DOCKER_HUB_URL",
    "DOCKER_ROUTES",
    "is_container_registry",
    "is_docker_hub",
    "route_by_host",
    "route_keys",
    "resolve_target",
    "resolve_scope",
    "repository_from_path",
    # Auth
    "PROXY_SERVICE",
    "build_unauthorized",
    "parse_authenticate",
    "bearer_from_response",
    "fetch_token",
    "request_token",
    # Docker Hub
    "complete_docker_hub_scope",
    "handle_docker_hub_library_redirect",
    # Utilities
    "build_proxy_response",
    "send_upstream",
    "stream_request_body",
]

"""Inbound request to upstream registry resolution.

Two addressing forms are supported:

- Path form: ``/v2/cr/<registry>/<name>/...`` (one proxy host for every registry,
  e.g. ``docker pull proxy.example.com/cr/quay/coreos/etcd``)
- Host form: ``<registry>.proxy.example.com/v2/<name>/...`` where the first DNS
  label of the Host header is the registry key (``cr-<registry>`` also accepted)
"""

import re
from typing import Optional

from .route_table import CONTAINER_REGISTRY_PREFIX, is_container_registry, route_by_host
from .types import RegistryTarget

PATH_FORM_SEGMENT = "cr"

_REPOSITORY_PATH = re.compile(r"^/v2/(?P<name>.+?)/(?:manifests|blobs|tags)/")


def host_key(host: Optional[str]) -> str:
    """Registry key carried by a Host header (its first DNS label)."""
    if not host:
        return ""
    hostname = host if host.startswith("[") else host.split(":", 1)[0]
    return hostname.split(".", 1)[0]


def resolve_target(
    host: Optional[str],
    path: str,
    fallback_upstream: str = "",
) -> RegistryTarget:
    """Resolve the upstream registry for a request.

    Args:
        host: Host header of the inbound request
        path: Request path after ``/v2/`` (e.g., "cr/quay/coreos/etcd/tags/list")
        fallback_upstream: Origin used for host-form requests that match no route

    Returns:
        RegistryTarget; ``origin`` is empty when nothing matched
    """
    if path.startswith(f"{PATH_FORM_SEGMENT}/"):
        segments = path.split("/", 2)
        registry = segments[1]
        remainder = segments[2] if len(segments) > 2 else ""
        key = f"{CONTAINER_REGISTRY_PREFIX}{registry}"
        origin = route_by_host(registry) if is_container_registry(key) else ""
        return RegistryTarget(
            key=key,
            origin=origin,
            prefix=f"{PATH_FORM_SEGMENT}/{registry}/",
            upstream_path=f"/v2/{remainder}",
        )

    key = host_key(host)
    registry = key.removeprefix(CONTAINER_REGISTRY_PREFIX)
    origin = route_by_host(registry) if is_container_registry(key) else ""
    if not origin and fallback_upstream:
        origin = fallback_upstream.rstrip("/")

    return RegistryTarget(key=key, origin=origin, upstream_path=f"/v2/{path}")


def resolve_scope(
    host: Optional[str],
    scope: Optional[str],
    fallback_upstream: str = "",
) -> tuple[RegistryTarget, Optional[str]]:
    """Resolve the upstream registry for a token scope.

    A path-form repository name (``repository:cr/quay/coreos/etcd:pull``)
    selects the registry and is stripped back to the upstream name
    (``repository:coreos/etcd:pull``). Any other scope is resolved by host.
    """
    parts = scope.split(":") if scope else []
    if len(parts) == 3 and parts[1].startswith(f"{PATH_FORM_SEGMENT}/"):
        target = resolve_target(host, parts[1])
        parts[1] = target.upstream_path[len("/v2/"):]
        return target, ":".join(parts)

    return resolve_target(host, "", fallback_upstream), scope


def repository_from_path(upstream_path: str) -> Optional[str]:
    """Repository name of a manifest, blob or tags path, if it is one."""
    match = _REPOSITORY_PATH.match(upstream_path)
    if not match:
        return None
    return match.group("name")

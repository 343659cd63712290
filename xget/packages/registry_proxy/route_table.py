"""Static route table for container registries.

Maps short registry keys (subdomain labels or ``/cr/<key>`` path segments) to
the upstream origin that serves the Docker Registry v2 API for them.
"""

from types import MappingProxyType

from .types import RouteEntry

DOCKER_HUB_URL = "https://registry-1.docker.io"

# Keys that denote a container registry without being table entries
CONTAINER_REGISTRY_PREFIX = "cr-"
DOCKER_HUB_KEYS = ("docker-hub", "docker")

ROUTE_ENTRIES = (
    RouteEntry("docker-hub", DOCKER_HUB_URL),
    RouteEntry("docker", DOCKER_HUB_URL),
    RouteEntry("quay", "https://quay.io"),
    RouteEntry("gcr", "https://gcr.io"),
    RouteEntry("k8s-gcr", "https://k8s.gcr.io"),
    RouteEntry("k8s", "https://registry.k8s.io"),
    RouteEntry("ghcr", "https://ghcr.io"),
    RouteEntry("cloudsmith", "https://docker.cloudsmith.io"),
    RouteEntry("ecr", "https://public.ecr.aws"),
    RouteEntry("docker-staging", DOCKER_HUB_URL),
)

DOCKER_ROUTES = MappingProxyType(
    {entry.key: entry.upstream_origin for entry in ROUTE_ENTRIES}
)


def route_by_host(key: str) -> str:
    """Return the upstream origin for a registry key.

    Returns an empty string when the key is unknown; callers treat that as
    "no route".
    """
    return DOCKER_ROUTES.get(key, "")


def is_docker_hub(origin: str) -> bool:
    return origin == DOCKER_HUB_URL


def is_container_registry(key: str) -> bool:
    """Check whether a key selects a container registry.

    True for ``cr-`` prefixed keys, the Docker Hub aliases and any key in the
    route table. Nothing else matches.
    """
    if key.startswith(CONTAINER_REGISTRY_PREFIX):
        return True
    if key in DOCKER_HUB_KEYS:
        return True
    if key in DOCKER_ROUTES:
        return True
    return False


def route_keys() -> list[str]:
    return sorted(DOCKER_ROUTES)

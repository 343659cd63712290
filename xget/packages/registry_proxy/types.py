"""Registry proxy types and data structures.

This module contains shared types used across the registry proxy package.
No dependencies on xget.* modules to maintain independence.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RouteEntry:
    """A single row of the static route table.

    Attributes:
        key: Short registry key (e.g., "quay", "docker-hub")
        upstream_origin: Base origin of the upstream registry
                         (e.g., "https://quay.io")
    """

    key: str
    upstream_origin: str


@dataclass(frozen=True)
class AuthChallenge:
    """Bearer challenge extracted from an upstream WWW-Authenticate header.

    Attributes:
        realm: Token server URL (e.g., "https://auth.docker.io/token")
        service: Service name to request the token for, possibly empty
    """

    realm: str
    service: str = ""


@dataclass(frozen=True)
class TokenRequest:
    """Everything needed for one outbound token call."""

    challenge: AuthChallenge
    scope: Optional[str] = None
    authorization: Optional[str] = None


@dataclass(frozen=True)
class RegistryTarget:
    """Upstream registry resolved for one inbound request.

    Attributes:
        key: Registry key the request was routed by (e.g., "cr-quay" or "ghcr")
        origin: Upstream origin, empty when nothing matched
        prefix: Path prefix the client used after /v2/ (e.g., "cr/quay/"),
                empty for host-routed requests
        upstream_path: Path to request upstream (e.g., "/v2/coreos/etcd/tags/list")
    """

    key: str
    origin: str
    prefix: str = ""
    upstream_path: str = "/v2/"

    @property
    def found(self) -> bool:
        return bool(self.origin)

    def proxy_path(self, upstream_path: str) -> str:
        """Map an upstream /v2/ path back to the path the client should use."""
        if not upstream_path.startswith("/v2/"):
            return upstream_path
        return f"/v2/{self.prefix}{upstream_path[len('/v2/'):]}"

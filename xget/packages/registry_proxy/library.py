"""Docker Hub "library" namespace completion.

Official images live under ``library/`` on Docker Hub, but clients address
them by their short name. Both the token scope and the request path need the
namespace filled in before Docker Hub will accept them.
"""

from typing import Optional

LIBRARY_NAMESPACE = "library"


def complete_docker_hub_scope(scope: Optional[str]) -> Optional[str]:
    """Add the library namespace to a short-name scope.

    Example:
        repository:busybox:pull => repository:library/busybox:pull

    Scopes that do not have exactly three parts, or whose name already has a
    namespace, are returned unchanged.
    """
    if not scope:
        return scope

    parts = scope.split(":")
    if len(parts) == 3 and "/" not in parts[1]:
        parts[1] = f"{LIBRARY_NAMESPACE}/{parts[1]}"
        return ":".join(parts)

    return scope


def handle_docker_hub_library_redirect(pathname: str) -> Optional[str]:
    """Return the library-qualified path for a short-name request.

    Example:
        /v2/busybox/manifests/latest => /v2/library/busybox/manifests/latest

    Returns:
        The new path, or None when no redirect is needed
    """
    parts = pathname.split("/")
    if len(parts) == 5:
        parts.insert(2, LIBRARY_NAMESPACE)
        return "/".join(parts)
    return None

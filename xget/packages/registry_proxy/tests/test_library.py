import pytest

from xget.packages.registry_proxy.library import (
    complete_docker_hub_scope,
    handle_docker_hub_library_redirect,
)


def test_complete_short_scope():
    assert complete_docker_hub_scope("repository:busybox:pull") == (
        "repository:library/busybox:pull"
    )


@pytest.mark.parametrize(
    "scope",
    [
        "repository:library/busybox:pull",
        "repository:ns/busybox:pull",
        "repository:busybox",
        "repository:busybox:pull:extra",
        "registry:catalog:*:x",
        "",
        None,
    ],
)
def test_complete_scope_leaves_other_shapes_unchanged(scope):
    assert complete_docker_hub_scope(scope) == scope


def test_complete_scope_is_idempotent():
    once = complete_docker_hub_scope("repository:alpine:pull,push")
    assert once == "repository:library/alpine:pull,push"
    assert complete_docker_hub_scope(once) == once


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/v2/busybox/manifests/latest", "/v2/library/busybox/manifests/latest"),
        ("/v2/nginx/blobs/sha256:abc", "/v2/library/nginx/blobs/sha256:abc"),
        ("/v2/alpine/tags/list", "/v2/library/alpine/tags/list"),
    ],
)
def test_library_redirect(path, expected):
    assert handle_docker_hub_library_redirect(path) == expected


@pytest.mark.parametrize(
    "path",
    [
        "/v2/library/busybox/manifests/latest",
        "/v2/",
        "/v2/busybox/blobs/uploads/",
        "",
    ],
)
def test_no_library_redirect(path):
    assert handle_docker_hub_library_redirect(path) is None

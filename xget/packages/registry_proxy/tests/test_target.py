import pytest

from xget.packages.registry_proxy.target import (
    host_key,
    repository_from_path,
    resolve_scope,
    resolve_target,
)
from xget.packages.registry_proxy.types import RegistryTarget


@pytest.mark.parametrize(
    "host,expected",
    [
        ("quay.proxy.example.com", "quay"),
        ("ghcr.proxy.example.com:8443", "ghcr"),
        ("docker", "docker"),
        ("", ""),
        (None, ""),
    ],
)
def test_host_key(host, expected):
    assert host_key(host) == expected


def test_resolve_path_form():
    target = resolve_target("proxy.example.com", "cr/quay/coreos/etcd/manifests/v3")
    assert target == RegistryTarget(
        key="cr-quay",
        origin="https://quay.io",
        prefix="cr/quay/",
        upstream_path="/v2/coreos/etcd/manifests/v3",
    )
    assert target.found


def test_resolve_path_form_unknown_registry():
    target = resolve_target("proxy.example.com", "cr/nope/a/manifests/latest")
    assert target.key == "cr-nope"
    assert not target.found


def test_resolve_path_form_ignores_fallback():
    target = resolve_target(
        "proxy.example.com", "cr/nope/a/manifests/latest", "https://registry.local"
    )
    assert not target.found


def test_resolve_host_form():
    target = resolve_target("ghcr.proxy.example.com", "owner/img/manifests/1")
    assert target == RegistryTarget(
        key="ghcr",
        origin="https://ghcr.io",
        prefix="",
        upstream_path="/v2/owner/img/manifests/1",
    )


def test_resolve_host_form_unknown_host():
    target = resolve_target("proxy.example.com", "owner/img/manifests/1")
    assert target.key == "proxy"
    assert target.origin == ""


def test_resolve_host_form_prefixed_key():
    target = resolve_target("cr-quay.proxy.example.com", "coreos/etcd/manifests/v3")
    assert target == RegistryTarget(
        key="cr-quay",
        origin="https://quay.io",
        prefix="",
        upstream_path="/v2/coreos/etcd/manifests/v3",
    )


def test_resolve_host_form_prefixed_unknown_key():
    target = resolve_target("cr-nope.proxy.example.com", "a/manifests/latest")
    assert target.key == "cr-nope"
    assert not target.found


def test_resolve_host_form_fallback():
    target = resolve_target("localhost:8000", "img/tags/list", "https://registry.local/")
    assert target.origin == "https://registry.local"
    assert target.upstream_path == "/v2/img/tags/list"


def test_proxy_path_round_trip():
    target = resolve_target("proxy.example.com", "cr/docker/busybox/manifests/latest")
    assert target.proxy_path("/v2/library/busybox/manifests/latest") == (
        "/v2/cr/docker/library/busybox/manifests/latest"
    )
    assert target.proxy_path("/elsewhere") == "/elsewhere"


def test_resolve_scope_path_form():
    target, scope = resolve_scope("proxy.example.com", "repository:cr/docker/busybox:pull")
    assert target.origin == "https://registry-1.docker.io"
    assert scope == "repository:busybox:pull"


def test_resolve_scope_host_form():
    target, scope = resolve_scope("quay.proxy.example.com", "repository:coreos/etcd:pull")
    assert target.origin == "https://quay.io"
    assert scope == "repository:coreos/etcd:pull"


def test_resolve_scope_without_scope():
    target, scope = resolve_scope("gcr.proxy.example.com", None)
    assert target.origin == "https://gcr.io"
    assert scope is None


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/v2/library/busybox/manifests/latest", "library/busybox"),
        ("/v2/a/b/c/blobs/sha256:00", "a/b/c"),
        ("/v2/alpine/tags/list", "alpine"),
        ("/v2/", None),
        ("/v2/_catalog", None),
    ],
)
def test_repository_from_path(path, expected):
    assert repository_from_path(path) == expected

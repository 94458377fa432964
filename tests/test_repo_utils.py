import hashlib
from pathlib import Path

import pytest

from repopool.domain.repo_utils import (
    check_repo_arch,
    is_remote_uri,
    pkg_index_path,
    remote_repo_dirname,
)


@pytest.mark.parametrize("uri,expected", [
    ("http://repo.example.org/current/x86_64", True),
    ("/srv/repos/current/noarch", True),
    ("/srv/repos/current/i686", False),
    ("/srv/repos/current/", False),
    ("x86_64", False),
    ("/srv/repos/x86_64/extra", False),
])
def test_check_repo_arch(uri, expected):
    assert check_repo_arch(uri, "x86_64") is expected


def test_check_repo_arch_defaults_to_running_machine(monkeypatch):
    monkeypatch.setattr("repopool.domain.repo_utils.platform.machine", lambda: "aarch64")
    assert check_repo_arch("/repo/aarch64")
    assert not check_repo_arch("/repo/x86_64")


def test_is_remote_uri():
    assert is_remote_uri("http://a/b")
    assert is_remote_uri("https://a/b")
    assert is_remote_uri("ftp://a/b")
    assert not is_remote_uri("/srv/repo/x86_64")
    assert not is_remote_uri("file:///srv/repo/x86_64")


def test_remote_repo_dirname():
    uri = "http://repo.example.org:8080/current/x86_64"
    digest = hashlib.sha256(uri.encode("utf-8")).hexdigest()[:12]
    assert remote_repo_dirname(uri) == f"repo.example.org_8080_current_x86_64_{digest}"


def test_remote_repo_dirname_does_not_collide():
    a = "http://repo.test/a_b/x86_64"
    b = "http://repo.test/a/b/x86_64"
    assert remote_repo_dirname(a) != remote_repo_dirname(b)
    assert pkg_index_path(a, Path("/cache"), "i") != pkg_index_path(b, Path("/cache"), "i")


def test_pkg_index_path_remote(tmp_path):
    path = pkg_index_path("https://repo.example.org/current/x86_64", tmp_path, "pkg-index.plist")
    assert path.parent.parent == tmp_path
    assert path.parent.name.startswith("repo.example.org_current_x86_64_")
    assert path.name == "pkg-index.plist"


def test_pkg_index_path_local(tmp_path):
    assert pkg_index_path("/srv/repo/noarch", tmp_path, "index.plist") == Path("/srv/repo/noarch/index.plist")
    assert pkg_index_path("file:///srv/repo/noarch", tmp_path, "index.plist") == Path("/srv/repo/noarch/index.plist")


def test_pkg_index_path_is_deterministic(tmp_path):
    uri = "http://repo.example.org/current/x86_64"
    assert pkg_index_path(uri, tmp_path, "i") == pkg_index_path(uri, tmp_path, "i")
    assert pkg_index_path(uri, tmp_path, "i") != pkg_index_path(uri + "-debug", tmp_path, "i")

"""
Unit tests for the remote index downloader.
"""
import httpx
import pytest

from repopool.domain.errors import MissingIndexError, RepositoryFetchError
from repopool.services.importer import index_downloader
from repopool.services.importer.index_downloader import index_url, sync_pkg_index

URI = "https://repo.test/current/x86_64"


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(index_downloader.time, "sleep", lambda _s: None)


def client_for(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_index_url():
    assert index_url(URI + "/", "pkg-index.plist") == URI + "/pkg-index.plist"


def test_downloads_index(tmp_path):
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, content=b"index-bytes")

    dest = tmp_path / "cache" / "repo" / "pkg-index.plist"
    result = sync_pkg_index(URI, dest, client=client_for(handler))

    assert result == dest
    assert dest.read_bytes() == b"index-bytes"
    assert requested == [URI + "/pkg-index.plist"]
    assert not dest.with_name("pkg-index.plist.tmp").exists()


def test_retries_then_succeeds(tmp_path):
    attempts = []

    def handler(request):
        attempts.append(1)
        if len(attempts) < 3:
            return httpx.Response(503)
        return httpx.Response(200, content=b"ok")

    dest = tmp_path / "pkg-index.plist"
    sync_pkg_index(URI, dest, retries=3, client=client_for(handler))

    assert len(attempts) == 3
    assert dest.read_bytes() == b"ok"


def test_gives_up_after_retries(tmp_path):
    attempts = []

    def handler(request):
        attempts.append(1)
        raise httpx.ConnectError("connection refused", request=request)

    dest = tmp_path / "pkg-index.plist"
    with pytest.raises(RepositoryFetchError) as exc:
        sync_pkg_index(URI, dest, retries=2, client=client_for(handler))

    assert len(attempts) == 2
    assert exc.value.uri == URI
    assert isinstance(exc.value, MissingIndexError)
    assert not dest.exists()
    assert not dest.with_name("pkg-index.plist.tmp").exists()


def test_failed_download_keeps_existing_index(tmp_path):
    dest = tmp_path / "pkg-index.plist"
    dest.write_bytes(b"old")

    with pytest.raises(RepositoryFetchError):
        sync_pkg_index(URI, dest, retries=1, client=client_for(lambda request: httpx.Response(404)))

    assert dest.read_bytes() == b"old"


def test_local_repository_is_untouched(tmp_path):
    def handler(request):
        raise AssertionError("local repositories must not be fetched")

    dest = tmp_path / "repo" / "pkg-index.plist"
    assert sync_pkg_index(str(tmp_path / "repo"), dest, client=client_for(handler)) == dest
    assert not dest.exists()


def test_unusable_cache_directory_is_a_fetch_error(tmp_path):
    cache = tmp_path / "cache"
    cache.write_text("not a directory")
    dest = cache / "repo" / "pkg-index.plist"

    with pytest.raises(RepositoryFetchError) as exc:
        sync_pkg_index(URI, dest, client=client_for(lambda request: httpx.Response(200, content=b"ok")))

    assert exc.value.uri == URI

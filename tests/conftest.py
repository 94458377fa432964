import gzip
import plistlib
from pathlib import Path
from typing import Dict, List, Optional

import httpx
import pytest

from repopool.data.index_document import IndexDocument
from repopool.storage.file_index_store import FileIndexStore

INDEX_FILENAME = "pkg-index.plist"
ARCH = "x86_64"


def make_index(packages: List[Dict], compress: bool = False) -> bytes:
    data = plistlib.dumps({
        "pkgindex-version": "1.2",
        "total-pkgs": len(packages),
        "packages": packages,
    })
    if compress:
        data = gzip.compress(data)
    return data


def pkg(name: str, version: str = "1.0_1") -> Dict:
    return {"pkgname": name, "version": version, "pkgver": f"{name}-{version}"}


def write_index(repo_dir: Path, packages: List[Dict], compress: bool = False) -> Path:
    repo_dir.mkdir(parents=True, exist_ok=True)
    path = repo_dir / INDEX_FILENAME
    path.write_bytes(make_index(packages, compress=compress))
    return path


class CountingStore(FileIndexStore):
    """FileIndexStore that records collaborator calls and loaded documents."""

    def __init__(self, cache_dir: Path, client: Optional[httpx.Client] = None):
        super().__init__(cache_dir, index_filename=INDEX_FILENAME, fetch_retries=1, client=client)
        self.sync_calls: List[str] = []
        self.load_calls: List[Path] = []
        self.documents: List[IndexDocument] = []

    def sync(self, uri, path):
        self.sync_calls.append(uri)
        super().sync(uri, path)

    def load(self, path):
        self.load_calls.append(path)
        doc = super().load(path)
        self.documents.append(doc)
        return doc


@pytest.fixture
def repos_dir(tmp_path):
    return tmp_path / "repos"


@pytest.fixture
def store(tmp_path):
    return CountingStore(tmp_path / "cache")


@pytest.fixture
def local_repo(repos_dir):
    """Create a local repository '<repos_dir>/<name>/<arch>' with the given packages."""

    def _make(name: str, packages: List[Dict], arch: str = ARCH, compress: bool = False) -> str:
        repo_dir = repos_dir / name / arch
        write_index(repo_dir, packages, compress=compress)
        return str(repo_dir)

    return _make

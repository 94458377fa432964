import logging
import os
from pathlib import Path
from typing import Optional

import httpx

from repopool.data.index_document import IndexDocument, read_index_document
from repopool.domain.models import PoolConfig
from repopool.domain.repo_utils import pkg_index_path
from repopool.services.importer.index_downloader import sync_pkg_index
from repopool.storage.index_store import IndexStore

logger = logging.getLogger(__name__)


class FileIndexStore(IndexStore):
    def __init__(
        self,
        cache_dir: Path,
        index_filename: str = "pkg-index.plist",
        fetch_timeout: float = 60.0,
        fetch_retries: int = 3,
        client: Optional[httpx.Client] = None,
    ):
        self._cache_dir = Path(cache_dir)
        self._index_filename = index_filename
        self._fetch_timeout = fetch_timeout
        self._fetch_retries = fetch_retries
        self._client = client

    @classmethod
    def from_config(cls, config: PoolConfig, data_dir: Path) -> "FileIndexStore":
        cache_dir = Path(config.cache_dir).expanduser()
        if not cache_dir.is_absolute():
            cache_dir = data_dir / cache_dir
        return cls(
            cache_dir,
            index_filename=config.index_filename,
            fetch_timeout=config.fetch_timeout_seconds,
            fetch_retries=config.fetch_retries,
        )

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def resolve_path(self, uri: str) -> Path:
        return pkg_index_path(uri, self._cache_dir, self._index_filename)

    def is_available(self, path: Path) -> bool:
        return path.is_file() and os.access(path, os.R_OK)

    def sync(self, uri: str, path: Path) -> None:
        sync_pkg_index(
            uri,
            path,
            timeout=self._fetch_timeout,
            retries=self._fetch_retries,
            client=self._client,
        )

    def load(self, path: Path) -> IndexDocument:
        return read_index_document(path)

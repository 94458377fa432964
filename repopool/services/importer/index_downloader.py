"""
Download a remote repository index into the local cache.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import httpx

from repopool.domain.errors import RepositoryFetchError
from repopool.domain.repo_utils import is_remote_uri

logger = logging.getLogger(__name__)


def index_url(uri: str, index_filename: str) -> str:
    return f"{uri.rstrip('/')}/{index_filename}"


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Could not remove {path}: {e}")


def sync_pkg_index(
    uri: str,
    dest: Path,
    timeout: float = 60.0,
    retries: int = 3,
    client: Optional[httpx.Client] = None,
    retry_delay: float = 1.0,
) -> Path:
    """
    Fetch the index of a remote repository to `dest`.

    The download goes to a temp file first so a partial transfer never leaves
    a corrupt index behind. Local repositories are left untouched. Only
    http and https are fetched; ftp repositories always fail to sync.

    Returns:
        Path to the local index file

    Raises:
        RepositoryFetchError: every attempt failed, or the index could not be
            stored in the cache directory
    """
    dest = Path(dest)
    if not is_remote_uri(uri):
        return dest

    url = index_url(uri, dest.name)
    tmp_path = dest.with_name(f"{dest.name}.tmp")
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create cache directory {dest.parent}: {e}")
        raise RepositoryFetchError(f"Cannot store index for {uri}: {e}", uri) from e

    retries = max(1, retries)
    owns_client = client is None
    if client is None:
        client = httpx.Client(follow_redirects=True, timeout=timeout)

    try:
        for attempt in range(1, retries + 1):
            try:
                logger.debug(f"Downloading {url} (attempt {attempt}/{retries})")
                tmp_path.unlink(missing_ok=True)
                with client.stream("GET", url) as response:
                    response.raise_for_status()
                    downloaded = 0
                    with open(tmp_path, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
                            downloaded += len(chunk)
                break
            except (httpx.HTTPError, OSError) as e:
                _discard(tmp_path)
                if attempt < retries:
                    logger.warning(f"Download of {url} failed (attempt {attempt}/{retries}): {e}. Retrying...")
                    time.sleep(retry_delay * attempt)
                else:
                    logger.error(f"Failed to download {url}: {e}")
                    raise RepositoryFetchError(f"Failed to fetch index from {url}: {e}", uri) from e
    finally:
        if owns_client:
            client.close()

    try:
        tmp_path.replace(dest)
    except OSError as e:
        _discard(tmp_path)
        logger.error(f"Cannot move downloaded index into place at {dest}: {e}")
        raise RepositoryFetchError(f"Cannot store index for {uri}: {e}", uri) from e
    logger.debug(f"Index for {uri} stored at {dest} ({downloaded} bytes)")
    return dest

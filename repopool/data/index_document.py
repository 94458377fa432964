"""
Read repository index files into in-memory documents.

An index file is a property list (XML or binary) whose top level is a
dictionary. Files fetched from remote repositories are usually
gzip-compressed; compression is detected from the magic bytes.
"""
from __future__ import annotations

import gzip
import logging
import plistlib
import zlib
from pathlib import Path
from typing import Any, Dict, List, Optional
from xml.parsers.expat import ExpatError

from repopool.domain.errors import IndexParseError, MissingIndexError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


class IndexDocument:
    """Parsed package index of one repository."""

    def __init__(self, data: Dict[str, Any], path: Optional[Path] = None):
        self._data: Optional[Dict[str, Any]] = data
        self.path = path

    @property
    def closed(self) -> bool:
        return self._data is None

    @property
    def data(self) -> Dict[str, Any]:
        if self._data is None:
            raise RuntimeError("Index document has been released")
        return self._data

    @property
    def packages(self) -> List[Dict[str, Any]]:
        """Package dictionaries listed in the index ('packages' array)."""
        packages = self.data.get("packages", [])
        if not isinstance(packages, list):
            return []
        return [p for p in packages if isinstance(p, dict)]

    def find_package(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Find a package by name ('pkgname') or exact name-version ('pkgver').
        """
        for pkg in self.packages:
            if pkg.get("pkgname") == name or pkg.get("pkgver") == name:
                return pkg
        return None

    def close(self) -> None:
        """Drop the parsed tree."""
        self._data = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def read_index_document(path: Path) -> IndexDocument:
    """
    Read and parse an index file.

    Raises:
        MissingIndexError: the file does not exist.
        IndexParseError: the file exists but cannot be read or parsed.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise MissingIndexError(f"Index file not found: {path}") from e
    except OSError as e:
        raise IndexParseError(f"Cannot read index file {path}: {e}", str(path)) from e

    try:
        if raw[:2] == GZIP_MAGIC:
            raw = gzip.decompress(raw)
        data = plistlib.loads(raw)
    except (OSError, EOFError, zlib.error, plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise IndexParseError(f"Cannot parse index file {path}: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise IndexParseError(
            f"Index file {path} does not contain a dictionary (got {type(data).__name__})",
            str(path),
        )

    logger.debug(f"Parsed index {path}: {len(data.get('packages', []) or [])} packages")
    return IndexDocument(data, path)

"""
Data models for the repository pool.

This module defines:
- Pool configuration (pydantic, persisted as JSON in the data directory)
- The pool lifecycle state
- Repository descriptors held by the pool
- The admission report produced by each initialization pass
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from repopool.data.index_document import IndexDocument


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class PoolConfig(BaseModel):
    """
    Repository pool configuration stored in repository.json.

    The order of `repositories` is significant: it is the admission order and
    therefore the priority order seen by consumers.
    """

    repositories: List[str] = Field(
        default_factory=list,
        description="Ordered list of repository URIs (local paths or http/https/ftp URLs).",
    )
    architecture: Optional[str] = Field(
        default=None,
        description="Override of the running machine type used for the architecture filter.",
    )
    cache_dir: str = Field(
        default="cache",
        description="Directory for downloaded remote indexes, relative to the data directory unless absolute.",
    )
    index_filename: str = Field(
        default="pkg-index.plist",
        description="File name of the package index inside a repository.",
    )
    fetch_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single remote index download attempt.",
    )
    fetch_retries: int = Field(
        default=3,
        ge=1,
        description="Number of download attempts per remote repository.",
    )


# ---------------------------------------------------------------------------
# Pool state
# ---------------------------------------------------------------------------


class PoolState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class RepositoryDescriptor:
    """
    An admitted repository: its URI and its parsed index document.

    Owned by the pool. Consumers only see descriptors inside a visitor call and
    must not keep references past it.
    """

    __slots__ = ("_uri", "index")

    def __init__(self, uri: str, index: IndexDocument):
        self._uri = uri
        self.index = index

    @property
    def uri(self) -> str:
        return self._uri

    def release(self) -> None:
        self.index.close()

    def __repr__(self) -> str:
        return f"RepositoryDescriptor(uri={self._uri!r})"


class AdmissionReport(BaseModel):
    """
    Counters from one admission pass.

    `missing` aggregates architecture mismatches and unavailable indexes; the
    pass fails when `total - missing` is zero. The two causes are also kept
    apart for diagnostics.
    """

    architecture: str
    total: int = 0
    duplicates: int = 0
    arch_mismatch: int = 0
    unavailable: int = 0
    admitted: List[str] = Field(default_factory=list)

    @property
    def missing(self) -> int:
        return self.arch_mismatch + self.unavailable

    @property
    def usable(self) -> int:
        return self.total - self.missing

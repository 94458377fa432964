"""
Exception types raised by the repository pool and its collaborators.

Only MissingIndexError (and its subclasses) is handled inside the admission
pass; it is counted as a missing repository and the pass continues. Every
other exception aborts the pass and reaches the caller unchanged.
"""
from __future__ import annotations

from typing import Optional


class PoolError(Exception):
    """Base class for repository pool errors."""


class NotSupportedError(PoolError):
    """
    Nothing to do: no repositories are configured, the configured list could
    not be read, or no usable repository remained after admission.
    """


class MissingIndexError(PoolError):
    """A repository index could not be fetched or was absent when parsed."""

    def __init__(self, message: str, uri: Optional[str] = None):
        super().__init__(message)
        self.uri = uri


class RepositoryFetchError(MissingIndexError):
    """Downloading a remote repository index failed."""


class IndexParseError(PoolError):
    """An index file exists but could not be read or parsed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

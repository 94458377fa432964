from abc import ABC, abstractmethod
from pathlib import Path

from repopool.data.index_document import IndexDocument


class IndexStore(ABC):
    """
    Abstract base class for locating, fetching and parsing repository indexes.
    """

    @abstractmethod
    def resolve_path(self, uri: str) -> Path:
        """Deterministic local path of the index file for a repository URI."""
        pass

    @abstractmethod
    def is_available(self, path: Path) -> bool:
        """True if the local index file exists and is readable."""
        pass

    @abstractmethod
    def sync(self, uri: str, path: Path) -> None:
        """
        Make the index of `uri` available at `path`.
        Raises MissingIndexError (or a subclass) when it cannot be fetched.
        """
        pass

    @abstractmethod
    def load(self, path: Path) -> IndexDocument:
        """
        Parse the local index file.
        Raises MissingIndexError if the file is absent, IndexParseError if it is corrupt.
        """
        pass

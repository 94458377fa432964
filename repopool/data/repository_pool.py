"""
The repository pool: the ordered set of repositories whose indexes are loaded.

The pool is filled lazily by the first traversal (or an explicit
ensure_initialized() at startup) and stays immutable until release().
Configured URIs are admitted in order:

* a URI already admitted in this pass is ignored;
* a URI whose last path component is neither 'noarch' nor the machine type
  is skipped and counted as missing;
* a missing local index is fetched; if that fails the repository is skipped
  and counted as missing;
* the index is parsed; a vanished file counts as missing, any other failure
  aborts the pass, releases everything admitted so far and propagates.

If nothing usable remains the pass fails with NotSupportedError.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from repopool.domain.errors import IndexParseError, MissingIndexError, NotSupportedError
from repopool.domain.models import AdmissionReport, PoolState, RepositoryDescriptor
from repopool.domain.repo_utils import check_repo_arch, get_machine_arch
from repopool.storage.index_store import IndexStore

logger = logging.getLogger(__name__)

UriSource = Callable[[], Iterable[str]]

# Visitor returns a truthy value to stop the traversal; exceptions propagate.
Visitor = Callable[[RepositoryDescriptor], Optional[bool]]


class RepositoryPool:
    def __init__(self, store: IndexStore, uri_source: UriSource, architecture: Optional[str] = None):
        self._store = store
        self._uri_source = uri_source
        self.architecture = architecture or get_machine_arch()

        self._entries: List[RepositoryDescriptor] = []
        self._uris: Set[str] = set()
        self._state = PoolState.UNINITIALIZED
        self.last_report: Optional[AdmissionReport] = None

        # Guards state transitions; traversals register as readers so that
        # release() waits for them to finish.
        self._cond = threading.Condition(threading.RLock())
        self._readers: Dict[int, int] = {}

    @property
    def state(self) -> PoolState:
        return self._state

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def ensure_initialized(self) -> None:
        """
        Run the admission pass unless the pool is already ready.

        Raises:
            NotSupportedError: nothing configured or no usable repository
            IndexParseError: an index file is corrupt (or any other fatal error)
        """
        with self._cond:
            if self._state is PoolState.READY:
                return

            report = AdmissionReport(architecture=self.architecture)
            self.last_report = report
            try:
                for uri in self._configured_uris():
                    self._admit(uri, report)

                if report.usable == 0:
                    raise NotSupportedError(
                        f"No usable repositories ({report.total} configured, "
                        f"{report.arch_mismatch} for other architectures, "
                        f"{report.unavailable} unavailable)"
                    )
            except BaseException:
                self._release_entries()
                raise

            self._state = PoolState.READY
            logger.debug(f"[rpool] initialized ok ({len(self._entries)} repositories).")

    def release(self) -> None:
        """
        Release every repository and return to the uninitialized state.
        Waits for running traversals; safe to call repeatedly.
        """
        with self._cond:
            if threading.get_ident() in self._readers:
                raise RuntimeError("Repository pool cannot be released from inside a traversal")
            while self._readers:
                self._cond.wait()
            if self._state is PoolState.UNINITIALIZED and not self._entries:
                return
            self._release_entries()
            logger.debug("[rpool] released ok.")

    def _release_entries(self) -> None:
        for descriptor in self._entries:
            logger.debug(f"[rpool] unregistered repository '{descriptor.uri}'")
            descriptor.release()
        self._entries = []
        self._uris = set()
        self._state = PoolState.UNINITIALIZED

    def _configured_uris(self) -> List[str]:
        try:
            uris = list(self._uri_source())
        except NotSupportedError:
            raise
        except Exception as e:
            raise NotSupportedError(f"Cannot read configured repositories: {e}") from e
        if not uris:
            raise NotSupportedError("No repositories configured")
        return uris

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def _admit(self, uri: str, report: AdmissionReport) -> None:
        if uri in self._uris:
            report.duplicates += 1
            logger.debug(f"[rpool] `{uri}' already registered, ignoring.")
            return

        report.total += 1

        if not check_repo_arch(uri, self.architecture):
            logger.debug(f"[rpool] `{uri}' arch not matched, ignoring.")
            report.arch_mismatch += 1
            return

        path = self._store.resolve_path(uri)
        if not self._store.is_available(path):
            try:
                self._store.sync(uri, path)
            except MissingIndexError as e:
                logger.warning(f"[rpool] cannot fetch index for '{uri}': {e}")
                report.unavailable += 1
                return

        try:
            index = self._store.load(path)
        except MissingIndexError:
            logger.debug(f"[rpool] missing index file for '{uri}' repository.")
            report.unavailable += 1
            return
        except IndexParseError as e:
            logger.error(f"[rpool] cannot internalize index {path}: {e}", exc_info=True)
            raise

        self._entries.append(RepositoryDescriptor(uri, index))
        self._uris.add(uri)
        report.admitted.append(uri)
        logger.debug(f"[rpool] registered repository '{uri}'")

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def foreach(self, visitor: Visitor) -> bool:
        """
        Call `visitor` with each repository in pool order.

        The pool is initialized first if needed; initialization errors are
        raised before the visitor runs. Traversal stops when the visitor
        returns a truthy value or raises.

        Returns:
            True if the visitor stopped the traversal, False if it ran to the end
        """
        entries = self._enter_traversal()
        try:
            for descriptor in entries:
                if visitor(descriptor):
                    return True
            return False
        finally:
            self._leave_traversal()

    def iter_repositories(self) -> Iterator[RepositoryDescriptor]:
        """Generator form of foreach(); stop early with `break`."""
        entries = self._enter_traversal()
        try:
            for descriptor in entries:
                yield descriptor
        finally:
            self._leave_traversal()

    def _enter_traversal(self) -> List[RepositoryDescriptor]:
        with self._cond:
            try:
                self.ensure_initialized()
            except NotSupportedError as e:
                logger.debug(f"[rpool] empty repository list: {e}")
                raise
            except Exception as e:
                logger.debug(f"[rpool] couldn't initialize: {e}")
                raise
            ident = threading.get_ident()
            self._readers[ident] = self._readers.get(ident, 0) + 1
            return list(self._entries)

    def _leave_traversal(self) -> None:
        with self._cond:
            ident = threading.get_ident()
            count = self._readers.get(ident, 0) - 1
            if count > 0:
                self._readers[ident] = count
            else:
                self._readers.pop(ident, None)
            self._cond.notify_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

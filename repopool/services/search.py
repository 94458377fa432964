"""
Queries over the repository pool.

Everything here goes through RepositoryPool.foreach(); repositories are
consulted in pool order, so the first configured repository wins.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from repopool.data.repository_pool import RepositoryPool
from repopool.domain.models import RepositoryDescriptor

logger = logging.getLogger(__name__)


def find_package(pool: RepositoryPool, name: str) -> Optional[Tuple[str, Dict[str, Any]]]:
    """
    Find the first repository providing a package.

    Args:
        pool: Repository pool to search
        name: Package name ('pkgname') or exact 'pkgver'

    Returns:
        (repository uri, copy of the package dictionary), or None if not found
    """
    found: List[Tuple[str, Dict[str, Any]]] = []

    def visitor(repo: RepositoryDescriptor) -> bool:
        pkg = repo.index.find_package(name)
        if pkg is None:
            return False
        # Copy: the document is released on pool teardown.
        found.append((repo.uri, dict(pkg)))
        return True

    pool.foreach(visitor)
    if not found:
        logger.debug(f"Package {name} not found in any repository")
        return None
    logger.debug(f"Package {name} found in {found[0][0]}")
    return found[0]


def list_repositories(pool: RepositoryPool) -> List[Dict[str, Any]]:
    """URI and package count of every repository in pool order."""
    result: List[Dict[str, Any]] = []

    def visitor(repo: RepositoryDescriptor) -> bool:
        result.append({
            "uri": repo.uri,
            "packages": len(repo.index.packages),
        })
        return False

    pool.foreach(visitor)
    return result

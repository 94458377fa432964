from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from repopool.core.dependencies import get_repository_pool
from repopool.data.repository_pool import RepositoryPool
from repopool.domain.errors import NotSupportedError
from repopool.services.search import find_package, list_repositories

logger = logging.getLogger(__name__)
router = APIRouter()

# Handlers are plain `def`: admission does blocking downloads and file reads,
# so FastAPI runs them in its threadpool.


def _not_supported(e: NotSupportedError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


# ---------------------------------------------------------------------------
# GET /repositories
# ---------------------------------------------------------------------------

@router.get("/repositories")
def get_repositories(pool: RepositoryPool = Depends(get_repository_pool)) -> dict:
    """
    Repositories in the pool, in priority order.
    """
    try:
        repos = list_repositories(pool)
    except NotSupportedError as e:
        raise _not_supported(e)
    return {"Data": repos}


# ---------------------------------------------------------------------------
# GET /packages/{name}
# ---------------------------------------------------------------------------

@router.get("/packages/{name}")
def get_package(name: str, pool: RepositoryPool = Depends(get_repository_pool)) -> dict:
    """
    First package matching `name` (pkgname or pkgver) across the pool.
    """
    try:
        match = find_package(pool, name)
    except NotSupportedError as e:
        raise _not_supported(e)

    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Package {name} not found")

    uri, pkg = match
    return {"Data": {"repository": uri, "package": pkg}}


# ---------------------------------------------------------------------------
# Pool lifecycle
# ---------------------------------------------------------------------------

@router.get("/pool/status")
def get_pool_status(pool: RepositoryPool = Depends(get_repository_pool)) -> dict:
    report = pool.last_report
    data = {
        "state": pool.state.value,
        "architecture": pool.architecture,
        "repositories": len(pool),
        "last_report": None,
    }
    if report is not None:
        data["last_report"] = {
            **report.model_dump(),
            "missing": report.missing,
            "usable": report.usable,
        }
    return {"Data": data}


@router.post("/pool/release")
def release_pool(pool: RepositoryPool = Depends(get_repository_pool)) -> dict:
    """
    Drop all loaded indexes. The next query loads them again.
    """
    pool.release()
    logger.info("Repository pool released on request")
    return {"Data": {"state": pool.state.value}}

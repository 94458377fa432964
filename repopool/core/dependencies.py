from pathlib import Path
from typing import Optional

from repopool.data.configuration import get_configured_uris, get_data_dir, load_pool_config
from repopool.data.repository_pool import RepositoryPool
from repopool.domain.models import PoolConfig
from repopool.storage.file_index_store import FileIndexStore

_pool_config: Optional[PoolConfig] = None
_repository_pool: Optional[RepositoryPool] = None


def get_pool_config() -> PoolConfig:
    global _pool_config
    if _pool_config is None:
        _pool_config = load_pool_config()
    return _pool_config


def build_repository_pool(config: PoolConfig, data_dir: Path) -> RepositoryPool:
    store = FileIndexStore.from_config(config, data_dir)
    return RepositoryPool(
        store,
        lambda: get_configured_uris(config),
        architecture=config.architecture,
    )


def get_repository_pool() -> RepositoryPool:
    global _repository_pool
    if _repository_pool is None:
        _repository_pool = build_repository_pool(get_pool_config(), get_data_dir())
    return _repository_pool


def reset() -> None:
    """Release the pool and forget cached singletons."""
    global _pool_config, _repository_pool
    if _repository_pool is not None:
        _repository_pool.release()
    _pool_config = None
    _repository_pool = None

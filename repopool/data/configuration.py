from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from repopool.domain.errors import NotSupportedError
from repopool.domain.models import PoolConfig

logger = logging.getLogger(__name__)

DATA_ROOT_ENV_VAR = "REPOPOOL_DATA_DIR"
CONFIG_FILENAME = "repository.json"

# Resolve project root (not the Python package root)
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"


def get_data_dir() -> Path:
    """
    Determine the data directory path.

    Priority:
    1. Environment variable REPOPOOL_DATA_DIR
    2. '<project root>/data'
    """
    env_path = os.environ.get(DATA_ROOT_ENV_VAR)
    if env_path:
        d = Path(env_path).expanduser()
    else:
        d = _DEFAULT_DATA_DIR
    d.mkdir(parents=True, exist_ok=True)
    return d


def config_path(data_dir: Optional[Path] = None) -> Path:
    return (data_dir or get_data_dir()) / CONFIG_FILENAME


def load_pool_config(data_dir: Optional[Path] = None) -> PoolConfig:
    """
    Load repository.json, merging with defaults for any missing fields,
    and write it back so any new fields are persisted.

    A file that cannot be parsed is left alone and defaults are used.
    """
    path = config_path(data_dir)
    if not path.exists():
        config = PoolConfig()
    else:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            config = PoolConfig(**raw)
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.error(f"Invalid configuration in {path}, using defaults: {e}")
            return PoolConfig()

    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    return config


def get_configured_uris(config: PoolConfig) -> List[str]:
    """
    Ordered list of configured repository URIs.

    Raises:
        NotSupportedError: no repositories are configured
    """
    if not config.repositories:
        raise NotSupportedError("No repositories configured")
    return list(config.repositories)

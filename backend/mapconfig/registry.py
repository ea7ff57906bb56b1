from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import structlog
import yaml

from mapconfig.types import MapConfig

logger = structlog.get_logger(__name__)


def _repo_root() -> Path:
    # .../backend/mapconfig/registry.py -> repo root is 2 levels up
    return Path(__file__).resolve().parents[2]


def config_path() -> Path:
    return Path(os.getenv("DADAR_MAP_CONFIG") or (_repo_root() / "config" / "map.yaml"))


def _load_yaml(path: Path) -> dict:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid map config yaml root: {path}")
    return data


@lru_cache(maxsize=1)
def get_map_config() -> MapConfig:
    path = config_path()
    if not path.exists():
        logger.info("map_config_defaults", path=str(path))
        return MapConfig()
    cfg = MapConfig.model_validate(_load_yaml(path))
    logger.info("map_config_loaded", path=str(path))
    return cfg


def clear_config_cache() -> None:
    """
    Forget the cached config so the next call re-reads the YAML file.
    """
    get_map_config.cache_clear()

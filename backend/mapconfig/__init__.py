from .registry import clear_config_cache, get_map_config
from .types import MapCenter, MapConfig, MapPalette, MapStyle

__all__ = [
    "MapCenter",
    "MapConfig",
    "MapPalette",
    "MapStyle",
    "clear_config_cache",
    "get_map_config",
]

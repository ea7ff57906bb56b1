from __future__ import annotations

import math

from geo.aoi import BBox

DEFAULT_VIEWPORT = {"width": 900, "height": 600}
TILE_SIZE = 256
MAX_MERCATOR_LAT = 85.0511
# Floor for a box span, as a fraction of the world; a single point would otherwise zoom to infinity.
MIN_SPAN = 1e-9


def _world_y(lat: float) -> float:
    # Web-Mercator y as a fraction of the world height, 0 at the north edge.
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
    s = math.sin(math.radians(lat))
    return 0.5 - math.log((1 + s) / (1 - s)) / (4 * math.pi)


def _zoom_for_span(pixels: int, span: float) -> float:
    # The world is TILE_SIZE * 2**zoom pixels wide.
    return math.log2(pixels / (TILE_SIZE * max(span, MIN_SPAN)))


def fit_bounds_camera(
    bbox: BBox,
    *,
    viewport: dict[str, int] | None,
    padding: int,
    max_zoom: float,
) -> tuple[tuple[float, float], float]:
    """
    Center and zoom that frame `bbox` inside the viewport minus `padding` px per side.

    Zoom never exceeds `max_zoom`, so a tiny polygon does not zoom in to street level.
    """
    width = int((viewport or {}).get("width") or DEFAULT_VIEWPORT["width"])
    height = int((viewport or {}).get("height") or DEFAULT_VIEWPORT["height"])
    inner_w = max(1, width - 2 * int(padding))
    inner_h = max(1, height - 2 * int(padding))

    x_span = (bbox.max_lon - bbox.min_lon) / 360.0
    y_span = abs(_world_y(bbox.min_lat) - _world_y(bbox.max_lat))
    zoom = min(_zoom_for_span(inner_w, x_span), _zoom_for_span(inner_h, y_span))
    return bbox.center(), float(min(zoom, float(max_zoom)))

from __future__ import annotations

import math
from typing import Iterable

from shapely.geometry import Point, Polygon

from layers.types import PolygonFeature


def _ensure_closed(ring: list[tuple[float, float]]) -> list[tuple[float, float]]:
    if not ring:
        return ring
    if ring[0] != ring[-1]:
        return [*ring, ring[0]]
    return ring


def feature_polygon(feature: PolygonFeature) -> Polygon | None:
    """
    Shapely polygon for a feature's ring, or None when the ring can't form one.

    Rings carrying NaN coordinates (lenient parsing) are skipped.
    """
    ring = list(feature.ring)
    if any(not (math.isfinite(lon) and math.isfinite(lat)) for lon, lat in ring):
        return None
    outer = _ensure_closed(ring)
    if len(outer) < 4:
        return None
    poly = Polygon(outer)
    if not poly.is_valid:
        poly = poly.buffer(0)
    if poly.is_empty:
        return None
    return poly


def features_covering(
    features: Iterable[PolygonFeature],
    lon: float,
    lat: float,
) -> list[PolygonFeature]:
    # covers() counts boundary points as inside
    pt = Point(lon, lat)
    out: list[PolygonFeature] = []
    for f in features:
        poly = feature_polygon(f)
        if poly is not None and poly.covers(pt):
            out.append(f)
    return out

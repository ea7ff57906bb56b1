from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lon/lat degrees.

    Convention used throughout this repo:
    - minLon, minLat, maxLon, maxLat
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def center(self) -> tuple[float, float]:
        return (
            (self.min_lon + self.max_lon) / 2.0,
            (self.min_lat + self.max_lat) / 2.0,
        )

    def to_api(self) -> dict[str, float]:
        return {
            "minLon": self.min_lon,
            "minLat": self.min_lat,
            "maxLon": self.max_lon,
            "maxLat": self.max_lat,
        }


def bounds_of_ring(ring: Iterable[tuple[float, float]]) -> BBox:
    """
    Axis-aligned bounds of a coordinate ring.

    Longitude and latitude are scanned independently. The ring must be non-empty;
    the parser and the layer manager only call this on successfully parsed rings.
    """
    min_lon = min_lat = float("inf")
    max_lon = max_lat = float("-inf")
    seen = False
    for lon, lat in ring:
        seen = True
        min_lon = min(min_lon, lon)
        max_lon = max(max_lon, lon)
        min_lat = min(min_lat, lat)
        max_lat = max(max_lat, lat)
    if not seen:
        raise ValueError("bounds_of_ring() requires a non-empty ring")
    return BBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)

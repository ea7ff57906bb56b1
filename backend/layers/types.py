from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PolygonRecord:
    """
    One row of the court result list, reduced to what the map needs.
    """

    id: str
    name: str
    polygon: str  # WKT text


@dataclass(frozen=True)
class PolygonFeature:
    id: str
    name: str
    ring: tuple[tuple[float, float], ...]  # [(lon, lat), ...]; may be open or closed
    color_index: int

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "id": self.id,
            "properties": {
                "id": self.id,
                "name": self.name,
                "colorIndex": self.color_index,
            },
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[_json_coord(v) for v in p] for p in self.ring]],
            },
        }


def _json_coord(v: float) -> float | None:
    # JSON has no NaN; unparsable numbers go out as null.
    return v if math.isfinite(v) else None


def feature_collection(features: tuple[PolygonFeature, ...] | list[PolygonFeature]) -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [f.to_geojson() for f in features],
    }

from __future__ import annotations

from typing import Any, Iterable

import structlog

from geo.wkt import parse_wkt_polygon
from layers.types import PolygonFeature, PolygonRecord, feature_collection
from mapconfig.types import PALETTE_SIZE, MapPalette
from render.types import MapEngine

logger = structlog.get_logger(__name__)

POLYGONS_SOURCE_ID = "polygons-source"
POLYGONS_FILL_LAYER = "polygons-fill"
POLYGONS_OUTLINE_LAYER = "polygons-outline"


def build_features(
    records: Iterable[PolygonRecord],
    *,
    strict: bool = False,
) -> tuple[PolygonFeature, ...]:
    """
    Parse records into features, dropping the ones whose WKT does not parse.

    colorIndex is the position in the surviving list modulo the palette size, so
    the same id can change color when list order or membership changes.
    """
    out: list[PolygonFeature] = []
    dropped = 0
    for rec in records:
        ring = parse_wkt_polygon(rec.polygon, strict=strict)
        if ring is None:
            dropped += 1
            continue
        out.append(
            PolygonFeature(
                id=rec.id,
                name=rec.name,
                ring=tuple(ring),
                color_index=len(out) % PALETTE_SIZE,
            )
        )
    if dropped:
        logger.debug("polygons_dropped", dropped=dropped, kept=len(out))
    return tuple(out)


def match_color_expression(colors: list[str]) -> list[Any]:
    # Out-of-range indexes fall back to the last entry.
    expr: list[Any] = ["match", ["get", "colorIndex"]]
    for i, color in enumerate(colors):
        expr.extend([i, color])
    expr.append(colors[-1])
    return expr


def fill_paint(palette: MapPalette) -> dict[str, Any]:
    return {
        "fill-color": match_color_expression(palette.fill),
        "fill-opacity": palette.fillOpacity,
    }


def outline_paint(palette: MapPalette) -> dict[str, Any]:
    return {
        "line-color": match_color_expression(palette.outline),
        "line-width": palette.lineWidth,
    }


class PolygonLayerManager:
    """
    Keeps a single GeoJSON source + fill/outline layer pair for all result polygons.

    The first `apply` creates the source and layers (after the base style has
    loaded); every later call only swaps the source data, keeping layer styling.
    """

    def __init__(self, palette: MapPalette, *, strict_parse: bool = False) -> None:
        self.palette = palette
        self.strict_parse = strict_parse
        self.features: tuple[PolygonFeature, ...] = ()
        self._pending: dict[str, Any] | None = None
        self._waiting_for_load = False

    def apply(self, engine: MapEngine, records: Iterable[PolygonRecord]) -> tuple[PolygonFeature, ...]:
        self.features = build_features(records, strict=self.strict_parse)
        data = feature_collection(self.features)

        if engine.get_source(POLYGONS_SOURCE_ID) is not None:
            engine.set_source_data(POLYGONS_SOURCE_ID, data)
            return self.features

        if engine.is_style_loaded():
            self._create(engine, data)
            return self.features

        # Style still loading: remember the newest data and create once it is ready.
        self._pending = data
        if not self._waiting_for_load:
            self._waiting_for_load = True
            engine.on("load", lambda: self._on_style_load(engine))
        return self.features

    def find(self, feature_id: str) -> PolygonFeature | None:
        for f in self.features:
            if f.id == feature_id:
                return f
        return None

    def _on_style_load(self, engine: MapEngine) -> None:
        self._waiting_for_load = False
        data, self._pending = self._pending, None
        if data is None:
            return
        if engine.get_source(POLYGONS_SOURCE_ID) is not None:
            engine.set_source_data(POLYGONS_SOURCE_ID, data)
        else:
            self._create(engine, data)

    def _create(self, engine: MapEngine, data: dict[str, Any]) -> None:
        engine.add_source(POLYGONS_SOURCE_ID, data)
        engine.add_layer(
            POLYGONS_FILL_LAYER, POLYGONS_SOURCE_ID, "fill", fill_paint(self.palette)
        )
        engine.add_layer(
            POLYGONS_OUTLINE_LAYER,
            POLYGONS_SOURCE_ID,
            "line",
            outline_paint(self.palette),
        )
        logger.info("polygon_layers_created", features=len(data.get("features") or []))

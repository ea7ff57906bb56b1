from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

import structlog

from geo.aoi import bounds_of_ring
from layers.types import PolygonFeature
from render.types import LngLat, MapEngine

logger = structlog.get_logger(__name__)


@dataclass
class MapViewState:
    center: LngLat
    zoom: float
    # Set right before a code-issued camera change; the next moveend clears it.
    is_programmatic_move: bool = False


class ViewportFocusController:
    """
    Issues camera moves from code and keeps them from echoing back as user moves.

    Each programmatic move suppresses exactly one following moveend notification.
    """

    def __init__(self, state: MapViewState, *, padding: int, max_zoom: float) -> None:
        self.state = state
        self.padding = int(padding)
        self.max_zoom = float(max_zoom)
        self._listeners: list[Callable[[LngLat, float], None]] = []

    def on_move(self, callback: Callable[[LngLat, float], None]) -> None:
        self._listeners.append(callback)

    def focus(self, engine: MapEngine, feature: PolygonFeature | None) -> bool:
        if feature is None:
            return False
        bbox = bounds_of_ring(feature.ring)
        corners = (bbox.min_lon, bbox.min_lat, bbox.max_lon, bbox.max_lat)
        if not all(math.isfinite(v) for v in corners):
            logger.info("focus_skipped_unbounded", feature_id=feature.id)
            return False
        self.state.is_programmatic_move = True
        engine.fit_bounds(bbox, padding=self.padding, max_zoom=self.max_zoom)
        logger.debug("focus_polygon", feature_id=feature.id, bbox=bbox.to_api())
        return True

    def fly_to(self, engine: MapEngine, center: LngLat, zoom: float) -> None:
        self.state.is_programmatic_move = True
        engine.fly_to(center, zoom)

    def handle_move_end(self, center: LngLat, zoom: float) -> bool:
        """
        Engine `moveend` handler. Returns True when listeners were notified.
        """
        self.state.center = (float(center[0]), float(center[1]))
        self.state.zoom = float(zoom)
        if self.state.is_programmatic_move:
            self.state.is_programmatic_move = False
            return False
        for cb in list(self._listeners):
            cb(self.state.center, self.state.zoom)
        return True

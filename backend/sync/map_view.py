from __future__ import annotations

from typing import Callable, Iterable, TypeVar

import structlog

from layers.polygons import PolygonLayerManager
from layers.types import PolygonFeature, PolygonRecord
from mapconfig.types import MapConfig, MapStyle
from render.engine import create_map
from render.types import LngLat, MapEngine, Marker
from sync.focus import MapViewState, ViewportFocusController

logger = structlog.get_logger(__name__)

R = TypeVar("R")

EngineFactory = Callable[[MapStyle, LngLat, float], MapEngine]


class MapView:
    """
    Owns the map engine for one page view.

    Collaborators never hold the engine; they receive it as a call argument
    (`with_engine`, layer manager `apply`, focus controller `focus`).
    """

    def __init__(
        self,
        config: MapConfig,
        *,
        engine_factory: EngineFactory = create_map,
        strict_parse: bool = False,
    ) -> None:
        self.config = config
        center = config.fallbackCenter.as_tuple()
        self._engine = engine_factory(config.style, center, config.defaultZoom)
        self.state = MapViewState(center=center, zoom=config.defaultZoom)
        self.layers = PolygonLayerManager(config.palette, strict_parse=strict_parse)
        self.focus_controller = ViewportFocusController(
            self.state, padding=config.focusPadding, max_zoom=config.focusMaxZoom
        )
        self._marker: Marker | None = None
        self._marker_listeners: list[Callable[[float, float], None]] = []
        self._engine.on("moveend", self.focus_controller.handle_move_end)

    @property
    def features(self) -> tuple[PolygonFeature, ...]:
        return self.layers.features

    @property
    def marker_position(self) -> LngLat | None:
        return self._marker.position if self._marker is not None else None

    def with_engine(self, fn: Callable[[MapEngine], R]) -> R:
        return fn(self._engine)

    def on_marker_change(self, callback: Callable[[float, float], None]) -> None:
        self._marker_listeners.append(callback)

    def on_move(self, callback: Callable[[LngLat, float], None]) -> None:
        self.focus_controller.on_move(callback)

    def set_marker(self, position: LngLat) -> None:
        """
        Place (or move) the marker and fly the camera to it.
        """
        if self._marker is None:
            self._marker = self._engine.add_marker(position, draggable=True)
            self._marker.on_drag_end(self._on_marker_drag_end)
        else:
            self._marker.set_position(position)
        self.focus_controller.fly_to(self._engine, position, self.config.markerZoom)

    def show_polygons(self, records: Iterable[PolygonRecord]) -> tuple[PolygonFeature, ...]:
        return self.layers.apply(self._engine, records)

    def focus(self, feature_id: str) -> bool:
        return self.focus_controller.focus(self._engine, self.layers.find(feature_id))

    def _on_marker_drag_end(self, lon: float, lat: float) -> None:
        logger.debug("marker_dragged", lon=lon, lat=lat)
        for cb in list(self._marker_listeners):
            cb(lon, lat)

"""
In-process map engine.

Holds exactly the state a browser map would (sources, layers, camera, markers)
and records every command it receives. The HTTP layer renders it as a Plotly
figure; tests drive it directly and deliver the events a real map would emit.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from geo.aoi import BBox
from mapconfig.types import MapStyle
from render.types import LayerKind, LngLat, MapEvent
from render.view import fit_bounds_camera

logger = structlog.get_logger(__name__)


@dataclass
class InMemoryMarker:
    _position: LngLat
    draggable: bool = True
    _drag_end: list[Callable[[float, float], None]] = field(
        default_factory=list, repr=False
    )

    @property
    def position(self) -> LngLat:
        return self._position

    def set_position(self, position: LngLat) -> None:
        self._position = (float(position[0]), float(position[1]))

    def on_drag_end(self, callback: Callable[[float, float], None]) -> None:
        self._drag_end.append(callback)

    def drag_to(self, lon: float, lat: float) -> None:
        """
        Deliver a user drag: move the marker, then fire dragend listeners.
        """
        if not self.draggable:
            return
        self.set_position((lon, lat))
        for cb in list(self._drag_end):
            cb(self._position[0], self._position[1])


@dataclass(frozen=True)
class LayerSpec:
    id: str
    source_id: str
    kind: LayerKind
    paint: dict[str, Any]


class InMemoryMapEngine:
    def __init__(
        self,
        *,
        style: MapStyle,
        center: LngLat,
        zoom: float,
        viewport: dict[str, int] | None = None,
        style_loaded: bool = False,
    ) -> None:
        self.style = style
        self.center: LngLat = (float(center[0]), float(center[1]))
        self.zoom = float(zoom)
        self.viewport = viewport
        self.sources: dict[str, dict[str, Any]] = {}
        self.layers: list[LayerSpec] = []
        self.markers: list[InMemoryMarker] = []
        self.history: list[tuple[str, dict[str, Any]]] = []
        self._style_loaded = bool(style_loaded)
        self._listeners: dict[str, list[Callable[..., None]]] = {}

    # --- MapEngine protocol ---

    def get_source(self, source_id: str) -> dict[str, Any] | None:
        return self.sources.get(source_id)

    def add_source(self, source_id: str, data: dict[str, Any]) -> None:
        if source_id in self.sources:
            raise ValueError(f"Source already exists: {source_id}")
        self.sources[source_id] = copy.deepcopy(data)
        self._record("add_source", source_id=source_id)

    def set_source_data(self, source_id: str, data: dict[str, Any]) -> None:
        if source_id not in self.sources:
            raise KeyError(f"Unknown source: {source_id}")
        self.sources[source_id] = copy.deepcopy(data)
        self._record("set_source_data", source_id=source_id)

    def add_layer(
        self,
        layer_id: str,
        source_id: str,
        kind: LayerKind,
        paint: dict[str, Any],
    ) -> None:
        if any(layer.id == layer_id for layer in self.layers):
            raise ValueError(f"Layer already exists: {layer_id}")
        if source_id not in self.sources:
            raise KeyError(f"Layer '{layer_id}' references unknown source: {source_id}")
        self.layers.append(
            LayerSpec(id=layer_id, source_id=source_id, kind=kind, paint=dict(paint))
        )
        self._record("add_layer", layer_id=layer_id, source_id=source_id, kind=kind)

    def fit_bounds(self, bbox: BBox, *, padding: int, max_zoom: float) -> None:
        center, zoom = fit_bounds_camera(
            bbox, viewport=self.viewport, padding=padding, max_zoom=max_zoom
        )
        self.center, self.zoom = center, zoom
        self._record(
            "fit_bounds", bbox=bbox.to_api(), padding=padding, max_zoom=max_zoom
        )

    def fly_to(self, center: LngLat, zoom: float) -> None:
        self.center = (float(center[0]), float(center[1]))
        self.zoom = float(zoom)
        self._record("fly_to", center=self.center, zoom=self.zoom)

    def add_marker(self, position: LngLat, *, draggable: bool = True) -> InMemoryMarker:
        marker = InMemoryMarker(
            _position=(float(position[0]), float(position[1])), draggable=draggable
        )
        self.markers.append(marker)
        self._record("add_marker", position=marker.position, draggable=draggable)
        return marker

    def on(self, event: MapEvent, callback: Callable[..., None]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def is_style_loaded(self) -> bool:
        return self._style_loaded

    # --- host-delivered events ---

    def load_style(self) -> None:
        """
        Mark the base style as loaded and fire `load` listeners (only the first time).
        """
        if self._style_loaded:
            return
        self._style_loaded = True
        self._emit("load")

    def finish_move(self) -> None:
        """
        Report that the current camera move has completed.
        """
        self._emit("moveend", self.center, self.zoom)

    def pan_to(self, center: LngLat, zoom: float | None = None) -> None:
        """
        A user gesture: move the camera and immediately complete the move.
        """
        self.center = (float(center[0]), float(center[1]))
        if zoom is not None:
            self.zoom = float(zoom)
        self.finish_move()

    def commands(self, name: str) -> list[dict[str, Any]]:
        return [args for cmd, args in self.history if cmd == name]

    def _emit(self, event: str, *args: Any) -> None:
        for cb in list(self._listeners.get(event, [])):
            cb(*args)

    def _record(self, cmd: str, **args: Any) -> None:
        self.history.append((cmd, args))
        logger.debug("map_engine_command", command=cmd, **args)


def create_map(
    style: MapStyle,
    center: LngLat,
    zoom: float,
    *,
    viewport: dict[str, int] | None = None,
) -> InMemoryMapEngine:
    return InMemoryMapEngine(style=style, center=center, zoom=zoom, viewport=viewport)

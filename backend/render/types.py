from __future__ import annotations

from typing import Any, Callable, Literal, Protocol

from geo.aoi import BBox

LngLat = tuple[float, float]
LayerKind = Literal["fill", "line"]
MapEvent = Literal["load", "moveend"]


class Marker(Protocol):
    """
    A draggable point marker owned by a map engine.
    """

    @property
    def position(self) -> LngLat: ...

    def set_position(self, position: LngLat) -> None: ...

    def on_drag_end(self, callback: Callable[[float, float], None]) -> None: ...


class MapEngine(Protocol):
    """
    The narrow slice of a rendering engine this package drives.

    Kept to exactly the operations the map view uses so it can be backed by a
    browser map (through a bridge) or by `render.engine.InMemoryMapEngine`.
    """

    def get_source(self, source_id: str) -> dict[str, Any] | None: ...

    def add_source(self, source_id: str, data: dict[str, Any]) -> None: ...

    def set_source_data(self, source_id: str, data: dict[str, Any]) -> None: ...

    def add_layer(
        self,
        layer_id: str,
        source_id: str,
        kind: LayerKind,
        paint: dict[str, Any],
    ) -> None: ...

    def fit_bounds(self, bbox: BBox, *, padding: int, max_zoom: float) -> None: ...

    def fly_to(self, center: LngLat, zoom: float) -> None: ...

    def add_marker(self, position: LngLat, *, draggable: bool = True) -> Marker: ...

    def on(self, event: MapEvent, callback: Callable[..., None]) -> None: ...

    def is_style_loaded(self) -> bool: ...

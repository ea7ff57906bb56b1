from __future__ import annotations

import asyncio
from typing import Iterable

import structlog

from courts.client import CourtFinder
from courts.query import CourtQuery
from courts.types import CourtFindResult, FindParams
from geo.ops import features_covering
from mapconfig.types import MapConfig
from render.engine import create_map
from render.types import LngLat
from sync.location import Geolocation, LocationController, LocationSource, PermissionStore
from sync.map_view import EngineFactory, MapView
from sync.search import SearchBox

logger = structlog.get_logger(__name__)


class MapSession:
    """
    One court-locator page view.

    The marker drives the court query: it is placed when the location resolves
    and moved by user drags. Results go back onto the map as polygons. Camera
    moves only update the current center.
    """

    def __init__(
        self,
        *,
        config: MapConfig,
        finder: CourtFinder,
        store: PermissionStore,
        geolocation: Geolocation | None,
        judicial_ids: Iterable[str] = (),
        engine_factory: EngineFactory = create_map,
        strict_parse: bool = False,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config
        self.judicial_ids = tuple(judicial_ids)
        self.view = MapView(config, engine_factory=engine_factory, strict_parse=strict_parse)
        self.location = LocationController(
            fallback=config.fallbackCenter.as_tuple(),
            store=store,
            geolocation=geolocation,
        )
        self.query = CourtQuery(finder)
        self.center: LngLat = config.fallbackCenter.as_tuple()
        self.results: list[CourtFindResult] = []
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()
        self.search: SearchBox | None = None
        if loop is not None:
            self.search = SearchBox(
                delay_s=config.searchDebounceMs / 1000.0, scheduler=loop
            )

        self.location.on_resolved(self._on_location_resolved)
        self.view.on_marker_change(self._on_marker_dragged)
        self.view.on_move(self._on_user_move)

    @property
    def is_loading_location(self) -> bool:
        return self.location.is_loading

    @property
    def marker_position(self) -> LngLat | None:
        return self.view.marker_position

    def start(self) -> None:
        self.location.start()

    def find_params(self) -> FindParams | None:
        pos = self.view.marker_position
        if pos is None or not self.judicial_ids:
            return None
        return FindParams(
            judicial_ids=self.judicial_ids, latitude=pos[1], longitude=pos[0]
        )

    def move_marker(self, lon: float, lat: float) -> None:
        self.view.set_marker((lon, lat))
        self._schedule_refresh()

    def focus(self, court_id: str) -> bool:
        return self.view.focus(court_id)

    def containing_courts(self) -> list[str]:
        pos = self.view.marker_position
        if pos is None:
            return []
        return [f.id for f in features_covering(self.view.features, pos[0], pos[1])]

    async def refresh(self) -> None:
        rows = await self.query.run(self.find_params())
        if rows is None:
            return
        self.results = rows
        self.view.show_polygons(r.to_polygon_record() for r in rows)

    def close(self) -> None:
        if self.search is not None:
            self.search.close()

    async def settle(self) -> None:
        """
        Wait for every scheduled refresh to finish.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _schedule_refresh(self) -> None:
        if self._loop is None:
            return
        task = self._loop.create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_location_resolved(self, center: LngLat, source: LocationSource) -> None:
        self.center = center
        self.move_marker(center[0], center[1])

    def _on_marker_dragged(self, lon: float, lat: float) -> None:
        self.move_marker(lon, lat)

    def _on_user_move(self, center: LngLat, zoom: float) -> None:
        self.center = center

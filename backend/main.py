from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from courts.client import CourtFinder, CourtsClient
from courts.types import parse_judicial_ids
from layers.types import PolygonRecord, feature_collection
from mapconfig.registry import get_map_config
from render.engine import create_map
from render.figure import build_figure
from sync.location import LocationChoice, SessionPermissionStore
from sync.map_view import MapView
from sync.session import MapSession
from telemetry.log import configure_logging

configure_logging()

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiViewport(BaseModel):
    width: int = Field(default=900, ge=1)
    height: int = Field(default=600, ge=1)


class ApiPolygonRecord(BaseModel):
    id: str
    name: str
    polygon: str


class ApiLayerRequest(BaseModel):
    records: list[ApiPolygonRecord]
    viewport: ApiViewport | None = None
    strict: bool = False


class ApiFocusRequest(ApiLayerRequest):
    focusId: str


class ApiFindRequest(BaseModel):
    courts: str
    lat: float = Field(allow_inf_nan=False)
    lng: float = Field(allow_inf_nan=False)
    viewport: ApiViewport | None = None
    focusId: str | None = None


async def get_court_finder() -> AsyncIterator[CourtFinder]:
    client = CourtsClient()
    try:
        yield client
    finally:
        await client.aclose()


def _loaded_view(viewport: ApiViewport | None, *, strict: bool) -> MapView:
    factory = partial(
        create_map, viewport=viewport.model_dump() if viewport is not None else None
    )
    view = MapView(get_map_config(), engine_factory=factory, strict_parse=strict)
    view.with_engine(lambda engine: engine.load_style())
    return view


def _records(rows: list[ApiPolygonRecord]) -> list[PolygonRecord]:
    return [PolygonRecord(id=r.id, name=r.name, polygon=r.polygon) for r in rows]


def _view_payload(view: MapView) -> dict[str, Any]:
    return {
        "center": {"lon": view.state.center[0], "lat": view.state.center[1]},
        "zoom": view.state.zoom,
    }


@app.get("/map/config")
def map_config():
    return get_map_config().model_dump()


@app.post("/map/layer")
def map_layer(body: ApiLayerRequest):
    view = _loaded_view(body.viewport, strict=body.strict)
    features = view.show_polygons(_records(body.records))
    return {
        "featureCollection": feature_collection(features),
        "figure": view.with_engine(build_figure),
    }


@app.post("/map/focus")
def map_focus(body: ApiFocusRequest):
    view = _loaded_view(body.viewport, strict=body.strict)
    view.show_polygons(_records(body.records))
    focused = view.focus(body.focusId)
    # The engine reports the camera move as finished; it is not a user move.
    view.with_engine(lambda engine: engine.finish_move())
    return {
        "focused": focused,
        "view": _view_payload(view),
        "figure": view.with_engine(build_figure),
    }


@app.post("/map/find")
async def map_find(body: ApiFindRequest, finder: CourtFinder = Depends(get_court_finder)):
    judicial_ids = parse_judicial_ids(body.courts)
    if not judicial_ids:
        raise HTTPException(status_code=422, detail="At least one court id is required")

    viewport = body.viewport.model_dump() if body.viewport is not None else None
    session = MapSession(
        config=get_map_config(),
        finder=finder,
        store=SessionPermissionStore(LocationChoice.denied),
        geolocation=None,
        judicial_ids=judicial_ids,
        engine_factory=partial(create_map, viewport=viewport),
        loop=asyncio.get_running_loop(),
    )
    session.view.with_engine(lambda engine: engine.load_style())
    session.move_marker(body.lng, body.lat)
    await session.settle()

    focused = session.focus(body.focusId) if body.focusId else False
    session.view.with_engine(lambda engine: engine.finish_move())

    return {
        "status": session.query.status,
        "error": session.query.error,
        "courts": [r.model_dump() for r in session.results],
        "containing": session.containing_courts(),
        "focused": focused,
        "view": _view_payload(session.view),
        "figure": session.view.with_engine(build_figure),
    }

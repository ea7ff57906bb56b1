from __future__ import annotations

import asyncio

from courts.client import CourtsApiError
from courts.query import CourtQuery
from courts.types import CourtFindResult, FindParams, Judicial
from layers.polygons import POLYGONS_SOURCE_ID
from render.engine import InMemoryMapEngine
from sync.location import LocationChoice, SessionPermissionStore
from sync.session import MapSession


def _court(cid: str, x: float) -> CourtFindResult:
    return CourtFindResult(
        id=cid,
        name=f"Court {cid}",
        polygon=f"POLYGON(({x} 35.6, {x + 0.1} 35.6, {x + 0.1} 35.8, {x} 35.8, {x} 35.6))",
        judicial=Judicial(name="Family", code=1),
    )


class FakeFinder:
    """
    Answers from a lookup keyed by longitude; optional gates hold responses back.
    """

    def __init__(self, answers=None, *, fail=False):
        self.answers = answers or {}
        self.fail = fail
        self.calls = []
        self.gates = {}

    async def find(self, params: FindParams):
        self.calls.append(params)
        gate = self.gates.get(params.longitude)
        if gate is not None:
            await gate.wait()
        if self.fail:
            raise CourtsApiError("boom", status_code=500)
        return list(self.answers.get(params.longitude, []))


def _session(map_config, finder, *, store=None, geolocation=None, ids=("j1",)):
    session = MapSession(
        config=map_config,
        finder=finder,
        store=store or SessionPermissionStore(),
        geolocation=geolocation,
        judicial_ids=ids,
        loop=asyncio.get_running_loop(),
    )
    session.view.with_engine(lambda engine: engine.load_style())
    return session


def _polygon_ids(session) -> list[str]:
    def read(engine: InMemoryMapEngine):
        data = engine.get_source(POLYGONS_SOURCE_ID) or {"features": []}
        return [f["id"] for f in data["features"]]

    return session.view.with_engine(read)


def test_denied_location_queries_at_fallback(map_config):
    fallback = map_config.fallbackCenter.as_tuple()
    finder = FakeFinder({fallback[0]: [_court("a", 51.30)]})

    async def run():
        session = _session(map_config, finder, store=SessionPermissionStore(LocationChoice.denied))
        assert session.is_loading_location is True
        session.start()
        assert session.is_loading_location is False
        await session.settle()
        return session

    session = asyncio.run(run())
    assert session.marker_position == fallback
    assert [(p.longitude, p.latitude) for p in finder.calls] == [fallback]
    assert session.query.status == "success"
    assert _polygon_ids(session) == ["a"]


def test_device_location_drives_marker_and_query(map_config, geolocation):
    finder = FakeFinder({51.45: [_court("a", 51.40), _court("b", 51.50)]})

    async def run():
        session = _session(map_config, finder, geolocation=geolocation)
        session.start()
        session.location.allow()
        geolocation.succeed(51.45, 35.7)
        await session.settle()
        return session

    session = asyncio.run(run())
    assert session.marker_position == (51.45, 35.7)
    assert finder.calls[0].judicial_ids == ("j1",)
    assert _polygon_ids(session) == ["a", "b"]
    assert session.containing_courts() == ["a"]


def test_marker_drag_triggers_new_query(map_config):
    finder = FakeFinder({51.338: [_court("a", 51.30)], 51.6: [_court("z", 51.55)]})

    async def run():
        session = _session(map_config, finder, store=SessionPermissionStore(LocationChoice.denied))
        session.start()
        await session.settle()
        session.view.with_engine(lambda engine: engine.markers[0].drag_to(51.6, 35.7))
        await session.settle()
        return session

    session = asyncio.run(run())
    assert [p.longitude for p in finder.calls] == [51.338, 51.6]
    assert _polygon_ids(session) == ["z"]


def test_camera_moves_do_not_query(map_config):
    finder = FakeFinder({51.338: [_court("a", 51.30)]})

    async def run():
        session = _session(map_config, finder, store=SessionPermissionStore(LocationChoice.denied))
        session.start()
        await session.settle()
        session.view.with_engine(lambda engine: engine.finish_move())
        session.view.with_engine(lambda engine: engine.pan_to((52.0, 36.0), 9.0))
        await session.settle()
        return session

    session = asyncio.run(run())
    assert len(finder.calls) == 1
    assert session.center == (52.0, 36.0)


def test_focus_reframes_without_querying(map_config):
    finder = FakeFinder({51.338: [_court("a", 51.30)]})

    async def run():
        session = _session(map_config, finder, store=SessionPermissionStore(LocationChoice.denied))
        session.start()
        await session.settle()
        moved = []
        session.view.on_move(lambda center, zoom: moved.append(center))
        session.view.with_engine(lambda engine: engine.finish_move())
        assert session.focus("a") is True
        session.view.with_engine(lambda engine: engine.finish_move())
        await session.settle()
        return session, moved

    session, moved = asyncio.run(run())
    assert moved == []
    assert len(finder.calls) == 1


def test_no_judicial_ids_means_no_query(map_config):
    finder = FakeFinder()

    async def run():
        session = _session(map_config, finder, store=SessionPermissionStore(LocationChoice.denied), ids=())
        session.start()
        await session.settle()
        return session

    session = asyncio.run(run())
    assert finder.calls == []
    assert session.query.status == "idle"
    assert session.marker_position == map_config.fallbackCenter.as_tuple()


def test_fetch_failure_degrades_to_empty_polygons(map_config):
    finder = FakeFinder(fail=True)

    async def run():
        session = _session(map_config, finder, store=SessionPermissionStore(LocationChoice.denied))
        session.start()
        await session.settle()
        return session

    session = asyncio.run(run())
    assert session.query.status == "error"
    assert session.results == []
    assert _polygon_ids(session) == []


def test_late_response_for_old_key_is_dropped():
    finder = FakeFinder({1.0: [_court("old", 1.0)], 2.0: [_court("new", 2.0)]})

    async def run():
        query = CourtQuery(finder)
        gate = asyncio.Event()
        finder.gates[1.0] = gate
        first = asyncio.create_task(query.run(FindParams(("j",), 0.0, 1.0)))
        await asyncio.sleep(0)
        second = await query.run(FindParams(("j",), 0.0, 2.0))
        gate.set()
        return query, await first, second

    query, first, second = asyncio.run(run())
    assert first is None
    assert [r.id for r in second] == ["new"]
    assert [r.id for r in query.data] == ["new"]
    assert query.status == "success"


def test_late_error_for_old_key_is_dropped():
    class MixedFinder(FakeFinder):
        async def find(self, params):
            if params.longitude == 1.0:
                await self.gates[1.0].wait()
                raise CourtsApiError("late")
            return [_court("new", 2.0)]

    finder = MixedFinder()

    async def run():
        query = CourtQuery(finder)
        finder.gates[1.0] = asyncio.Event()
        first = asyncio.create_task(query.run(FindParams(("j",), 0.0, 1.0)))
        await asyncio.sleep(0)
        await query.run(FindParams(("j",), 0.0, 2.0))
        finder.gates[1.0].set()
        return query, await first

    query, first = asyncio.run(run())
    assert first is None
    assert query.status == "success"
    assert query.error is None


def test_disabled_query_does_not_fetch():
    finder = FakeFinder()

    async def run():
        query = CourtQuery(finder)
        return await query.run(None), await query.run(FindParams((), 1.0, 2.0))

    assert asyncio.run(run()) == (None, None)
    assert finder.calls == []


def test_session_search_box_uses_configured_debounce(map_config):
    finder = FakeFinder()

    async def run():
        session = _session(map_config, finder)
        assert session.search is not None
        assert session.search.delay_s == 0.5
        session.search.on_input("abc")
        session.close()
        await asyncio.sleep(0)
        return session

    session = asyncio.run(run())
    assert session.search.query.raw == "abc"
    assert session.search.query.stable == ""


def test_unexpected_finder_error_becomes_error_state():
    class CrashingFinder:
        async def find(self, params):
            raise RuntimeError("connection pool exhausted")

    async def run():
        query = CourtQuery(CrashingFinder())
        return query, await query.run(FindParams(("j",), 1.0, 2.0))

    query, rows = asyncio.run(run())
    assert rows == []
    assert query.status == "error"
    assert query.data == []
    assert query.error == "Court lookup failed"


def test_unexpected_finder_error_clears_polygons_in_session(map_config):
    class CrashingFinder(FakeFinder):
        async def find(self, params):
            self.calls.append(params)
            if len(self.calls) > 1:
                raise RuntimeError("connection pool exhausted")
            return [_court("a", params.longitude)]

    finder = CrashingFinder()

    async def run():
        session = _session(map_config, finder)
        session.move_marker(51.30, 35.70)
        await session.settle()
        first = _polygon_ids(session)
        session.move_marker(51.40, 35.70)
        await session.settle()
        return session, first

    session, first = asyncio.run(run())
    assert first == ["a"]
    assert session.query.status == "error"
    assert _polygon_ids(session) == []

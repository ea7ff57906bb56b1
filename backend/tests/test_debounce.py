from __future__ import annotations

import asyncio

from sync.debounce import Debouncer


def test_burst_emits_last_value_once(scheduler):
    emitted = []
    d = Debouncer(0.5, emitted.append, scheduler)

    # Inputs 62.5ms apart, then quiet.
    d.push("a")
    scheduler.advance(0.0625)
    d.push("ab")
    scheduler.advance(0.0625)
    d.push("abc")

    scheduler.advance(0.375)
    assert emitted == []

    scheduler.advance(0.125)
    assert emitted == ["abc"]

    scheduler.advance(5.0)
    assert emitted == ["abc"]


def test_no_emission_while_inputs_keep_arriving(scheduler):
    emitted = []
    d = Debouncer(0.5, emitted.append, scheduler)
    for i in range(20):
        d.push(i)
        scheduler.advance(0.25)
    assert emitted == []
    scheduler.advance(0.25)
    assert emitted == [19]


def test_each_quiet_period_emits_once(scheduler):
    emitted = []
    d = Debouncer(0.5, emitted.append, scheduler)
    d.push("x")
    scheduler.advance(1.0)
    d.push("y")
    scheduler.advance(1.0)
    assert emitted == ["x", "y"]


def test_cancel_drops_pending_emission(scheduler):
    emitted = []
    d = Debouncer(0.5, emitted.append, scheduler)
    d.push("x")
    assert d.pending
    d.cancel()
    assert not d.pending
    scheduler.advance(1.0)
    assert emitted == []


def test_debouncer_runs_on_asyncio_loop():
    async def run():
        emitted = []
        loop = asyncio.get_running_loop()
        d = Debouncer(0.2, emitted.append, loop)
        for v in ("a", "ab", "abc"):
            d.push(v)
            await asyncio.sleep(0.01)
        assert emitted == []
        await asyncio.sleep(0.4)
        return emitted

    assert asyncio.run(run()) == ["abc"]

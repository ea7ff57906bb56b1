from __future__ import annotations

from sync.search import SearchBox, SearchQuery


def test_stable_trails_raw_by_debounce_window(scheduler):
    box = SearchBox(delay_s=0.5, scheduler=scheduler)
    seen = []
    box.on_stable(seen.append)

    box.on_input("a")
    box.on_input("ab")
    box.on_input("abc")
    assert box.query == SearchQuery(raw="abc", stable="")

    scheduler.advance(0.5)
    assert box.query == SearchQuery(raw="abc", stable="abc")
    assert seen == [SearchQuery(raw="abc", stable="abc")]


def test_stable_value_uses_ascii_digits(scheduler):
    box = SearchBox(delay_s=0.5, scheduler=scheduler)
    box.on_input("خیابان ۱۲")
    scheduler.advance(0.5)
    assert box.query.stable == "خیابان 12"
    assert box.query.raw == "خیابان ۱۲"


def test_close_cancels_pending_stabilization(scheduler):
    box = SearchBox(delay_s=0.5, scheduler=scheduler)
    box.on_input("abc")
    box.close()
    scheduler.advance(1.0)
    assert box.query.stable == ""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from sync.debounce import Debouncer, Scheduler
from text.digits import to_english_digits


@dataclass(frozen=True)
class SearchQuery:
    raw: str = ""
    stable: str = ""


class SearchBox:
    """
    Search field state. `stable` trails `raw` by the debounce window.

    Address search itself is not implemented; listeners get the stabilized text.
    """

    def __init__(self, *, delay_s: float, scheduler: Scheduler) -> None:
        self.query = SearchQuery()
        self._listeners: list[Callable[[SearchQuery], None]] = []
        self._debouncer: Debouncer[str] = Debouncer(delay_s, self._stabilize, scheduler)

    @property
    def delay_s(self) -> float:
        return self._debouncer.delay_s

    def on_stable(self, callback: Callable[[SearchQuery], None]) -> None:
        self._listeners.append(callback)

    def on_input(self, raw: str) -> None:
        self.query = SearchQuery(raw=raw, stable=self.query.stable)
        self._debouncer.push(raw)

    def close(self) -> None:
        self._debouncer.cancel()

    def _stabilize(self, raw: str) -> None:
        self.query = SearchQuery(raw=self.query.raw, stable=to_english_digits(raw))
        for cb in list(self._listeners):
            cb(self.query)

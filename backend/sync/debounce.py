from __future__ import annotations

from typing import Any, Callable, Generic, Protocol, TypeVar

T = TypeVar("T")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """
    Anything with asyncio's `call_later` shape; an event loop qualifies.
    """

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class Debouncer(Generic[T]):
    """
    Emit the last pushed value once input has been quiet for `delay_s` seconds.

    Every push cancels the pending timer and schedules a new one, so a burst of
    inputs produces a single trailing emission and nothing while it lasts.
    """

    def __init__(
        self,
        delay_s: float,
        on_emit: Callable[[T], None],
        scheduler: Scheduler,
    ) -> None:
        self.delay_s = float(delay_s)
        self._on_emit = on_emit
        self._scheduler = scheduler
        self._handle: TimerHandle | None = None
        self._value: T | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        self._value = value
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._scheduler.call_later(self.delay_s, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        value = self._value
        self._on_emit(value)  # type: ignore[arg-type]

"""
Location acquisition as an explicit state machine.

    IDLE --SessionStarted--> AWAITING_PERMISSION_DECISION   (no stored choice)
    IDLE --SessionStarted--> ACQUIRING                      (stored "allowed")
    IDLE --SessionStarted--> RESOLVED(fallback)             (stored "denied")
    AWAITING --PermissionAllowed--> ACQUIRING
    AWAITING --PermissionDenied--> RESOLVED(fallback)
    ACQUIRING --PositionAcquired--> RESOLVED(device)
    ACQUIRING --PositionFailed--> RESOLVED(fallback)

RESOLVED is terminal. Events that don't fit the current state are ignored.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal, Protocol, cast

import structlog

from render.types import LngLat

logger = structlog.get_logger(__name__)


class LocationChoice(str, Enum):
    unset = "unset"
    allowed = "allowed"
    denied = "denied"


class LocationState(str, Enum):
    idle = "idle"
    awaiting_permission_decision = "awaiting_permission_decision"
    acquiring = "acquiring"
    resolved = "resolved"


LocationSource = Literal["device", "fallback"]


class PermissionStore(Protocol):
    def get(self) -> LocationChoice: ...

    def set(self, choice: LocationChoice) -> None: ...


class SessionPermissionStore:
    """
    Session-scoped tri-state permission choice. Written at most once.
    """

    def __init__(self, initial: LocationChoice = LocationChoice.unset) -> None:
        self._choice = initial

    def get(self) -> LocationChoice:
        return self._choice

    def set(self, choice: LocationChoice) -> None:
        if self._choice is not LocationChoice.unset:
            logger.debug("location_choice_already_set", current=self._choice.value)
            return
        self._choice = choice


class Geolocation(Protocol):
    def get_current_position(
        self,
        on_success: Callable[[float, float], None],
        on_error: Callable[[str], None],
    ) -> None: ...


@dataclass(frozen=True)
class SessionStarted:
    pass


@dataclass(frozen=True)
class PermissionAllowed:
    pass


@dataclass(frozen=True)
class PermissionDenied:
    dismissed: bool = False


@dataclass(frozen=True)
class PositionAcquired:
    lon: float
    lat: float


@dataclass(frozen=True)
class PositionFailed:
    reason: str = ""


LocationEvent = (
    SessionStarted | PermissionAllowed | PermissionDenied | PositionAcquired | PositionFailed
)


class LocationController:
    def __init__(
        self,
        *,
        fallback: LngLat,
        store: PermissionStore,
        geolocation: Geolocation | None,
    ) -> None:
        self.fallback = (float(fallback[0]), float(fallback[1]))
        self.store = store
        self.geolocation = geolocation
        self.state = LocationState.idle
        self.center: LngLat | None = None
        self.source: LocationSource | None = None
        self.is_loading = True
        self._listeners: list[Callable[[LngLat, LocationSource], None]] = []
        self._transitions: dict[
            tuple[LocationState, type], Callable[[LocationEvent], None]
        ] = {
            (LocationState.idle, SessionStarted): self._on_session_started,
            (LocationState.awaiting_permission_decision, PermissionAllowed): self._on_allowed,
            (LocationState.awaiting_permission_decision, PermissionDenied): self._on_denied,
            (LocationState.acquiring, PositionAcquired): self._on_acquired,
            (LocationState.acquiring, PositionFailed): self._on_failed,
        }

    def on_resolved(self, callback: Callable[[LngLat, LocationSource], None]) -> None:
        self._listeners.append(callback)

    def dispatch(self, event: LocationEvent) -> None:
        handler = self._transitions.get((self.state, type(event)))
        if handler is None:
            logger.debug(
                "location_event_ignored",
                state=self.state.value,
                location_event=type(event).__name__,
            )
            return
        handler(event)

    def start(self) -> None:
        self.dispatch(SessionStarted())

    def allow(self) -> None:
        self.dispatch(PermissionAllowed())

    def deny(self, *, dismissed: bool = False) -> None:
        self.dispatch(PermissionDenied(dismissed=dismissed))

    def _on_session_started(self, _event: LocationEvent) -> None:
        choice = self.store.get()
        if choice is LocationChoice.allowed:
            self._acquire()
        elif choice is LocationChoice.denied:
            self._resolve(self.fallback, "fallback")
        else:
            self.state = LocationState.awaiting_permission_decision

    def _on_allowed(self, _event: LocationEvent) -> None:
        self.store.set(LocationChoice.allowed)
        self._acquire()

    def _on_denied(self, _event: LocationEvent) -> None:
        self.store.set(LocationChoice.denied)
        self._resolve(self.fallback, "fallback")

    def _on_acquired(self, event: LocationEvent) -> None:
        pos = cast(PositionAcquired, event)
        self._resolve((float(pos.lon), float(pos.lat)), "device")

    def _on_failed(self, event: LocationEvent) -> None:
        logger.info("geolocation_failed", reason=cast(PositionFailed, event).reason)
        self._resolve(self.fallback, "fallback")

    def _acquire(self) -> None:
        self.state = LocationState.acquiring
        if self.geolocation is None:
            logger.info("geolocation_unavailable")
            self._resolve(self.fallback, "fallback")
            return
        self.geolocation.get_current_position(
            lambda lon, lat: self.dispatch(PositionAcquired(lon=lon, lat=lat)),
            lambda reason="": self.dispatch(PositionFailed(reason=str(reason))),
        )

    def _resolve(self, center: LngLat, source: LocationSource) -> None:
        self.state = LocationState.resolved
        self.center = center
        self.source = source
        self.is_loading = False
        logger.info("location_resolved", source=source, lon=center[0], lat=center[1])
        for cb in list(self._listeners):
            cb(center, source)

import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `geo.*`, `sync.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))


class ManualTimer:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """
    call_later() on a virtual clock; `advance()` fires due timers in order.
    """

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback, *args):
        timer = ManualTimer(self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = sorted(
                (t for t in self.pending() if t.when <= target), key=lambda t: t.when
            )
            if not due:
                break
            timer = due[0]
            self.now = timer.when
            timer.fired = True
            timer.callback(*timer.args)
        self.now = target


class FakeGeolocation:
    """
    Records requests; the test decides when and how they complete.
    """

    def __init__(self):
        self.requests = []

    def get_current_position(self, on_success, on_error):
        self.requests.append((on_success, on_error))

    def succeed(self, lon, lat):
        on_success, _ = self.requests[-1]
        on_success(lon, lat)

    def fail(self, reason="denied"):
        _, on_error = self.requests[-1]
        on_error(reason)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def geolocation():
    return FakeGeolocation()


@pytest.fixture
def map_config():
    from mapconfig.types import MapConfig

    return MapConfig()

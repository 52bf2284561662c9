"""Time sources for the broker."""
import time
from typing import Protocol


class Clock(Protocol):
    """Source of elapsed time and of wall-clock timestamps.

    ``now()`` drives every deadline and must never step backwards.
    ``timestamp()`` is only reported to humans, e.g. by ``/health``.
    """

    def now(self) -> float:
        ...

    def timestamp(self) -> float:
        ...


class SystemClock:
    """Monotonic time for deadlines, epoch seconds for display."""

    def now(self) -> float:
        return time.monotonic()

    def timestamp(self) -> float:
        return time.time()


class ManualClock:
    """Clock that only moves when told to.

    Lets tests step through heartbeat and command deadlines without sleeping.
    """

    def __init__(self, start: float = 0.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def timestamp(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        self._now += seconds
        return self._now

    def set(self, value: float) -> None:
        self._now = value

"""Clock abstraction for time-dependent analytics.

WallClock: real wall-clock time (dashboards, CLI)
SimClock: fixed time (tests, historical replays)

Analytics never call datetime.now() directly; rolling windows read
"now" once per computation from a clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...

    def now_ms(self) -> int:
        """Current time as milliseconds since epoch."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return int(self.now().timestamp() * 1000)


class SimClock:
    """Clock pinned to an explicit instant."""

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        if self._time.tzinfo is None:
            self._time = self._time.replace(tzinfo=timezone.utc)

    @classmethod
    def from_ms(cls, ms: int) -> SimClock:
        return cls(datetime.fromtimestamp(ms / 1000, tz=timezone.utc))

    def now(self) -> datetime:
        return self._time

    def now_ms(self) -> int:
        return int(self._time.timestamp() * 1000)

"""
Core Module - Clock.

============================================================
RESPONSIBILITY
============================================================
One source of "now" for the whole dashboard.

- Feed caches age their entries against it
- The service stamps overviews and counts altseason days with it
- Tests install a MockClock and move time by hand

All datetimes are timezone-aware UTC.
============================================================
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional
import threading


class ClockProtocol(ABC):
    """Anything that can tell the current UTC time."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(ClockProtocol):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class MockClock(ClockProtocol):
    """Frozen clock that only moves when advanced."""

    def __init__(self, start: Optional[datetime] = None):
        start = start or datetime.now(timezone.utc)
        self._current = _as_utc(start)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._current

    def advance(self, seconds: float = 0, **delta) -> None:
        """Move forward; extra keywords go to timedelta (minutes, hours, days)."""
        with self._lock:
            self._current += timedelta(seconds=seconds, **delta)


# ============================================================
# PROCESS-WIDE CLOCK
# ============================================================

class ClockFactory:
    """Holds the clock used by now_utc()."""

    _active: Optional[ClockProtocol] = None
    _lock = threading.Lock()

    @classmethod
    def get_clock(cls) -> ClockProtocol:
        with cls._lock:
            if cls._active is None:
                cls._active = SystemClock()
            return cls._active

    @classmethod
    def set_clock(cls, clock: ClockProtocol) -> None:
        with cls._lock:
            cls._active = clock

    @classmethod
    @contextmanager
    def use_mock(
        cls,
        start: Optional[datetime] = None,
    ) -> Generator[MockClock, None, None]:
        """Install a MockClock for the duration of the block."""
        previous = cls._active
        mock = MockClock(start)
        cls.set_clock(mock)
        try:
            yield mock
        finally:
            cls.set_clock(previous)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def from_iso8601(text: str) -> datetime:
    """Parse an ISO 8601 timestamp; 'Z' and naive values are read as UTC."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(text))


def now_utc() -> datetime:
    return ClockFactory.get_clock().now()


__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "ClockFactory",
    "from_iso8601",
    "now_utc",
]

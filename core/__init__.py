"""
Core Module Package.

Shared infrastructure used by the feeds, the scoring
service and the API.

Components:
- clock: Unified time abstraction
- settings: Environment-driven configuration
"""

from .clock import ClockFactory, ClockProtocol, MockClock, SystemClock, now_utc
from .settings import DashboardSettings


__all__ = [
    "ClockFactory",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "now_utc",
    "DashboardSettings",
]

"""
Battle Scoring Engine - Numeric Helpers.

Clamping, day counting and the display formatters shared
by the calculators and the dashboard.
"""

from datetime import datetime, timezone
from typing import Optional


MS_PER_DAY = 86_400_000


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound value to [lower, upper]."""
    return max(lower, min(upper, value))


def days_until(target: datetime, now: datetime) -> int:
    """
    Whole days from now until target, rounded up.

    Millisecond precision: one millisecond before the target
    counts as one day remaining. Past targets give zero or a
    negative count.
    """
    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    delta = target - now
    delta_ms = delta.days * MS_PER_DAY + delta.seconds * 1000 + delta.microseconds // 1000
    return -(-delta_ms // MS_PER_DAY)


def format_price(price: float) -> str:
    """$98,432"""
    return f"${round(price):,}"


def format_percent(value: float, decimals: int = 2) -> str:
    """+2.34% / -1.05%"""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}%"


def format_volume(volume: float) -> str:
    if volume >= 1e9:
        return f"${volume / 1e9:.1f}B"
    if volume >= 1e6:
        return f"${volume / 1e6:.1f}M"
    return f"${volume:,.0f}"


def format_market_cap(market_cap: float) -> str:
    if market_cap >= 1e12:
        return f"${market_cap / 1e12:.2f}T"
    if market_cap >= 1e9:
        return f"${market_cap / 1e9:.1f}B"
    return f"${market_cap:,.0f}"


def whale_usd_value_millions(amount_btc: float, btc_price: Optional[float]) -> Optional[float]:
    """USD value of a whale transaction in millions, 1 dp."""
    if btc_price is None:
        return None
    return round(amount_btc * btc_price / 1_000_000, 1)

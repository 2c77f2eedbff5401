"""
Dashboard - Application State.

============================================================
RESPONSIBILITY
============================================================
Holds the latest value of every reading the dashboard shows,
plus the derived Battle and Altseason results.

Readings start at sensible placeholder values so the page
renders before the first upstream fetch completes. The
altseason result stays in its loading state until real
dominance data has arrived.
============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from battle_scoring import (
    AltseasonResult,
    BattleBreakdown,
    BattleResult,
    MarketSnapshot,
    WhaleAlert,
)
from battle_scoring.altseason import LOADING_SIGNAL
from market_feeds import CastFeed, GlobalMarketData, NewsFeed


MAX_WHALE_ALERTS = 15
INITIAL_WHALE_ALERTS = 4


@dataclass
class DashboardState:
    """Mutable dashboard state, owned by DashboardService."""

    # Price
    price_usd: float = 98432.0
    price_change_pct: float = 2.34
    volume_24h_usd: Optional[float] = None
    market_cap_usd: Optional[float] = None
    price_updated_at: Optional[datetime] = None

    # Dominance
    btc_dominance_pct: float = 58.2
    usdt_dominance_pct: float = 4.8
    global_data: Optional[GlobalMarketData] = None

    # Sentiment and indicators
    fear_greed_value: int = 72
    fear_greed_text: str = "Greed"
    rsi: float = 62.0
    long_short_ratio: float = 1.24

    # Most recent first
    whale_alerts: list[WhaleAlert] = field(default_factory=list)

    # Derived
    battle: BattleResult = field(
        default_factory=lambda: BattleResult(bull_power=12.4, bear_power=9.2, tug_position=55.0)
    )
    battle_breakdown: BattleBreakdown = field(default_factory=BattleBreakdown)
    altseason: AltseasonResult = field(
        default_factory=lambda: AltseasonResult(score=50, signals=(LOADING_SIGNAL,), is_loading=True)
    )

    # Feeds
    news: Optional[NewsFeed] = None
    farcaster: Optional[CastFeed] = None

    def add_whale_alert(self, alert: WhaleAlert) -> None:
        self.whale_alerts.insert(0, alert)
        del self.whale_alerts[MAX_WHALE_ALERTS:]

    def market_snapshot(self) -> MarketSnapshot:
        return MarketSnapshot.build(
            price_change_percent_24h=self.price_change_pct,
            fear_greed_value=self.fear_greed_value,
            rsi=self.rsi,
            long_short_ratio=self.long_short_ratio,
            whale_alerts=self.whale_alerts,
        )

    def price_dict(self) -> dict[str, Any]:
        return {
            "price_usd": self.price_usd,
            "change_24h_pct": self.price_change_pct,
            "volume_24h_usd": self.volume_24h_usd,
            "market_cap_usd": self.market_cap_usd,
            "updated_at": self.price_updated_at.isoformat() if self.price_updated_at else None,
        }

    def market_dict(self) -> dict[str, Any]:
        return {
            "btc_dominance_pct": self.btc_dominance_pct,
            "usdt_dominance_pct": self.usdt_dominance_pct,
            "stablecoin_dominance_pct": (
                self.global_data.stablecoin_dominance_pct if self.global_data else None
            ),
            "others_dominance_pct": (
                self.global_data.others_dominance_pct if self.global_data else None
            ),
            "fear_greed": {"value": self.fear_greed_value, "text": self.fear_greed_text},
            "rsi": self.rsi,
            "long_short_ratio": self.long_short_ratio,
        }

"""
Battle Scoring Engine - Package.

============================================================
PURPOSE
============================================================
Derives the two composite scores shown on the dashboard:

- Battle Score: bull power vs bear power and a tug-of-war
  position in [15, 85]
- Altseason Score: 0-100 integer plus 5 signal lines

Both are pure, synchronous functions over a snapshot. The
caller polls the feeds, builds snapshots and stores the
results.

============================================================
USAGE
============================================================
    from battle_scoring import (
        MarketSnapshot,
        DominanceSnapshot,
        compute_battle,
        compute_altseason,
    )

    battle = compute_battle(
        MarketSnapshot(
            price_change_percent_24h=2.3,
            fear_greed_value=72,
            rsi=62,
            long_short_ratio=1.24,
        ),
        previous_tug=50.0,
    )

    altseason = compute_altseason(
        DominanceSnapshot.from_market_cap_percentages(58.2, 12.1, 4.8),
        btc_price=98432,
        now=datetime.now(timezone.utc),
    )

============================================================
"""

from .altseason import LOADING_SIGNAL, AltseasonScoreCalculator, compute_altseason
from .battle import NEUTRAL_TUG_POSITION, BattleScoreCalculator, compute_battle
from .config import AltseasonConfig, BattleScoreConfig, BtcPriceLevels
from .helpers import (
    clamp,
    days_until,
    format_market_cap,
    format_percent,
    format_price,
    format_volume,
    whale_usd_value_millions,
)
from .types import (
    AltseasonResult,
    BattleBreakdown,
    BattleLeader,
    BattleResult,
    DominanceSnapshot,
    MarketSnapshot,
    WhaleAlert,
    WhaleAlertType,
)


__all__ = [
    # Calculators
    "BattleScoreCalculator",
    "AltseasonScoreCalculator",
    "compute_battle",
    "compute_altseason",
    "NEUTRAL_TUG_POSITION",
    "LOADING_SIGNAL",

    # Config
    "BattleScoreConfig",
    "AltseasonConfig",
    "BtcPriceLevels",

    # Types
    "MarketSnapshot",
    "DominanceSnapshot",
    "WhaleAlert",
    "WhaleAlertType",
    "BattleResult",
    "BattleBreakdown",
    "BattleLeader",
    "AltseasonResult",

    # Helpers
    "clamp",
    "days_until",
    "format_price",
    "format_percent",
    "format_volume",
    "format_market_cap",
    "whale_usd_value_millions",
]

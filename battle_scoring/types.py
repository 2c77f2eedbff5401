"""
Battle Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the Battle and Altseason calculators.

Inputs are snapshots assembled by the caller from whatever
market feeds it polls. Outputs are recomputed on every tick
and held only for the current render.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable
- Enums for discrete values
- Clear separation between input and output types
- No I/O, no clock access

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


# ============================================================
# ENUMS
# ============================================================


class WhaleAlertType(str, Enum):
    """Direction of a large BTC transaction."""

    BUY = "buy"
    SELL = "sell"


class BattleLeader(str, Enum):
    """Which side currently has more power."""

    BULLS = "bulls"
    BEARS = "bears"
    EVEN = "even"


# ============================================================
# INPUT DATA CONTRACTS
# ============================================================


@dataclass(frozen=True)
class WhaleAlert:
    """
    A single large transaction event.

    Only `type` and `amount_btc` feed the battle score.
    The remaining fields are display metadata.
    """

    type: WhaleAlertType
    amount_btc: float

    alert_id: str = ""
    exchange: str = ""
    usd_value_millions: Optional[float] = None
    timestamp: Optional[datetime] = None

    # True when produced by a simulated source rather than a real feed
    simulated: bool = False

    @property
    def is_buy(self) -> bool:
        return self.type == WhaleAlertType.BUY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "type": self.type.value,
            "amount_btc": self.amount_btc,
            "exchange": self.exchange,
            "usd_value_millions": self.usd_value_millions,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "simulated": self.simulated,
        }


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Input to the Battle Score.

    `recent_whale_alerts` is ordered most-recent-first and may
    be empty. Only the most recent entries (see
    BattleScoreConfig.whale_window) are consulted.
    """

    price_change_percent_24h: float
    fear_greed_value: int          # 0 to 100
    rsi: float                     # 0 to 100
    long_short_ratio: float        # > 0
    recent_whale_alerts: Tuple[WhaleAlert, ...] = ()

    @classmethod
    def build(
        cls,
        price_change_percent_24h: float,
        fear_greed_value: int,
        rsi: float,
        long_short_ratio: float,
        whale_alerts: Optional[Iterable[WhaleAlert]] = None,
    ) -> "MarketSnapshot":
        """Create a snapshot from any iterable of alerts."""
        return cls(
            price_change_percent_24h=price_change_percent_24h,
            fear_greed_value=fear_greed_value,
            rsi=rsi,
            long_short_ratio=long_short_ratio,
            recent_whale_alerts=tuple(whale_alerts or ()),
        )


@dataclass(frozen=True)
class DominanceSnapshot:
    """
    Input to the Altseason Score.

    `others_dominance_percent` is expected to be
    100 - BTC - ETH dominance. The scorer only consumes it;
    use `from_market_cap_percentages` to derive it.
    """

    btc_dominance_percent: float
    others_dominance_percent: float
    stablecoin_dominance_percent: float

    @classmethod
    def from_market_cap_percentages(
        cls,
        btc_percent: float,
        eth_percent: float,
        stablecoin_percent: float,
    ) -> "DominanceSnapshot":
        return cls(
            btc_dominance_percent=btc_percent,
            others_dominance_percent=100.0 - btc_percent - eth_percent,
            stablecoin_dominance_percent=stablecoin_percent,
        )


# ============================================================
# OUTPUT DATA CONTRACTS
# ============================================================


@dataclass(frozen=True)
class BattleResult:
    """
    Output of the Battle Score.

    tug_position: 15 (bulls winning) to 85 (bears winning).
    Equals the caller's previous tug when total power is zero.
    """

    bull_power: float
    bear_power: float
    tug_position: float

    @property
    def total_power(self) -> float:
        return self.bull_power + self.bear_power

    @property
    def leader(self) -> BattleLeader:
        if self.bull_power > self.bear_power:
            return BattleLeader.BULLS
        if self.bear_power > self.bull_power:
            return BattleLeader.BEARS
        return BattleLeader.EVEN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bull_power": self.bull_power,
            "bear_power": self.bear_power,
            "tug_position": self.tug_position,
            "total_power": self.total_power,
            "leader": self.leader.value,
        }


@dataclass(frozen=True)
class BattleBreakdown:
    """Per-category contributions behind a BattleResult."""

    # category -> (bull contribution, bear contribution)
    contributions: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    whale_alerts_used: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contributions": {
                name: {"bull": bull, "bear": bear}
                for name, (bull, bear) in self.contributions.items()
            },
            "whale_alerts_used": self.whale_alerts_used,
        }


@dataclass(frozen=True)
class AltseasonResult:
    """
    Output of the Altseason Score.

    signals has exactly 5 entries in fixed order:
    BTC dominance, others dominance, stablecoin dominance,
    BTC support, time remaining. The loading sentinel has 1.
    """

    score: int
    signals: Tuple[str, ...]
    is_loading: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "signals": list(self.signals),
            "is_loading": self.is_loading,
        }

"""
Battle Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
Fixed empirical constants for the Battle and Altseason
calculators.

The defaults are load-bearing: changing them changes the
scores the dashboard shows. Override only in tests or
for experiments.

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


# ============================================================
# BATTLE SCORE CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class BattleScoreConfig:
    """
    Configuration for the bull vs bear Battle Score.

    ============================================================
    TERMS
    ============================================================
    Price change:   min(|change| * 2, 10)
    Fear & Greed:   |value - 50| / 10
    RSI:            |rsi - 50| / 20
    Long/Short:     |ratio - 1| * 5
    Whale flow:     amount_btc / 500, last 10 alerts

    Each term feeds exactly one side.

    ============================================================
    TUG MAPPING
    ============================================================
    tug = clamp(50 - (bull - bear) / total * 35, 15, 85)

    ============================================================
    """

    price_change_multiplier: float = 2.0
    price_change_cap: float = 10.0

    fear_greed_neutral: float = 50.0
    fear_greed_divisor: float = 10.0

    rsi_neutral: float = 50.0
    rsi_divisor: float = 20.0

    long_short_neutral: float = 1.0
    long_short_multiplier: float = 5.0

    whale_btc_divisor: float = 500.0
    whale_window: int = 10

    tug_neutral: float = 50.0
    tug_span: float = 35.0
    tug_min: float = 15.0
    tug_max: float = 85.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_change_multiplier": self.price_change_multiplier,
            "price_change_cap": self.price_change_cap,
            "fear_greed_neutral": self.fear_greed_neutral,
            "fear_greed_divisor": self.fear_greed_divisor,
            "rsi_neutral": self.rsi_neutral,
            "rsi_divisor": self.rsi_divisor,
            "long_short_neutral": self.long_short_neutral,
            "long_short_multiplier": self.long_short_multiplier,
            "whale_btc_divisor": self.whale_btc_divisor,
            "whale_window": self.whale_window,
            "tug_neutral": self.tug_neutral,
            "tug_span": self.tug_span,
            "tug_min": self.tug_min,
            "tug_max": self.tug_max,
        }


# ============================================================
# ALTSEASON CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class BtcPriceLevels:
    """Key BTC price levels (USD). External, not derived."""

    critical_low: float = 104_000.0
    critical_high: float = 105_000.0
    bull_confirmation: float = 116_000.0
    breakdown: float = 88_000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "critical_low": self.critical_low,
            "critical_high": self.critical_high,
            "bull_confirmation": self.bull_confirmation,
            "breakdown": self.breakdown,
        }


DEFAULT_TARGET_DATE = datetime(2025, 12, 15, tzinfo=timezone.utc)


@dataclass(frozen=True)
class AltseasonConfig:
    """
    Configuration for the Altseason Score.

    ============================================================
    POINTS TABLE
    ============================================================
    BTC dominance     < 61 -> 25, < 64 -> 15, else 0
    Others dominance  > 30 -> 25, > 25 -> 15, else 0
    Stablecoin dom.   < 6  -> 15, else 5
    BTC support       >= critical_low -> 20, >= breakdown -> 10, else 0
    Days remaining    1..45 -> 15, > 45 -> 5, else 0

    All green: 25 + 25 + 15 + 20 + 15 = 100

    ============================================================
    """

    btc_dominance_strong: float = 61.0
    btc_dominance_weak: float = 64.0
    btc_dominance_strong_points: int = 25
    btc_dominance_weak_points: int = 15

    others_dominance_strong: float = 30.0
    others_dominance_weak: float = 25.0
    others_dominance_strong_points: int = 25
    others_dominance_weak_points: int = 15

    stablecoin_dominance_low: float = 6.0
    stablecoin_low_points: int = 15
    stablecoin_neutral_points: int = 5

    price_levels: BtcPriceLevels = field(default_factory=BtcPriceLevels)
    btc_support_points: int = 20
    btc_breakdown_points: int = 10

    target_date: datetime = DEFAULT_TARGET_DATE
    time_window_days: int = 45
    time_window_points: int = 15
    time_early_points: int = 5

    max_score: int = 100
    loading_score: int = 50

    @property
    def all_green_total(self) -> int:
        """Sum of the top tier of every signal."""
        return (
            self.btc_dominance_strong_points
            + self.others_dominance_strong_points
            + self.stablecoin_low_points
            + self.btc_support_points
            + self.time_window_points
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "btc_dominance_strong": self.btc_dominance_strong,
            "btc_dominance_weak": self.btc_dominance_weak,
            "others_dominance_strong": self.others_dominance_strong,
            "others_dominance_weak": self.others_dominance_weak,
            "stablecoin_dominance_low": self.stablecoin_dominance_low,
            "price_levels": self.price_levels.to_dict(),
            "target_date": self.target_date.isoformat(),
            "time_window_days": self.time_window_days,
            "max_score": self.max_score,
        }

"""
Battle Scoring Engine - Bull vs Bear Battle Score.

============================================================
PURPOSE
============================================================
Converts a MarketSnapshot into bull power, bear power and a
tug-of-war position.

============================================================
DESIGN PRINCIPLES
============================================================
- Pure function: same input = same output
- Every term contributes to exactly one side
- Bull and bear power are never negative
- Total over all numeric input, zero power is guarded

============================================================
TUG POSITION
============================================================
50 is neutral. Bulls pull the rope towards 15, bears
towards 85. When there is no power at all the caller's
previous position is kept.

============================================================
"""

from typing import Dict, Optional, Tuple

from .config import BattleScoreConfig
from .helpers import clamp
from .types import (
    BattleBreakdown,
    BattleResult,
    MarketSnapshot,
    WhaleAlert,
    WhaleAlertType,
)


NEUTRAL_TUG_POSITION = 50.0


class BattleScoreCalculator:
    """
    Bull vs bear power calculator.

    Stateless. The previous tug position is passed in by the
    caller, which owns the dashboard state.
    """

    def __init__(self, config: Optional[BattleScoreConfig] = None):
        self.config = config or BattleScoreConfig()

    def compute(
        self,
        snapshot: MarketSnapshot,
        previous_tug: float = NEUTRAL_TUG_POSITION,
    ) -> BattleResult:
        """
        Compute bull power, bear power and tug position.

        Args:
            snapshot: Current market readings
            previous_tug: Tug position to keep if total power is zero

        Returns:
            BattleResult
        """
        breakdown = self.breakdown(snapshot)

        bull = 0.0
        bear = 0.0
        for bull_part, bear_part in breakdown.contributions.values():
            bull += bull_part
            bear += bear_part

        return BattleResult(
            bull_power=bull,
            bear_power=bear,
            tug_position=self._tug_position(bull, bear, previous_tug),
        )

    def breakdown(self, snapshot: MarketSnapshot) -> BattleBreakdown:
        """Per-category (bull, bear) contributions."""
        cfg = self.config
        window = self.whale_window(snapshot)

        contributions: Dict[str, Tuple[float, float]] = {
            "price_change": self._price_change_term(snapshot.price_change_percent_24h),
            "fear_greed": self._one_sided(
                snapshot.fear_greed_value, cfg.fear_greed_neutral, divisor=cfg.fear_greed_divisor
            ),
            "rsi": self._one_sided(snapshot.rsi, cfg.rsi_neutral, divisor=cfg.rsi_divisor),
            "long_short": self._one_sided(
                snapshot.long_short_ratio, cfg.long_short_neutral, multiplier=cfg.long_short_multiplier
            ),
            "whale_flow": self._whale_flow_term(window),
        }

        return BattleBreakdown(
            contributions=contributions,
            whale_alerts_used=len(window),
        )

    def whale_window(self, snapshot: MarketSnapshot) -> Tuple[WhaleAlert, ...]:
        """The most recent alerts consulted by the flow term."""
        if self.config.whale_window <= 0:
            return ()
        return snapshot.recent_whale_alerts[: self.config.whale_window]

    # ------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------

    def _price_change_term(self, change_pct: float) -> Tuple[float, float]:
        cfg = self.config
        magnitude = min(abs(change_pct) * cfg.price_change_multiplier, cfg.price_change_cap)
        if change_pct > 0:
            return magnitude, 0.0
        return 0.0, magnitude

    @staticmethod
    def _one_sided(
        value: float,
        neutral: float,
        multiplier: float = 1.0,
        divisor: float = 1.0,
    ) -> Tuple[float, float]:
        # strictly above neutral is bullish, at or below is bearish
        if value > neutral:
            return (value - neutral) * multiplier / divisor, 0.0
        return 0.0, (neutral - value) * multiplier / divisor

    def _whale_flow_term(self, alerts: Tuple[WhaleAlert, ...]) -> Tuple[float, float]:
        bull = 0.0
        bear = 0.0
        for alert in alerts:
            power = alert.amount_btc / self.config.whale_btc_divisor
            if alert.type == WhaleAlertType.BUY:
                bull += power
            else:
                bear += power
        return bull, bear

    def _tug_position(self, bull: float, bear: float, previous_tug: float) -> float:
        cfg = self.config
        total = bull + bear
        if total <= 0:
            return previous_tug
        position = cfg.tug_neutral - ((bull - bear) / total) * cfg.tug_span
        return clamp(position, cfg.tug_min, cfg.tug_max)


_default_calculator = BattleScoreCalculator()


def compute_battle(
    snapshot: MarketSnapshot,
    previous_tug: float = NEUTRAL_TUG_POSITION,
    config: Optional[BattleScoreConfig] = None,
) -> BattleResult:
    """Compute the Battle Score with default or given configuration."""
    calculator = BattleScoreCalculator(config) if config else _default_calculator
    return calculator.compute(snapshot, previous_tug)

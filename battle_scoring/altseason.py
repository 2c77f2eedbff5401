"""
Battle Scoring Engine - Altseason Score.

============================================================
PURPOSE
============================================================
Composite 0-100 heuristic for capital rotating out of BTC
into alternative coins.

============================================================
SCORING
============================================================
Five independent signals, each awarding exactly one tier:

1. BTC dominance        (lower is better)
2. Others dominance     (higher is better)
3. Stablecoin dominance (lower means capital is deployed)
4. BTC support          (BTC holding key levels)
5. Time remaining       (inside the window to target date)

Each signal appends one line to the signal list, always in
this order. Missing dominance or price short-circuits to a
neutral loading result.

============================================================
"""

from datetime import datetime
from typing import List, Optional, Tuple

from .config import AltseasonConfig
from .helpers import days_until, format_price
from .types import AltseasonResult, DominanceSnapshot


LOADING_SIGNAL = "Loading data..."


class AltseasonScoreCalculator:
    """Altseason probability calculator. Stateless."""

    def __init__(self, config: Optional[AltseasonConfig] = None):
        self.config = config or AltseasonConfig()

    def loading_result(self) -> AltseasonResult:
        return AltseasonResult(
            score=self.config.loading_score,
            signals=(LOADING_SIGNAL,),
            is_loading=True,
        )

    def compute(
        self,
        dominance: Optional[DominanceSnapshot],
        btc_price: Optional[float],
        now: datetime,
    ) -> AltseasonResult:
        """
        Compute the altseason score.

        Args:
            dominance: Current dominance readings, None while loading
            btc_price: BTC spot price in USD, None while loading
            now: Current time, used for the days-remaining signal

        Returns:
            AltseasonResult with 5 signals, or the loading sentinel
        """
        if dominance is None or btc_price is None:
            return self.loading_result()

        score = 0
        signals: List[str] = []

        for points, signal in (
            self._btc_dominance(dominance.btc_dominance_percent),
            self._others_dominance(dominance.others_dominance_percent),
            self._stablecoin_dominance(dominance.stablecoin_dominance_percent),
            self._btc_support(btc_price),
            self._time_remaining(days_until(self.config.target_date, now)),
        ):
            score += points
            signals.append(signal)

        score = max(0, min(score, self.config.max_score))
        return AltseasonResult(score=score, signals=tuple(signals))

    # ------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------

    def _btc_dominance(self, value: float) -> Tuple[int, str]:
        cfg = self.config
        if value < cfg.btc_dominance_strong:
            return (
                cfg.btc_dominance_strong_points,
                f"BTC dominance {value:.1f}% is below {cfg.btc_dominance_strong:g}%: capital rotating to alts",
            )
        if value < cfg.btc_dominance_weak:
            return (
                cfg.btc_dominance_weak_points,
                f"BTC dominance {value:.1f}% is below {cfg.btc_dominance_weak:g}%: rotation starting",
            )
        return 0, f"BTC dominance {value:.1f}% is high: BTC still leading"

    def _others_dominance(self, value: float) -> Tuple[int, str]:
        cfg = self.config
        if value > cfg.others_dominance_strong:
            return (
                cfg.others_dominance_strong_points,
                f"Others dominance {value:.1f}% is above {cfg.others_dominance_strong:g}%: strong alt inflows",
            )
        if value > cfg.others_dominance_weak:
            return (
                cfg.others_dominance_weak_points,
                f"Others dominance {value:.1f}% is above {cfg.others_dominance_weak:g}%: alts gaining share",
            )
        return 0, f"Others dominance {value:.1f}% is low: alts lagging"

    def _stablecoin_dominance(self, value: float) -> Tuple[int, str]:
        cfg = self.config
        if value < cfg.stablecoin_dominance_low:
            return (
                cfg.stablecoin_low_points,
                f"Stablecoin dominance {value:.1f}% is low: capital deployed in risk assets",
            )
        return (
            cfg.stablecoin_neutral_points,
            f"Stablecoin dominance {value:.1f}% is elevated: capital on the sidelines",
        )

    def _btc_support(self, price: float) -> Tuple[int, str]:
        cfg = self.config
        levels = cfg.price_levels
        if price >= levels.critical_low:
            if price >= levels.bull_confirmation:
                note = f"above {format_price(levels.bull_confirmation)} bull confirmation"
            elif price >= levels.critical_high:
                note = f"above {format_price(levels.critical_high)} resistance"
            else:
                note = f"holding {format_price(levels.critical_low)} support"
            return cfg.btc_support_points, f"BTC {format_price(price)} {note}"
        if price >= levels.breakdown:
            return (
                cfg.btc_breakdown_points,
                f"BTC {format_price(price)} below {format_price(levels.critical_low)} but above "
                f"{format_price(levels.breakdown)} breakdown",
            )
        return 0, f"BTC {format_price(price)} lost {format_price(levels.breakdown)} breakdown level"

    def _time_remaining(self, days: int) -> Tuple[int, str]:
        cfg = self.config
        if 0 < days <= cfg.time_window_days:
            return cfg.time_window_points, f"{days} days to target: inside the altseason window"
        if days > cfg.time_window_days:
            return cfg.time_early_points, f"{days} days to target: early"
        return 0, "Target date passed"


_default_calculator = AltseasonScoreCalculator()


def compute_altseason(
    dominance: Optional[DominanceSnapshot],
    btc_price: Optional[float],
    now: datetime,
    config: Optional[AltseasonConfig] = None,
) -> AltseasonResult:
    """Compute the Altseason Score with default or given configuration."""
    calculator = AltseasonScoreCalculator(config) if config else _default_calculator
    return calculator.compute(dominance, btc_price, now)

"""
Simulated Market Inputs.

SIMULATED DATA WARNING: nothing in this module observes the
real market. There is no free large-transaction feed, so
whale alerts are synthesized; RSI and the long/short ratio
drift randomly around their last value. Every alert produced
here carries simulated=True.

Randomness is injected (random.Random) so tests can replay
an exact sequence.
"""

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Optional, Protocol

from battle_scoring import WhaleAlert, WhaleAlertType, clamp, whale_usd_value_millions


WHALE_EXCHANGES: tuple[str, ...] = (
    "Coinbase",
    "Binance",
    "Kraken",
    "Unknown Wallet",
    "Bitfinex",
    "OKX",
)


class WhaleAlertSource(Protocol):
    """Anything that can be polled for the next whale alert."""

    def poll(self, btc_price: Optional[float], now: datetime) -> Optional[WhaleAlert]:
        """Return a new alert, or None when nothing happened this tick."""
        ...


class SimulatedWhaleAlertSource:
    """
    Random buy/sell alerts.

    Buy and sell are equally likely; amounts are uniform
    integers in [min_amount_btc, max_amount_btc].
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        probability: float = 0.4,
        min_amount_btc: int = 100,
        max_amount_btc: int = 2099,
        exchanges: Iterable[str] = WHALE_EXCHANGES,
    ) -> None:
        self._rng = rng or random.Random()
        self.probability = probability
        self.min_amount_btc = min_amount_btc
        self.max_amount_btc = max_amount_btc
        self.exchanges = tuple(exchanges)
        self._counter = 0

    def generate(self, btc_price: Optional[float], now: datetime) -> WhaleAlert:
        """Always produce an alert."""
        self._counter += 1
        alert_type = WhaleAlertType.BUY if self._rng.random() > 0.5 else WhaleAlertType.SELL
        amount = self._rng.randint(self.min_amount_btc, self.max_amount_btc)

        return WhaleAlert(
            type=alert_type,
            amount_btc=float(amount),
            alert_id=f"sim-{int(now.timestamp() * 1000)}-{self._counter}",
            exchange=self._rng.choice(self.exchanges),
            usd_value_millions=whale_usd_value_millions(amount, btc_price),
            timestamp=now,
            simulated=True,
        )

    def poll(self, btc_price: Optional[float], now: datetime) -> Optional[WhaleAlert]:
        if self._rng.random() >= self.probability:
            return None
        return self.generate(btc_price, now)

    def initial_alerts(
        self,
        count: int,
        btc_price: Optional[float],
        now: datetime,
    ) -> list[WhaleAlert]:
        return [self.generate(btc_price, now) for _ in range(count)]


class FixedWhaleAlertSource:
    """Replays a fixed sequence of alerts, one per poll."""

    def __init__(self, alerts: Iterable[WhaleAlert]) -> None:
        self._alerts: Iterator[WhaleAlert] = iter(list(alerts))

    def poll(self, btc_price: Optional[float], now: datetime) -> Optional[WhaleAlert]:
        return next(self._alerts, None)


@dataclass(frozen=True)
class IndicatorReading:
    rsi: float
    long_short_ratio: float


class SimulatedIndicatorDrift:
    """
    Random walk for RSI and the long/short ratio.

    On roughly 15% of ticks RSI moves by up to +/-2.5 within
    [20, 80] and the ratio by up to +/-0.05 within [0.5, 2.0].
    """

    RSI_BOUNDS = (20.0, 80.0)
    RSI_STEP = 5.0
    RATIO_BOUNDS = (0.5, 2.0)
    RATIO_STEP = 0.1

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        probability: float = 0.15,
    ) -> None:
        self._rng = rng or random.Random()
        self.probability = probability

    def step(self, rsi: float, long_short_ratio: float) -> IndicatorReading:
        if self._rng.random() >= self.probability:
            return IndicatorReading(rsi=rsi, long_short_ratio=long_short_ratio)

        new_rsi = clamp(
            rsi + (self._rng.random() - 0.5) * self.RSI_STEP,
            *self.RSI_BOUNDS,
        )
        new_ratio = clamp(
            long_short_ratio + (self._rng.random() - 0.5) * self.RATIO_STEP,
            *self.RATIO_BOUNDS,
        )
        return IndicatorReading(rsi=new_rsi, long_short_ratio=new_ratio)

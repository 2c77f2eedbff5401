"""
Dashboard Services.

============================================================
RESPONSIBILITY
============================================================
DashboardService owns the DashboardState, the market feed
sources and the clock. Each refresh pulls one feed, applies
it to the state and re-derives the Battle and Altseason
results.

Feed sources never raise. When a fetch returns nothing the
previous value stays in place.
============================================================
"""

import asyncio
import logging
import random
from typing import Any, Iterable, Optional

from battle_scoring import (
    AltseasonConfig,
    AltseasonScoreCalculator,
    BattleScoreCalculator,
    WhaleAlert,
)
from core.clock import ClockFactory, ClockProtocol
from core.settings import DashboardSettings
from market_feeds import (
    BaseMarketSource,
    CoinGeckoGlobalSource,
    CoinGeckoPriceSource,
    CryptoPanicNewsSource,
    FarcasterHubSource,
    FearGreedSource,
    SimulatedIndicatorDrift,
    SimulatedWhaleAlertSource,
    SummaryMarketData,
    TechnicalSummary,
    TechnicalSummaryClient,
    WhaleAlertSource,
)

from .state import INITIAL_WHALE_ALERTS, DashboardState

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(
        self,
        price_source: BaseMarketSource,
        global_source: BaseMarketSource,
        fear_greed_source: BaseMarketSource,
        news_source: BaseMarketSource,
        farcaster_source: BaseMarketSource,
        whale_source: WhaleAlertSource,
        indicator_drift: SimulatedIndicatorDrift,
        summary_client: TechnicalSummaryClient,
        altseason_config: Optional[AltseasonConfig] = None,
        clock: Optional[ClockProtocol] = None,
        state: Optional[DashboardState] = None,
        initial_whale_alerts: Iterable[WhaleAlert] = (),
    ):
        self.price_source = price_source
        self.global_source = global_source
        self.fear_greed_source = fear_greed_source
        self.news_source = news_source
        self.farcaster_source = farcaster_source
        self.whale_source = whale_source
        self.indicator_drift = indicator_drift
        self.summary_client = summary_client

        self.clock = clock or ClockFactory.get_clock()
        self.state = state or DashboardState()

        self._battle = BattleScoreCalculator()
        self.altseason_config = altseason_config or AltseasonConfig()
        self._altseason = AltseasonScoreCalculator(self.altseason_config)

        # Oldest first so the newest ends up at the front
        for alert in reversed(list(initial_whale_alerts)):
            self.state.add_whale_alert(alert)
        self.recompute()

    @classmethod
    def from_settings(
        cls,
        settings: DashboardSettings,
        clock: Optional[ClockProtocol] = None,
    ) -> "DashboardService":
        """Wire the live sources described by the settings."""
        clock = clock or ClockFactory.get_clock()
        rng = random.Random(settings.simulation_seed)
        timeout = settings.http_timeout_seconds

        whale_source = SimulatedWhaleAlertSource(rng=rng)
        initial = whale_source.initial_alerts(
            INITIAL_WHALE_ALERTS, DashboardState.price_usd, clock.now()
        )

        return cls(
            price_source=CoinGeckoPriceSource(timeout=timeout),
            global_source=CoinGeckoGlobalSource(timeout=timeout),
            fear_greed_source=FearGreedSource(timeout=timeout),
            news_source=CryptoPanicNewsSource(api_key=settings.cryptopanic_api_key, timeout=timeout),
            farcaster_source=FarcasterHubSource(timeout=timeout),
            whale_source=whale_source,
            indicator_drift=SimulatedIndicatorDrift(rng=rng),
            summary_client=TechnicalSummaryClient(
                api_key=settings.anthropic_api_key,
                model=settings.ta_summary_model,
            ),
            altseason_config=AltseasonConfig(target_date=settings.altseason_target_date),
            clock=clock,
            initial_whale_alerts=initial,
        )

    # =======================
    # 1. DERIVED SCORES
    # =======================
    def recompute(self) -> None:
        """Re-derive both scores from the current state."""
        state = self.state
        snapshot = state.market_snapshot()
        state.battle_breakdown = self._battle.breakdown(snapshot)
        state.battle = self._battle.compute(snapshot, previous_tug=state.battle.tug_position)

        dominance = state.global_data.to_dominance_snapshot() if state.global_data else None
        state.altseason = self._altseason.compute(dominance, state.price_usd, self.clock.now())

    # =======================
    # 2. FEED REFRESH
    # =======================
    async def refresh_price(self) -> bool:
        quote = await self.price_source.fetch()
        if quote is None:
            return False

        self.state.price_usd = quote.price_usd
        self.state.price_change_pct = quote.change_24h_pct
        self.state.volume_24h_usd = quote.volume_24h_usd
        self.state.market_cap_usd = quote.market_cap_usd
        self.state.price_updated_at = quote.timestamp
        self.recompute()
        return True

    async def refresh_global(self) -> bool:
        data = await self.global_source.fetch()
        if data is None:
            return False

        self.state.global_data = data
        self.state.btc_dominance_pct = data.btc_dominance_pct
        self.state.usdt_dominance_pct = data.usdt_dominance_pct
        self.recompute()
        return True

    async def refresh_fear_greed(self) -> bool:
        reading = await self.fear_greed_source.fetch()
        if reading is None:
            return False

        self.state.fear_greed_value = reading.value
        self.state.fear_greed_text = reading.classification
        self.recompute()
        return True

    async def refresh_news(self) -> bool:
        feed = await self.news_source.fetch()
        if feed is None:
            return False
        self.state.news = feed
        return True

    async def refresh_farcaster(self) -> bool:
        feed = await self.farcaster_source.fetch()
        if feed is None:
            return False
        self.state.farcaster = feed
        return True

    async def refresh_all(self) -> None:
        """Refresh every upstream feed concurrently."""
        await asyncio.gather(
            self.refresh_price(),
            self.refresh_global(),
            self.refresh_fear_greed(),
            self.refresh_news(),
            self.refresh_farcaster(),
        )

    # =======================
    # 3. SIMULATION
    # =======================
    def tick_simulation(self) -> None:
        """Drift RSI and the long/short ratio."""
        reading = self.indicator_drift.step(self.state.rsi, self.state.long_short_ratio)
        if (reading.rsi, reading.long_short_ratio) == (self.state.rsi, self.state.long_short_ratio):
            return

        self.state.rsi = reading.rsi
        self.state.long_short_ratio = reading.long_short_ratio
        self.recompute()

    def tick_whales(self) -> Optional[WhaleAlert]:
        alert = self.whale_source.poll(self.state.price_usd, self.clock.now())
        if alert is None:
            return None

        self.state.add_whale_alert(alert)
        self.recompute()
        return alert

    # =======================
    # 4. READ MODELS
    # =======================
    def get_overview(self) -> dict[str, Any]:
        state = self.state
        return {
            "price": state.price_dict(),
            "market": state.market_dict(),
            "battle": state.battle.to_dict(),
            "battle_breakdown": state.battle_breakdown.to_dict(),
            "altseason": state.altseason.to_dict(),
            "whale_alerts": [alert.to_dict() for alert in state.whale_alerts],
            "timestamp": self.clock.now().isoformat(),
        }

    def get_news(self) -> dict[str, Any]:
        if self.state.news is None:
            return {"items": [], "source": None}
        return self.state.news.to_dict()

    def get_farcaster(self) -> dict[str, Any]:
        if self.state.farcaster is None:
            return {"casts": [], "source": None}
        return self.state.farcaster.to_dict()

    def get_source_health(self) -> dict[str, Any]:
        sources = (
            self.price_source,
            self.global_source,
            self.fear_greed_source,
            self.news_source,
            self.farcaster_source,
        )
        return {
            source.metadata.name: source.get_health().to_dict()
            for source in sources
        }

    # =======================
    # 5. TA SUMMARY
    # =======================
    async def generate_ta_summary(self, timeframe: str) -> TechnicalSummary:
        """
        Ask the language model for a TA summary of the current state.

        Raises:
            ConfigurationError: No API key configured
            MarketSourceError: Upstream call failed
        """
        state = self.state
        data = SummaryMarketData(
            price=state.price_usd,
            price_change_pct=state.price_change_pct,
            rsi=state.rsi,
            fear_greed_value=state.fear_greed_value,
            fear_greed_text=state.fear_greed_text,
            btc_dominance_pct=state.btc_dominance_pct,
            usdt_dominance_pct=state.usdt_dominance_pct,
        )
        return await self.summary_client.summarize(timeframe, data)

    async def close(self) -> None:
        await asyncio.gather(
            self.price_source.close(),
            self.global_source.close(),
            self.fear_greed_source.close(),
            self.news_source.close(),
            self.farcaster_source.close(),
            self.summary_client.close(),
        )
        logger.info("Dashboard sources closed")

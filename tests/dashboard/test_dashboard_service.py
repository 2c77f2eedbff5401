"""
Tests for DashboardService and MarketPoller.

============================================================
PURPOSE
============================================================
Verify that feed refreshes land in the dashboard state and
that both scores are re-derived after every update.

TEST PRINCIPLES:
- Feed sources are mocked; no network
- A failed fetch leaves the previous value in place
- The battle tug feeds back into the next computation

============================================================
"""

import asyncio
import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from battle_scoring import AltseasonConfig, BattleResult, WhaleAlert, WhaleAlertType
from core.clock import MockClock
from core.settings import DashboardSettings
from dashboard.poller import MarketPoller, PollerIntervals
from dashboard.services import DashboardService
from dashboard.state import MAX_WHALE_ALERTS, DashboardState
from market_feeds import (
    CastFeed,
    ConfigurationError,
    FarcasterCast,
    FearGreedReading,
    FeedOrigin,
    FixedWhaleAlertSource,
    GlobalMarketData,
    NewsFeed,
    NewsItem,
    NewsSentiment,
    PriceQuote,
    SimulatedIndicatorDrift,
    TechnicalSummary,
)


NOW = datetime(2025, 11, 25, tzinfo=timezone.utc)


# ============================================================
# FIXTURES
# ============================================================

def mock_source(name: str, value=None):
    source = MagicMock()
    source.fetch = AsyncMock(return_value=value)
    source.close = AsyncMock()
    source.metadata.name = name
    source.get_health.return_value.to_dict.return_value = {"status": "healthy"}
    return source


def buy(amount: float) -> WhaleAlert:
    return WhaleAlert(type=WhaleAlertType.BUY, amount_btc=amount)


def sell(amount: float) -> WhaleAlert:
    return WhaleAlert(type=WhaleAlertType.SELL, amount_btc=amount)


@pytest.fixture
def clock():
    return MockClock(NOW)


@pytest.fixture
def summary_client():
    client = MagicMock()
    client.summarize = AsyncMock(
        return_value=TechnicalSummary(summary="Neutral bias.", timeframe="daily", model="m")
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def make_service(clock, summary_client):
    def factory(whales=(), initial_whales=(), drift_probability=0.0, **sources):
        return DashboardService(
            price_source=sources.get("price", mock_source("coingecko_price")),
            global_source=sources.get("global_", mock_source("coingecko_global")),
            fear_greed_source=sources.get("fear_greed", mock_source("fear_greed")),
            news_source=sources.get("news", mock_source("cryptopanic")),
            farcaster_source=sources.get("farcaster", mock_source("farcaster")),
            whale_source=FixedWhaleAlertSource(whales),
            indicator_drift=SimulatedIndicatorDrift(
                rng=random.Random(11), probability=drift_probability
            ),
            summary_client=summary_client,
            altseason_config=AltseasonConfig(),
            clock=clock,
            initial_whale_alerts=initial_whales,
        )
    return factory


def global_data(btc=50.0, eth=10.0, usdt=3.0, usdc=1.5) -> GlobalMarketData:
    return GlobalMarketData(
        btc_dominance_pct=btc,
        eth_dominance_pct=eth,
        usdt_dominance_pct=usdt,
        usdc_dominance_pct=usdc,
        timestamp=NOW,
    )


# ============================================================
# STATE
# ============================================================

class TestState:
    def test_defaults(self):
        state = DashboardState()

        assert state.price_usd == 98432
        assert state.fear_greed_value == 72
        assert state.battle.tug_position == 55
        assert state.altseason.is_loading

    def test_whale_alerts_capped_most_recent_first(self):
        state = DashboardState()
        for amount in range(1, 21):
            state.add_whale_alert(buy(amount))

        assert len(state.whale_alerts) == MAX_WHALE_ALERTS
        assert state.whale_alerts[0].amount_btc == 20
        assert state.whale_alerts[-1].amount_btc == 6


# ============================================================
# REFRESH
# ============================================================

class TestRefresh:
    def test_initial_scores_are_derived(self, make_service):
        service = make_service(initial_whales=[buy(1000), sell(500)])

        assert service.state.whale_alerts[0] == buy(1000)
        assert service.state.battle.bull_power > 0
        # No dominance data yet
        assert service.state.altseason.is_loading

    @pytest.mark.asyncio
    async def test_refresh_price(self, make_service):
        quote = PriceQuote(price_usd=120000, change_24h_pct=5.0, timestamp=NOW, volume_24h_usd=1e9)
        service = make_service(price=mock_source("coingecko_price", quote))

        assert await service.refresh_price()

        assert service.state.price_usd == 120000
        assert service.state.price_change_pct == 5.0
        assert service.state.battle_breakdown.contributions["price_change"] == (10.0, 0.0)

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_value(self, make_service):
        service = make_service()

        assert not await service.refresh_price()
        assert service.state.price_usd == 98432

    @pytest.mark.asyncio
    async def test_global_refresh_enables_altseason(self, make_service):
        quote = PriceQuote(price_usd=120000, change_24h_pct=1.0, timestamp=NOW)
        service = make_service(
            price=mock_source("coingecko_price", quote),
            global_=mock_source("coingecko_global", global_data()),
        )

        await service.refresh_all()

        altseason = service.state.altseason
        assert not altseason.is_loading
        # 20 days before the default target date: everything green
        assert altseason.score == 100
        assert len(altseason.signals) == 5
        assert service.state.btc_dominance_pct == 50.0

    @pytest.mark.asyncio
    async def test_fear_greed_refresh(self, make_service):
        reading = FearGreedReading(value=20, classification="Extreme Fear", timestamp=NOW)
        service = make_service(fear_greed=mock_source("fear_greed", reading))

        await service.refresh_fear_greed()

        assert service.state.fear_greed_text == "Extreme Fear"
        assert service.state.battle_breakdown.contributions["fear_greed"] == (0.0, 3.0)

    @pytest.mark.asyncio
    async def test_news_and_farcaster(self, make_service):
        news = NewsFeed(
            items=(NewsItem("1", "Headline", "CoinDesk", NewsSentiment.BULLISH, "#", NOW),),
            origin=FeedOrigin.FALLBACK,
        )
        casts = CastFeed(casts=(FarcasterCast("0x1", "dwr.eth", "Some cast text here", NOW),))
        service = make_service(
            news=mock_source("cryptopanic", news),
            farcaster=mock_source("farcaster", casts),
        )

        assert service.get_news() == {"items": [], "source": None}

        await service.refresh_news()
        await service.refresh_farcaster()

        assert service.get_news()["source"] == "fallback"
        assert service.get_farcaster()["casts"][0]["author"] == "dwr.eth"


# ============================================================
# SIMULATION
# ============================================================

class TestSimulation:
    def test_whale_tick_adds_alert_and_recomputes(self, make_service):
        service = make_service(whales=[sell(5000)])
        before = service.state.battle.bear_power

        alert = service.tick_whales()

        assert alert == sell(5000)
        assert service.state.whale_alerts[0] == alert
        assert service.state.battle.bear_power == pytest.approx(before + 10)

    def test_whale_tick_without_alert(self, make_service):
        service = make_service(whales=[])
        assert service.tick_whales() is None

    def test_tug_feeds_back_when_power_is_zero(self, make_service):
        service = make_service()
        state = service.state
        state.price_change_pct = 0.0
        state.fear_greed_value = 50
        state.rsi = 50.0
        state.long_short_ratio = 1.0
        state.battle = BattleResult(bull_power=0, bear_power=0, tug_position=37.0)

        service.recompute()

        assert state.battle.tug_position == 37.0

    def test_indicator_drift(self, make_service):
        service = make_service(drift_probability=1.0)
        before = (service.state.rsi, service.state.long_short_ratio)

        service.tick_simulation()

        assert (service.state.rsi, service.state.long_short_ratio) != before
        assert 20 <= service.state.rsi <= 80
        assert service.state.price_usd == 98432


# ============================================================
# READ MODELS
# ============================================================

class TestReadModels:
    def test_overview(self, make_service):
        service = make_service(initial_whales=[buy(800)])

        overview = service.get_overview()

        assert set(overview) == {
            "price", "market", "battle", "battle_breakdown",
            "altseason", "whale_alerts", "timestamp",
        }
        assert overview["market"]["fear_greed"] == {"value": 72, "text": "Greed"}
        assert overview["whale_alerts"][0]["type"] == "buy"
        assert overview["timestamp"] == NOW.isoformat()

    def test_source_health(self, make_service):
        health = make_service().get_source_health()

        assert set(health) == {
            "coingecko_price", "coingecko_global", "fear_greed", "cryptopanic", "farcaster",
        }

    @pytest.mark.asyncio
    async def test_ta_summary_uses_current_state(self, make_service, summary_client):
        service = make_service()

        summary = await service.generate_ta_summary("weekly")

        assert summary.summary == "Neutral bias."
        timeframe, data = summary_client.summarize.await_args.args
        assert timeframe == "weekly"
        assert data.price == 98432
        assert data.fear_greed_text == "Greed"

    @pytest.mark.asyncio
    async def test_ta_summary_propagates_configuration_error(self, make_service, summary_client):
        summary_client.summarize.side_effect = ConfigurationError("API key not configured")
        service = make_service()

        with pytest.raises(ConfigurationError):
            await service.generate_ta_summary("daily")

    @pytest.mark.asyncio
    async def test_close_closes_everything(self, make_service, summary_client):
        service = make_service()

        await service.close()

        service.price_source.close.assert_awaited_once()
        summary_client.close.assert_awaited_once()


class TestFromSettings:
    def test_wires_settings(self, clock):
        settings = DashboardSettings(
            simulation_seed=5,
            altseason_target_date=datetime(2026, 3, 1, tzinfo=timezone.utc),
            anthropic_api_key="key",
        )

        service = DashboardService.from_settings(settings, clock=clock)

        assert service.altseason_config.target_date == datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert len(service.state.whale_alerts) == 4
        assert all(alert.simulated for alert in service.state.whale_alerts)
        assert service.summary_client.is_configured


# ============================================================
# POLLER
# ============================================================

class TestPoller:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, make_service):
        service = make_service(whales=[buy(500)] * 100)
        poller = MarketPoller(
            service,
            PollerIntervals(
                simulation=0.01, whales=0.01, market=0.01,
                farcaster=0.01, news=0.01, fear_greed=0.01,
            ),
        )

        await poller.start()
        await poller.start()  # idempotent
        await asyncio.sleep(0.1)
        await poller.stop()

        assert not poller.is_running
        assert service.state.whale_alerts
        assert service.price_source.fetch.await_count >= 2

    @pytest.mark.asyncio
    async def test_failing_job_does_not_stop_loop(self, make_service):
        service = make_service()
        calls = []

        def tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        service.tick_simulation = tick
        poller = MarketPoller(service, PollerIntervals(simulation=0.01))

        await poller.start(initial_refresh=False)
        await asyncio.sleep(0.08)
        await poller.stop()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_start_does_not_wait_for_initial_refresh(self, make_service):
        service = make_service()
        refresh_started = asyncio.Event()
        refresh_cancelled = asyncio.Event()

        async def slow_refresh():
            refresh_started.set()
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                refresh_cancelled.set()
                raise

        service.refresh_all = slow_refresh
        poller = MarketPoller(service)

        await asyncio.wait_for(poller.start(), timeout=0.5)
        assert poller.is_running

        await asyncio.wait_for(refresh_started.wait(), timeout=0.5)
        await asyncio.wait_for(poller.stop(), timeout=0.5)

        assert refresh_cancelled.is_set()
        assert not poller.is_running

    @pytest.mark.asyncio
    async def test_failed_initial_refresh_keeps_loops_running(self, make_service):
        service = make_service()
        service.refresh_all = AsyncMock(side_effect=RuntimeError("down"))
        ticks = []
        service.tick_simulation = lambda: ticks.append(1)
        poller = MarketPoller(service, PollerIntervals(simulation=0.01))

        await poller.start()
        await asyncio.sleep(0.08)
        await poller.stop()

        service.refresh_all.assert_awaited_once()
        assert ticks

    @pytest.mark.asyncio
    async def test_stop_without_start(self, make_service):
        poller = MarketPoller(make_service())
        await poller.stop()
        assert not poller.is_running

"""
Tests for the market feed providers.

============================================================
PURPOSE
============================================================
Verify each provider's payload normalization and its
fallback content. HTTP is patched at _get_json.

============================================================
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from core.clock import ClockFactory
from market_feeds import (
    CoinGeckoGlobalSource,
    CoinGeckoPriceSource,
    CryptoPanicNewsSource,
    FarcasterHubSource,
    FearGreedSource,
    FeedOrigin,
    FetchError,
    NewsSentiment,
)
from market_feeds.providers.farcaster import FARCASTER_EPOCH, farcaster_time


NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clock():
    with ClockFactory.use_mock(NOW) as mock:
        yield mock


# ============================================================
# COINGECKO
# ============================================================

class TestCoinGeckoPrice:
    def test_normalize(self):
        quote = CoinGeckoPriceSource()._normalize({
            "bitcoin": {
                "usd": 101234.5,
                "usd_24h_change": -1.75,
                "usd_24h_vol": 32_000_000_000,
                "usd_market_cap": 2_000_000_000_000,
            }
        })

        assert quote.price_usd == 101234.5
        assert quote.change_24h_pct == -1.75
        assert quote.volume_24h_usd == 32_000_000_000
        assert quote.timestamp == NOW

    def test_missing_change_defaults_to_zero(self):
        quote = CoinGeckoPriceSource()._normalize({"bitcoin": {"usd": 99000}})

        assert quote.change_24h_pct == 0.0
        assert quote.market_cap_usd is None

    @pytest.mark.parametrize("payload", [None, {}, {"bitcoin": {}}, {"bitcoin": {"usd": "n/a"}}])
    def test_unusable_payload(self, payload):
        assert CoinGeckoPriceSource()._normalize(payload) is None

    @pytest.mark.asyncio
    async def test_fetch_requests_bitcoin(self):
        source = CoinGeckoPriceSource()
        with patch.object(source, "_get_json", AsyncMock(return_value={"bitcoin": {"usd": 1}})) as get:
            await source.fetch()

        url = get.await_args.args[0]
        params = get.await_args.kwargs["params"]
        assert url.endswith("/simple/price")
        assert params["ids"] == "bitcoin"
        assert params["include_24hr_change"] == "true"


class TestCoinGeckoGlobal:
    def test_normalize_rounds_to_one_decimal(self):
        data = CoinGeckoGlobalSource()._normalize({
            "data": {
                "market_cap_percentage": {
                    "btc": 58.234,
                    "eth": 12.06,
                    "usdt": 4.44,
                    "usdc": 1.72,
                }
            }
        })

        assert data.btc_dominance_pct == 58.2
        assert data.eth_dominance_pct == 12.1
        assert data.stablecoin_dominance_pct == 6.1
        assert data.others_dominance_pct == pytest.approx(29.7)

    def test_dominance_snapshot(self):
        data = CoinGeckoGlobalSource()._normalize({
            "data": {"market_cap_percentage": {"btc": 60.0, "eth": 10.0, "usdt": 4.0}}
        })

        snapshot = data.to_dominance_snapshot()

        assert snapshot.btc_dominance_percent == 60.0
        assert snapshot.others_dominance_percent == pytest.approx(30.0)
        assert snapshot.stablecoin_dominance_percent == 4.0

    def test_missing_btc(self):
        assert CoinGeckoGlobalSource()._normalize({"data": {"market_cap_percentage": {}}}) is None


# ============================================================
# FEAR & GREED
# ============================================================

class TestFearGreed:
    def test_normalize(self):
        reading = FearGreedSource()._normalize({
            "data": [{"value": "27", "value_classification": "Fear", "timestamp": "1748779200"}]
        })

        assert reading.value == 27
        assert reading.classification == "Fear"
        assert reading.timestamp == datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    def test_value_is_clamped(self):
        reading = FearGreedSource()._normalize({"data": [{"value": "140"}]})
        assert reading.value == 100

    @pytest.mark.parametrize("payload", [{}, {"data": []}, {"data": [{"value": "abc"}]}])
    def test_unusable_payload(self, payload):
        assert FearGreedSource()._normalize(payload) is None


# ============================================================
# CRYPTOPANIC
# ============================================================

class TestCryptoPanic:
    def test_normalize_sentiment_from_votes(self):
        feed = CryptoPanicNewsSource()._normalize({
            "results": [
                {
                    "id": 1,
                    "title": "ETF inflows hit record",
                    "source": {"title": "CoinDesk"},
                    "votes": {"positive": 12, "negative": 3},
                    "url": "https://example.com/1",
                    "published_at": "2025-06-01T10:00:00Z",
                },
                {
                    "id": 2,
                    "title": "Exchange hack drains hot wallet",
                    "votes": {"positive": 1, "negative": 9},
                },
                {"id": 3, "title": "Hashrate steady", "votes": {}},
            ]
        })

        assert feed.origin == FeedOrigin.LIVE
        assert [item.sentiment for item in feed.items] == [
            NewsSentiment.BULLISH,
            NewsSentiment.BEARISH,
            NewsSentiment.NEUTRAL,
        ]
        assert feed.items[0].source == "CoinDesk"
        assert feed.items[0].timestamp == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)
        assert feed.items[1].source == "Unknown"

    def test_keeps_at_most_ten(self):
        results = [{"id": i, "title": f"Headline {i}"} for i in range(25)]
        feed = CryptoPanicNewsSource()._normalize({"results": results})
        assert len(feed.items) == 10

    def test_empty_results(self):
        assert CryptoPanicNewsSource()._normalize({"results": []}) is None

    @pytest.mark.asyncio
    async def test_auth_token_only_with_key(self):
        source = CryptoPanicNewsSource(api_key="secret")
        with patch.object(source, "_get_json", AsyncMock(return_value={})) as get:
            await source._fetch_raw()

        params = get.await_args.kwargs["params"]
        assert params["auth_token"] == "secret"
        assert params["currencies"] == "BTC"

    @pytest.mark.asyncio
    async def test_failure_serves_fallback_headlines(self):
        source = CryptoPanicNewsSource()
        source.RETRY_DELAY = 0
        with patch.object(source, "_get_json", AsyncMock(side_effect=FetchError("down"))):
            feed = await source.fetch()

        assert feed.origin == FeedOrigin.FALLBACK
        assert len(feed.items) == 5
        assert feed.to_dict()["source"] == "fallback"


# ============================================================
# FARCASTER
# ============================================================

def cast_message(text: str, seconds: int, parent: bool = False, hash_: str = "0xabc"):
    body = {"text": text}
    if parent:
        body["parentCastId"] = {"fid": 1, "hash": "0x1"}
    return {"hash": hash_, "data": {"timestamp": seconds, "castAddBody": body}}


class TestFarcaster:
    def test_farcaster_time_uses_farcaster_epoch(self):
        assert farcaster_time(0) == FARCASTER_EPOCH
        assert farcaster_time(86400) == datetime(2021, 1, 2, tzinfo=timezone.utc)
        assert farcaster_time("bad") is None

    def test_normalize_filters_and_sorts(self):
        source = FarcasterHubSource()
        feed = source._normalize([
            {
                "fid": 3,
                "username": "dwr.eth",
                "pfp": "https://img/dwr.png",
                "messages": [
                    cast_message("A long enough cast about onchain social", 100, hash_="0x1"),
                    cast_message("too short", 200, hash_="0x2"),
                    cast_message("A third cast that is beyond the per account limit", 300, hash_="0x3"),
                ],
            },
            {
                "fid": 99,
                "username": "jessepollak",
                "pfp": "",
                "messages": [
                    cast_message("Replying to someone with enough text here", 500, parent=True),
                    cast_message("Base is for everyone, keep building onchain", 400, hash_="0x4"),
                ],
            },
        ])

        assert [cast.id for cast in feed.casts] == ["0x4", "0x1"]
        assert feed.casts[0].author == "jessepollak"
        assert feed.casts[1].author_pfp == "https://img/dwr.png"
        assert feed.casts[0].likes is None

    def test_text_is_truncated(self):
        feed = FarcasterHubSource()._normalize([
            {"fid": 1, "username": "x", "messages": [cast_message("y" * 400, 10)]}
        ])
        assert len(feed.casts[0].text) == 280

    def test_nothing_usable(self):
        assert FarcasterHubSource()._normalize([
            {"fid": 1, "username": "x", "messages": [cast_message("short", 10)]}
        ]) is None

    @pytest.mark.asyncio
    async def test_fetch_account_reads_username_and_pfp(self):
        source = FarcasterHubSource(featured_fids=((3, "fallback"),))
        user_data = {
            "messages": [
                {"data": {"userDataBody": {"type": "USER_DATA_TYPE_USERNAME", "value": "dwr"}}},
                {"data": {"userDataBody": {"type": "USER_DATA_TYPE_PFP", "value": "https://p"}}},
            ]
        }
        casts = {"messages": [cast_message("A long enough cast about onchain social", 100)]}

        with patch.object(source, "_get_json", AsyncMock(side_effect=[user_data, casts])):
            accounts = await source._fetch_raw()

        assert accounts[0]["username"] == "dwr"
        assert accounts[0]["pfp"] == "https://p"

    @pytest.mark.asyncio
    async def test_all_accounts_failing_serves_fallback(self):
        source = FarcasterHubSource(featured_fids=((3, "dwr.eth"), (99, "jessepollak")))
        source.RETRY_DELAY = 0

        with patch.object(source, "_get_json", AsyncMock(side_effect=FetchError("down"))):
            feed = await source.fetch()

        assert feed.origin == FeedOrigin.FALLBACK
        assert feed.casts[0].author == "dwr.eth"
        assert feed.casts[0].timestamp == NOW - timedelta(minutes=30)

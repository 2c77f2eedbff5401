"""
CryptoPanic News Source - Free tier crypto news aggregator.

CryptoPanic provides:
- Aggregated crypto news from multiple outlets
- Community voting (positive/negative)

The headline sentiment shown on the dashboard is derived
from the votes only: more positive than negative votes is
bullish, the reverse is bearish, a tie is neutral.
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from core.clock import from_iso8601, now_utc

from ..base import BaseMarketSource
from ..models import (
    FeedOrigin,
    NewsFeed,
    NewsItem,
    NewsSentiment,
    SourceMetadata,
)


logger = logging.getLogger(__name__)


# Shown when the API is unreachable and nothing is cached
FALLBACK_HEADLINES: tuple[tuple[str, str, NewsSentiment], ...] = (
    ("Bitcoin ETF inflows surge past $500M", "CoinDesk", NewsSentiment.BULLISH),
    ("Whale moves 5,000 BTC to exchange", "Whale Alert", NewsSentiment.BEARISH),
    ("MicroStrategy adds to Bitcoin holdings", "Bloomberg", NewsSentiment.BULLISH),
    ("Fed signals rate decision upcoming", "Reuters", NewsSentiment.NEUTRAL),
    ("Bitcoin breaks key resistance level", "TradingView", NewsSentiment.BULLISH),
)


class CryptoPanicNewsSource(BaseMarketSource[NewsFeed]):
    """
    CryptoPanic BTC news feed.

    Free tier limitations:
    - Without API key: public posts only, low hourly quota
    - With free API key: higher quota
    """

    BASE_URL = "https://cryptopanic.com/api/free/v1"
    DEFAULT_CACHE_TTL = 120
    MAX_ITEMS = 10

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[int] = None,
        currencies: str = "BTC",
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key, cache_ttl, timeout, **kwargs)
        self.currencies = currencies

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name="cryptopanic",
            display_name="CryptoPanic",
            base_url=self.BASE_URL,
            rate_limit_per_minute=10,
            requires_api_key=False,
            cache_ttl_seconds=self.cache_ttl,
            documentation_url="https://cryptopanic.com/developers/api/",
            tags=["news", "voting", "aggregator"],
        )

    async def _fetch_raw(self) -> Any:
        params: dict[str, str] = {
            "currencies": self.currencies,
            "kind": "news",
        }
        if self.api_key:
            params["auth_token"] = self.api_key

        return await self._get_json(f"{self.BASE_URL}/posts/", params=params)

    def _normalize(self, raw_data: Any) -> Optional[NewsFeed]:
        if not isinstance(raw_data, dict):
            return None
        results = raw_data.get("results")
        if not results:
            return None

        items = []
        for entry in results[: self.MAX_ITEMS]:
            item = self._normalize_item(entry)
            if item is not None:
                items.append(item)

        if not items:
            return None
        return NewsFeed(items=tuple(items), origin=FeedOrigin.LIVE)

    def _normalize_item(self, entry: dict[str, Any]) -> Optional[NewsItem]:
        title = entry.get("title")
        if not title:
            return None

        votes = entry.get("votes") or {}
        sentiment = NewsSentiment.from_votes(
            int(votes.get("positive") or 0),
            int(votes.get("negative") or 0),
        )

        timestamp = now_utc()
        published = entry.get("published_at")
        if published:
            try:
                timestamp = from_iso8601(published)
            except (TypeError, ValueError):
                logger.debug(f"[{self.metadata.name}] Unparseable published_at: {published}")

        return NewsItem(
            id=str(entry.get("id") or entry.get("slug") or title),
            title=title,
            source=(entry.get("source") or {}).get("title") or "Unknown",
            sentiment=sentiment,
            url=entry.get("url") or "",
            timestamp=timestamp,
        )

    def fallback(self) -> Optional[NewsFeed]:
        now = now_utc()
        items = tuple(
            NewsItem(
                id=str(index + 1),
                title=title,
                source=source,
                sentiment=sentiment,
                url="#",
                timestamp=now - timedelta(minutes=15 * index),
            )
            for index, (title, source, sentiment) in enumerate(FALLBACK_HEADLINES)
        )
        return NewsFeed(items=items, origin=FeedOrigin.FALLBACK)

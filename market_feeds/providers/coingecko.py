"""
CoinGecko Sources - BTC price and global market dominance.

Free public API, no key required. The free tier allows
roughly 10-30 calls per minute; the dashboard polls every
30 seconds.
"""

import logging
from typing import Any, Optional

from core.clock import now_utc

from ..base import BaseMarketSource
from ..models import GlobalMarketData, PriceQuote, SourceMetadata


logger = logging.getLogger(__name__)


COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class CoinGeckoPriceSource(BaseMarketSource[PriceQuote]):
    """BTC spot price with 24h change, volume and market cap."""

    BASE_URL = COINGECKO_BASE_URL
    DEFAULT_CACHE_TTL = 10
    COIN_ID = "bitcoin"

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name="coingecko_price",
            display_name="CoinGecko Price",
            base_url=self.BASE_URL,
            rate_limit_per_minute=30,
            cache_ttl_seconds=self.cache_ttl,
            documentation_url="https://docs.coingecko.com/reference/simple-price",
            tags=["price", "market"],
        )

    async def _fetch_raw(self) -> Any:
        return await self._get_json(
            f"{self.BASE_URL}/simple/price",
            params={
                "ids": self.COIN_ID,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_24hr_vol": "true",
                "include_market_cap": "true",
            },
        )

    def _normalize(self, raw_data: Any) -> Optional[PriceQuote]:
        coin = (raw_data or {}).get(self.COIN_ID) if isinstance(raw_data, dict) else None
        if not coin:
            return None

        price = _optional_float(coin.get("usd"))
        if price is None:
            return None

        return PriceQuote(
            price_usd=price,
            change_24h_pct=_optional_float(coin.get("usd_24h_change")) or 0.0,
            volume_24h_usd=_optional_float(coin.get("usd_24h_vol")),
            market_cap_usd=_optional_float(coin.get("usd_market_cap")),
            timestamp=now_utc(),
        )


class CoinGeckoGlobalSource(BaseMarketSource[GlobalMarketData]):
    """Market cap dominance of BTC, ETH and the major stablecoins."""

    BASE_URL = COINGECKO_BASE_URL
    DEFAULT_CACHE_TTL = 30

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name="coingecko_global",
            display_name="CoinGecko Global",
            base_url=self.BASE_URL,
            rate_limit_per_minute=30,
            cache_ttl_seconds=self.cache_ttl,
            documentation_url="https://docs.coingecko.com/reference/crypto-global",
            tags=["dominance", "market"],
        )

    async def _fetch_raw(self) -> Any:
        return await self._get_json(f"{self.BASE_URL}/global")

    def _normalize(self, raw_data: Any) -> Optional[GlobalMarketData]:
        if not isinstance(raw_data, dict):
            return None
        percentages = (raw_data.get("data") or {}).get("market_cap_percentage") or {}

        btc = _optional_float(percentages.get("btc"))
        if btc is None:
            return None

        def pct(key: str) -> float:
            return round(_optional_float(percentages.get(key)) or 0.0, 1)

        return GlobalMarketData(
            btc_dominance_pct=round(btc, 1),
            eth_dominance_pct=pct("eth"),
            usdt_dominance_pct=pct("usdt"),
            usdc_dominance_pct=pct("usdc"),
            timestamp=now_utc(),
        )

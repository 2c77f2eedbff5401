"""
Market Feeds - Pluggable upstream data sources for the dashboard.

This package provides:
- CoinGecko: BTC price and global dominance
- alternative.me: Fear & Greed index
- CryptoPanic: BTC headlines with vote-derived sentiment
- Farcaster hub: casts from featured accounts
- Simulated whale alerts and RSI / long-short drift
- A hosted language model TA summary client

Usage:
    from market_feeds import CoinGeckoPriceSource

    source = CoinGeckoPriceSource()
    quote = await source.fetch()      # never raises, may be None
    await source.close()
"""

from .base import BaseMarketSource
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    FetchError,
    MarketSourceError,
    ParseError,
    RateLimitError,
)
from .models import (
    CastFeed,
    FarcasterCast,
    FearGreedReading,
    FeedOrigin,
    GlobalMarketData,
    NewsFeed,
    NewsItem,
    NewsSentiment,
    PriceQuote,
    SourceHealth,
    SourceMetadata,
    SourceStatus,
)
from .providers import (
    CoinGeckoGlobalSource,
    CoinGeckoPriceSource,
    CryptoPanicNewsSource,
    FarcasterHubSource,
    FearGreedSource,
)
from .simulated import (
    FixedWhaleAlertSource,
    IndicatorReading,
    SimulatedIndicatorDrift,
    SimulatedWhaleAlertSource,
    WhaleAlertSource,
)
from .ta_summary import (
    SummaryMarketData,
    TechnicalSummary,
    TechnicalSummaryClient,
    build_prompt,
)


__all__ = [
    # Base
    "BaseMarketSource",

    # Providers
    "CoinGeckoPriceSource",
    "CoinGeckoGlobalSource",
    "FearGreedSource",
    "CryptoPanicNewsSource",
    "FarcasterHubSource",

    # Simulated inputs
    "WhaleAlertSource",
    "SimulatedWhaleAlertSource",
    "FixedWhaleAlertSource",
    "SimulatedIndicatorDrift",
    "IndicatorReading",

    # TA summary
    "TechnicalSummaryClient",
    "TechnicalSummary",
    "SummaryMarketData",
    "build_prompt",

    # Models
    "PriceQuote",
    "GlobalMarketData",
    "FearGreedReading",
    "NewsItem",
    "NewsFeed",
    "NewsSentiment",
    "FarcasterCast",
    "CastFeed",
    "FeedOrigin",
    "SourceHealth",
    "SourceMetadata",
    "SourceStatus",

    # Exceptions
    "MarketSourceError",
    "RateLimitError",
    "FetchError",
    "ParseError",
    "AuthenticationError",
    "ConfigurationError",
]

"""
Market Feed Data Models - Normalized feed structures.

Every provider converts its upstream payload into one of
these before anything else in the system sees it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from battle_scoring import DominanceSnapshot


class SourceStatus(Enum):
    """Health status of a market feed source."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class FeedOrigin(Enum):
    """Where the items in a feed came from."""
    LIVE = "live"
    FALLBACK = "fallback"


class NewsSentiment(Enum):
    """Community vote derived sentiment of a headline."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    @classmethod
    def from_votes(cls, positive: int, negative: int) -> "NewsSentiment":
        if positive > negative:
            return cls.BULLISH
        if negative > positive:
            return cls.BEARISH
        return cls.NEUTRAL


# ============================================================
# PRICE & MARKET
# ============================================================


@dataclass(frozen=True)
class PriceQuote:
    """BTC spot price with 24h statistics."""
    price_usd: float
    change_24h_pct: float
    timestamp: datetime
    volume_24h_usd: Optional[float] = None
    market_cap_usd: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "price_usd": self.price_usd,
            "change_24h_pct": self.change_24h_pct,
            "volume_24h_usd": self.volume_24h_usd,
            "market_cap_usd": self.market_cap_usd,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class GlobalMarketData:
    """Market cap dominance percentages (0-100, 1 dp)."""
    btc_dominance_pct: float
    eth_dominance_pct: float
    usdt_dominance_pct: float
    usdc_dominance_pct: float
    timestamp: datetime

    @property
    def stablecoin_dominance_pct(self) -> float:
        return round(self.usdt_dominance_pct + self.usdc_dominance_pct, 1)

    @property
    def others_dominance_pct(self) -> float:
        return round(100.0 - self.btc_dominance_pct - self.eth_dominance_pct, 1)

    def to_dominance_snapshot(self) -> DominanceSnapshot:
        return DominanceSnapshot.from_market_cap_percentages(
            btc_percent=self.btc_dominance_pct,
            eth_percent=self.eth_dominance_pct,
            stablecoin_percent=self.stablecoin_dominance_pct,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "btc_dominance_pct": self.btc_dominance_pct,
            "eth_dominance_pct": self.eth_dominance_pct,
            "usdt_dominance_pct": self.usdt_dominance_pct,
            "usdc_dominance_pct": self.usdc_dominance_pct,
            "stablecoin_dominance_pct": self.stablecoin_dominance_pct,
            "others_dominance_pct": self.others_dominance_pct,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class FearGreedReading:
    """Fear & Greed index value (0-100) with its label."""
    value: int
    classification: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "classification": self.classification,
            "timestamp": self.timestamp.isoformat(),
        }


# ============================================================
# NEWS & SOCIAL
# ============================================================


@dataclass(frozen=True)
class NewsItem:
    """A single headline."""
    id: str
    title: str
    source: str
    sentiment: NewsSentiment
    url: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "source": self.source,
            "sentiment": self.sentiment.value,
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class NewsFeed:
    items: tuple[NewsItem, ...]
    origin: FeedOrigin = FeedOrigin.LIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "source": self.origin.value,
        }


@dataclass(frozen=True)
class FarcasterCast:
    """
    A single Farcaster cast.

    likes is None for live casts: the hub does not expose
    reaction counts.
    """
    id: str
    author: str
    text: str
    timestamp: datetime
    channel: str = "crypto"
    author_pfp: str = ""
    likes: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "author_pfp": self.author_pfp,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "likes": self.likes,
            "channel": self.channel,
        }


@dataclass(frozen=True)
class CastFeed:
    casts: tuple[FarcasterCast, ...]
    origin: FeedOrigin = FeedOrigin.LIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "casts": [cast.to_dict() for cast in self.casts],
            "source": self.origin.value,
        }


# ============================================================
# SOURCE BOOKKEEPING
# ============================================================


@dataclass
class SourceHealth:
    """Health status of a market feed source."""
    status: SourceStatus
    last_check: datetime
    latency_ms: Optional[float] = None
    error_count: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    consecutive_failures: int = 0
    requests_today: int = 0

    def is_healthy(self) -> bool:
        return self.status == SourceStatus.HEALTHY

    def is_usable(self) -> bool:
        return self.status in (SourceStatus.HEALTHY, SourceStatus.DEGRADED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat(),
            "latency_ms": self.latency_ms,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "consecutive_failures": self.consecutive_failures,
            "requests_today": self.requests_today,
        }


@dataclass
class SourceMetadata:
    """Metadata about a market feed source."""
    name: str
    display_name: str
    base_url: str
    rate_limit_per_minute: Optional[int] = None
    requires_api_key: bool = False
    cache_ttl_seconds: int = 60
    documentation_url: str = ""
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "base_url": self.base_url,
            "rate_limit_per_minute": self.rate_limit_per_minute,
            "requires_api_key": self.requires_api_key,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "tags": self.tags,
        }

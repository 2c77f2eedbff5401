"""
Base Market Source - Abstract interface for all feed adapters.

All sources follow non-blocking, cached, graceful degradation
patterns: the dashboard keeps showing the last good value
when an upstream API misbehaves.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Generic, Optional, TypeVar

import aiohttp

from core.clock import now_utc

from .exceptions import (
    FetchError,
    MarketSourceError,
    ParseError,
    RateLimitError,
)
from .models import SourceHealth, SourceMetadata, SourceStatus


logger = logging.getLogger(__name__)


T = TypeVar("T")


class BaseMarketSource(ABC, Generic[T]):
    """
    Abstract base class for market feed sources.

    DESIGN PRINCIPLES:
    1. NEVER block - return cached/fallback on failure
    2. ALWAYS cache - respect TTL and stale fallback
    3. NEVER raise from fetch() - log and return gracefully
    4. RATE LIMIT aware - track and respect limits

    All subclasses must implement:
    - _fetch_raw() - Get raw payload from the upstream API
    - _normalize() - Convert payload to the feed model
    - metadata - Source metadata property
    """

    DEFAULT_CACHE_TTL = 60
    DEFAULT_STALE_TTL = 3600
    DEFAULT_TIMEOUT = 10
    MAX_RETRIES = 2
    RETRY_DELAY = 1.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.api_key = api_key
        self.cache_ttl = cache_ttl or self.DEFAULT_CACHE_TTL
        self.timeout = timeout or self.DEFAULT_TIMEOUT

        # Sessions passed in are owned by the caller
        self._session = session
        self._owns_session = session is None

        self._cached: Optional[tuple[T, datetime]] = None

        self._health = SourceHealth(
            status=SourceStatus.UNKNOWN,
            last_check=now_utc(),
        )

        self._requests_this_minute: list[datetime] = []
        self._requests_today: int = 0
        self._day_start: datetime = now_utc().replace(
            hour=0, minute=0, second=0, microsecond=0
        )

        self._stats = {
            "total_requests": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "errors": 0,
            "rate_limits_hit": 0,
            "successful_fetches": 0,
            "fallbacks_served": 0,
        }

    @property
    @abstractmethod
    def metadata(self) -> SourceMetadata:
        """Return source metadata."""
        pass

    @abstractmethod
    async def _fetch_raw(self) -> Any:
        """
        Fetch the raw payload from the upstream API.

        Should raise MarketSourceError subclasses on failure.
        """
        pass

    @abstractmethod
    def _normalize(self, raw_data: Any) -> Optional[T]:
        """
        Normalize the raw payload.

        Returns None if the payload holds no usable data.
        """
        pass

    def fallback(self) -> Optional[T]:
        """Curated content served when nothing live or cached is available."""
        return None

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def fetch(self, use_cache: bool = True) -> Optional[T]:
        """
        Fetch the normalized feed value.

        NEVER raises. Order of preference: fresh cache, live
        fetch, stale cache, fallback content, None.
        """
        self._stats["total_requests"] += 1

        if use_cache:
            cached = self._get_from_cache()
            if cached is not None:
                self._stats["cache_hits"] += 1
                return cached

        self._stats["cache_misses"] += 1

        if not self._check_rate_limit():
            logger.warning(f"[{self.metadata.name}] Rate limited")
            self._stats["rate_limits_hit"] += 1
            self._health.status = SourceStatus.RATE_LIMITED
            return self._degraded_result()

        result = await self._fetch_with_retry()

        if result is not None:
            self._cached = (result, now_utc())
            self._stats["successful_fetches"] += 1
            return result

        return self._degraded_result()

    def get_health(self) -> SourceHealth:
        """Get current health status."""
        self._health.last_check = now_utc()
        self._health.requests_today = self._requests_today
        return self._health

    def get_stats(self) -> dict[str, Any]:
        """Get source statistics."""
        total = self._stats["total_requests"]
        cache_rate = (
            self._stats["cache_hits"] / total * 100
            if total > 0 else 0
        )
        error_rate = (
            self._stats["errors"] / total * 100
            if total > 0 else 0
        )

        return {
            **self._stats,
            "cache_hit_rate_pct": round(cache_rate, 2),
            "error_rate_pct": round(error_rate, 2),
            "source_name": self.metadata.name,
        }

    async def close(self) -> None:
        """Close the HTTP session if this source created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # ─────────────────────────────────────────────────────────────
    # HTTP helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _get_json(
        self,
        url: str,
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET a JSON document, mapping failures to feed exceptions."""
        session = await self._get_session()
        name = self.metadata.name

        try:
            async with session.get(url, params=params, headers=headers) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After", "60")
                    raise RateLimitError(
                        f"{self.metadata.display_name} rate limit exceeded",
                        source_name=name,
                        retry_after_seconds=int(retry_after) if retry_after.isdigit() else None,
                    )

                if response.status != 200:
                    text = await response.text()
                    raise FetchError(
                        f"{self.metadata.display_name} API error: {response.status}",
                        source_name=name,
                        status_code=response.status,
                        url=url,
                        details={"response": text[:200]},
                    )

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    text = await response.text()
                    raise ParseError(
                        f"Invalid JSON from {self.metadata.display_name}: {e}",
                        source_name=name,
                        raw_data=text,
                    ) from e

        except asyncio.TimeoutError as e:
            raise FetchError(
                f"{self.metadata.display_name} request timed out",
                source_name=name,
                url=url,
            ) from e
        except aiohttp.ClientError as e:
            raise FetchError(
                f"{self.metadata.display_name} connection error: {e}",
                source_name=name,
                url=url,
            ) from e

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    async def _fetch_with_retry(self) -> Optional[T]:
        """Fetch with retry logic."""
        last_error: Optional[Exception] = None
        start_time = now_utc()

        for attempt in range(self.MAX_RETRIES + 1):
            try:
                self._record_request()

                raw_data = await self._fetch_raw()
                result = self._normalize(raw_data)
                if result is None:
                    raise ParseError(
                        "No usable data in response",
                        source_name=self.metadata.name,
                        raw_data=str(raw_data),
                    )

                latency = (now_utc() - start_time).total_seconds() * 1000
                self._health.latency_ms = latency
                self._health.status = SourceStatus.HEALTHY
                self._health.consecutive_failures = 0

                return result

            except RateLimitError as e:
                logger.warning(f"[{self.metadata.name}] Rate limit hit: {e}")
                self._health.status = SourceStatus.RATE_LIMITED
                self._stats["rate_limits_hit"] += 1
                return None  # Don't retry rate limits

            except MarketSourceError as e:
                last_error = e
                logger.warning(
                    f"[{self.metadata.name}] Fetch error (attempt {attempt + 1}): {e}"
                )

            except Exception as e:
                last_error = e
                logger.error(
                    f"[{self.metadata.name}] Unexpected error (attempt {attempt + 1}): {e}"
                )

            if attempt < self.MAX_RETRIES:
                await asyncio.sleep(self.RETRY_DELAY * (attempt + 1))

        self._stats["errors"] += 1
        self._health.consecutive_failures += 1
        self._health.error_count += 1
        self._health.last_error = str(last_error)
        self._health.last_error_time = now_utc()

        if self._health.consecutive_failures >= 3:
            self._health.status = SourceStatus.UNAVAILABLE
        else:
            self._health.status = SourceStatus.DEGRADED

        return None

    def _degraded_result(self) -> Optional[T]:
        stale = self._get_stale_cache()
        if stale is not None:
            logger.info(f"[{self.metadata.name}] Using stale cache")
            return stale

        fallback = self.fallback()
        if fallback is not None:
            logger.info(f"[{self.metadata.name}] Serving fallback content")
            self._stats["fallbacks_served"] += 1
        return fallback

    def _cache_age(self) -> Optional[float]:
        if self._cached is None:
            return None
        return (now_utc() - self._cached[1]).total_seconds()

    def _get_from_cache(self) -> Optional[T]:
        """Get data from cache if fresh."""
        age = self._cache_age()
        if age is not None and age <= self.cache_ttl:
            return self._cached[0]
        return None

    def _get_stale_cache(self) -> Optional[T]:
        """Get stale data as fallback."""
        age = self._cache_age()
        if age is not None and age <= self.DEFAULT_STALE_TTL:
            return self._cached[0]
        return None

    def _check_rate_limit(self) -> bool:
        """Check if request is within rate limits."""
        now = now_utc()

        if now.date() > self._day_start.date():
            self._requests_today = 0
            self._day_start = now.replace(
                hour=0, minute=0, second=0, microsecond=0
            )

        if self.metadata.rate_limit_per_minute:
            cutoff = now - timedelta(minutes=1)
            self._requests_this_minute = [
                t for t in self._requests_this_minute
                if t > cutoff
            ]

            if len(self._requests_this_minute) >= self.metadata.rate_limit_per_minute:
                return False

        return True

    def _record_request(self) -> None:
        """Record a request for rate limiting."""
        now = now_utc()
        self._requests_this_minute.append(now)
        self._requests_today += 1

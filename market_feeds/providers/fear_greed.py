"""
Fear & Greed Source - alternative.me crypto sentiment index.

GET https://api.alternative.me/fng/
-> data[0].value ("0".."100"), data[0].value_classification

The index updates once a day; the dashboard polls every
five minutes.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from core.clock import now_utc

from ..base import BaseMarketSource
from ..models import FearGreedReading, SourceMetadata


logger = logging.getLogger(__name__)


class FearGreedSource(BaseMarketSource[FearGreedReading]):
    """alternative.me Fear & Greed index."""

    BASE_URL = "https://api.alternative.me"
    DEFAULT_CACHE_TTL = 300

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name="fear_greed",
            display_name="Fear & Greed Index",
            base_url=self.BASE_URL,
            rate_limit_per_minute=60,
            cache_ttl_seconds=self.cache_ttl,
            documentation_url="https://alternative.me/crypto/fear-and-greed-index/",
            tags=["sentiment"],
        )

    async def _fetch_raw(self) -> Any:
        return await self._get_json(f"{self.BASE_URL}/fng/")

    def _normalize(self, raw_data: Any) -> Optional[FearGreedReading]:
        if not isinstance(raw_data, dict):
            return None
        entries = raw_data.get("data") or []
        if not entries:
            return None

        entry = entries[0]
        try:
            value = int(entry.get("value"))
        except (TypeError, ValueError):
            return None

        timestamp = now_utc()
        raw_ts = entry.get("timestamp")
        if raw_ts is not None:
            try:
                timestamp = datetime.fromtimestamp(int(raw_ts), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                logger.debug(f"[{self.metadata.name}] Unparseable timestamp: {raw_ts}")

        return FearGreedReading(
            value=max(0, min(100, value)),
            classification=str(entry.get("value_classification") or ""),
            timestamp=timestamp,
        )

"""
Farcaster Source - Recent casts from notable accounts.

Reads the public Pinata Farcaster hub:
- /userDataByFid  -> username and profile picture
- /castsByFid     -> latest casts, newest first

Replies and very short casts are dropped. When no account
returns anything usable a curated fallback feed is served.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from core.clock import now_utc

from ..base import BaseMarketSource
from ..exceptions import FetchError, MarketSourceError
from ..models import CastFeed, FarcasterCast, FeedOrigin, SourceMetadata


logger = logging.getLogger(__name__)


# Farcaster timestamps count seconds from 2021-01-01T00:00:00Z
FARCASTER_EPOCH = datetime(2021, 1, 1, tzinfo=timezone.utc)

# (fid, name used when the hub has no username)
FEATURED_FIDS: tuple[tuple[int, str], ...] = (
    (3, "dwr.eth"),
    (5650, "vitalik.eth"),
    (99, "jessepollak"),
    (680, "linda"),
    (2433, "balajis.eth"),
    (12, "woj.eth"),
    (7143, "seneca"),
    (239, "ted"),
    (576, "nonlinear.eth"),
    (1317, "cassie"),
    (194, "cameron"),
    (617, "ace"),
    (2904, "july"),
    (4167, "pinata"),
    (7732, "base"),
)

FALLBACK_CASTS: tuple[tuple[str, str, str, int], ...] = (
    ("dwr.eth", "Building the decentralized social network. Farcaster is growing every day. "
     "The future of social is onchain.", "farcaster", 342),
    ("vitalik.eth", "Excited about the progress on L2 scaling. Base and other rollups are "
     "shipping real solutions for users.", "ethereum", 891),
    ("jessepollak", "Base is for everyone. Keep building, keep shipping. The onchain economy "
     "is just getting started.", "base", 567),
    ("linda", "The best crypto products are the ones that make complex things simple. "
     "Focus on UX.", "crypto", 234),
    ("balajis.eth", "Bitcoin and crypto are not just about money. They are about building "
     "parallel systems and sovereign technology.", "bitcoin", 445),
)


def farcaster_time(timestamp: Any) -> Optional[datetime]:
    """Convert a hub timestamp to an aware datetime."""
    try:
        return FARCASTER_EPOCH + timedelta(seconds=int(timestamp))
    except (TypeError, ValueError, OverflowError):
        return None


class FarcasterHubSource(BaseMarketSource[CastFeed]):
    """Latest casts of a fixed list of featured accounts."""

    BASE_URL = "https://hub.pinata.cloud/v1"
    DEFAULT_CACHE_TTL = 60

    PAGE_SIZE = 3
    CASTS_PER_ACCOUNT = 2
    MIN_TEXT_LENGTH = 20
    MAX_TEXT_LENGTH = 280
    MAX_CASTS = 12

    def __init__(
        self,
        cache_ttl: Optional[int] = None,
        timeout: Optional[int] = None,
        featured_fids: Optional[tuple[tuple[int, str], ...]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(None, cache_ttl, timeout, **kwargs)
        self.featured_fids = featured_fids or FEATURED_FIDS

    @property
    def metadata(self) -> SourceMetadata:
        return SourceMetadata(
            name="farcaster",
            display_name="Farcaster Hub",
            base_url=self.BASE_URL,
            cache_ttl_seconds=self.cache_ttl,
            documentation_url="https://docs.farcaster.xyz/reference/hubble/httpapi/httpapi",
            tags=["social", "farcaster"],
        )

    async def _fetch_raw(self) -> Any:
        """One entry per account that answered: fid, username, pfp, messages."""
        results = await asyncio.gather(
            *(self._fetch_account(fid, name) for fid, name in self.featured_fids)
        )
        accounts = [account for account in results if account is not None]
        if not accounts:
            raise FetchError(
                "No Farcaster account could be fetched",
                source_name=self.metadata.name,
            )
        return accounts

    async def _fetch_account(self, fid: int, fallback_name: str) -> Optional[dict[str, Any]]:
        username = fallback_name
        pfp = ""

        try:
            user_data = await self._get_json(
                f"{self.BASE_URL}/userDataByFid", params={"fid": str(fid)}
            )
            for message in (user_data or {}).get("messages") or []:
                body = (message.get("data") or {}).get("userDataBody") or {}
                if body.get("type") == "USER_DATA_TYPE_USERNAME" and body.get("value"):
                    username = body["value"]
                elif body.get("type") == "USER_DATA_TYPE_PFP" and body.get("value"):
                    pfp = body["value"]
        except MarketSourceError as e:
            logger.debug(f"[{self.metadata.name}] No user data for FID {fid}: {e}")

        try:
            casts = await self._get_json(
                f"{self.BASE_URL}/castsByFid",
                params={"fid": str(fid), "pageSize": str(self.PAGE_SIZE), "reverse": "true"},
            )
        except MarketSourceError as e:
            logger.info(f"[{self.metadata.name}] Failed to fetch FID {fid}: {e}")
            return None

        return {
            "fid": fid,
            "username": username,
            "pfp": pfp,
            "messages": (casts or {}).get("messages") or [],
        }

    def _normalize(self, raw_data: Any) -> Optional[CastFeed]:
        casts: list[FarcasterCast] = []
        for account in raw_data or []:
            casts.extend(self._account_casts(account))

        if not casts:
            return None

        casts.sort(key=lambda cast: cast.timestamp, reverse=True)
        return CastFeed(casts=tuple(casts[: self.MAX_CASTS]), origin=FeedOrigin.LIVE)

    def _account_casts(self, account: dict[str, Any]) -> list[FarcasterCast]:
        casts = []
        messages = account.get("messages") or []
        for index, message in enumerate(messages[: self.CASTS_PER_ACCOUNT]):
            data = message.get("data") or {}
            body = data.get("castAddBody") or {}
            text = body.get("text") or ""

            if len(text) <= self.MIN_TEXT_LENGTH or body.get("parentCastId"):
                continue

            casts.append(
                FarcasterCast(
                    id=message.get("hash") or f"{account['fid']}_{index}",
                    author=account.get("username") or str(account["fid"]),
                    author_pfp=account.get("pfp") or "",
                    text=text[: self.MAX_TEXT_LENGTH],
                    timestamp=farcaster_time(data.get("timestamp")) or now_utc(),
                    channel="crypto",
                )
            )
        return casts

    def fallback(self) -> Optional[CastFeed]:
        now = now_utc()
        casts = tuple(
            FarcasterCast(
                id=str(index + 1),
                author=author,
                text=text,
                timestamp=now - timedelta(minutes=30 * (index + 1)),
                channel=channel,
                likes=likes,
            )
            for index, (author, text, channel, likes) in enumerate(FALLBACK_CASTS)
        )
        return CastFeed(casts=casts, origin=FeedOrigin.FALLBACK)

"""
Technical Analysis Summary - Hosted language model client.

Builds a short plain-prose BTC technical analysis prompt from
the current dashboard readings and sends it to the Anthropic
Messages API.

Unlike the feed sources, this client is called on demand and
DOES raise: the API layer turns the errors into HTTP status
codes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from .exceptions import ConfigurationError, FetchError, ParseError


logger = logging.getLogger(__name__)


MESSAGES_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
EMPTY_SUMMARY = "Unable to generate summary"

TIMEFRAME_DESCRIPTIONS: dict[str, str] = {
    "4h": "4-hour (short-term, intraday moves)",
    "daily": "daily (swing trading perspective)",
    "weekly": "weekly/monthly (macro trend, big picture)",
}

SENTENCE_COUNTS: dict[str, str] = {
    "4h": "3-4",
    "daily": "4-5",
}
DEFAULT_SENTENCE_COUNT = "5-6"


@dataclass(frozen=True)
class SummaryMarketData:
    """Readings quoted in the prompt. Missing values render as N/A."""
    price: Optional[float] = None
    price_change_pct: Optional[float] = None
    rsi: Optional[float] = None
    fear_greed_value: Optional[int] = None
    fear_greed_text: Optional[str] = None
    btc_dominance_pct: Optional[float] = None
    usdt_dominance_pct: Optional[float] = None


@dataclass(frozen=True)
class TechnicalSummary:
    summary: str
    timeframe: str
    model: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "timeframe": self.timeframe,
            "model": self.model,
        }


def _or_na(value: Any, fmt: str = "{}") -> str:
    if value is None or value == "":
        return "N/A"
    return fmt.format(value)


def build_prompt(timeframe: str, data: SummaryMarketData) -> str:
    """Prompt for the given timeframe ("4h", "daily" or "weekly")."""
    description = TIMEFRAME_DESCRIPTIONS.get(timeframe, timeframe)
    sentences = SENTENCE_COUNTS.get(timeframe, DEFAULT_SENTENCE_COUNT)

    return (
        "You are a professional Bitcoin technical analyst. Generate a concise, actionable "
        f"TA summary for the {description} timeframe.\n"
        "\n"
        "Current Market Data:\n"
        f"- Price: ${_or_na(data.price, '{:,.0f}')}\n"
        f"- 24h Change: {_or_na(data.price_change_pct, '{:.2f}')}%\n"
        f"- RSI: {_or_na(data.rsi, '{:.0f}')}\n"
        f"- Fear & Greed Index: {_or_na(data.fear_greed_value)} ({_or_na(data.fear_greed_text)})\n"
        f"- BTC Dominance: {_or_na(data.btc_dominance_pct)}%\n"
        f"- USDT Dominance: {_or_na(data.usdt_dominance_pct)}%\n"
        "\n"
        f"Provide a {sentences} sentence summary that includes:\n"
        "1. Current trend assessment\n"
        "2. Key support/resistance levels to watch\n"
        "3. What the indicators suggest\n"
        "4. A brief actionable outlook (bullish/bearish/neutral bias)\n"
        "\n"
        "Keep it professional but accessible. No fluff - traders want quick, useful insights.\n"
        "Do NOT use markdown formatting, asterisks, or bullet points. "
        "Write in plain prose paragraphs."
    )


class TechnicalSummaryClient:
    """Messages API client for the TA summary."""

    SOURCE_NAME = "ta_summary"
    MAX_TOKENS = 500

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        timeout: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def summarize(self, timeframe: str, data: SummaryMarketData) -> TechnicalSummary:
        """
        Generate a summary.

        Raises:
            ConfigurationError: No API key configured
            FetchError: Network failure or non-2xx response
            ParseError: Response body is not JSON
        """
        if not self.is_configured:
            raise ConfigurationError("API key not configured", source_name=self.SOURCE_NAME)

        payload = {
            "model": self.model,
            "max_tokens": self.MAX_TOKENS,
            "messages": [{"role": "user", "content": build_prompt(timeframe, data)}],
        }
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": API_VERSION,
        }

        session = await self._get_session()
        try:
            async with session.post(MESSAGES_URL, json=payload, headers=headers) as response:
                if response.status >= 400:
                    text = await response.text()
                    logger.error(f"[{self.SOURCE_NAME}] Messages API error {response.status}: {text[:200]}")
                    raise FetchError(
                        "Failed to generate summary",
                        source_name=self.SOURCE_NAME,
                        status_code=response.status,
                        url=MESSAGES_URL,
                    )
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    raise ParseError(
                        f"Invalid JSON from Messages API: {e}",
                        source_name=self.SOURCE_NAME,
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[{self.SOURCE_NAME}] Request failed: {e}")
            raise FetchError(
                f"Messages API request failed: {e}",
                source_name=self.SOURCE_NAME,
                url=MESSAGES_URL,
            ) from e

        return TechnicalSummary(
            summary=extract_text(body),
            timeframe=timeframe,
            model=self.model,
        )


def extract_text(body: Any) -> str:
    """First text block of a Messages API response."""
    if not isinstance(body, dict):
        return EMPTY_SUMMARY
    for block in body.get("content") or []:
        if isinstance(block, dict) and block.get("type", "text") == "text" and block.get("text"):
            return block["text"]
    return EMPTY_SUMMARY

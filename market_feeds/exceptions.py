"""
Market Feed Exceptions - Custom error hierarchy.

These exceptions are raised inside the feed sources and
caught by BaseMarketSource.fetch(), which never raises to
its caller. Clients that are called directly (the technical
summary client) do propagate them.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class MarketSourceError(Exception):
    """Base exception for all market feed errors."""

    def __init__(
        self,
        message: str,
        source_name: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.source_name = source_name
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source_name": self.source_name,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class RateLimitError(MarketSourceError):
    """Rate limit exceeded for the source."""

    def __init__(
        self,
        message: str,
        source_name: str = "",
        retry_after_seconds: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, details)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class FetchError(MarketSourceError):
    """Failed to fetch data from the source."""

    def __init__(
        self,
        message: str,
        source_name: str = "",
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, details)
        self.status_code = status_code
        self.url = url

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "url": self.url,
        })
        return data


class ParseError(MarketSourceError):
    """Failed to parse a response from the source."""

    def __init__(
        self,
        message: str,
        source_name: str = "",
        raw_data: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, details)
        self.raw_data = raw_data[:500] if raw_data else None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["raw_data_preview"] = self.raw_data[:100] if self.raw_data else None
        return data


class AuthenticationError(MarketSourceError):
    """Authentication failed for the source."""
    pass


class ConfigurationError(MarketSourceError):
    """A required setting (usually an API key) is missing."""
    pass

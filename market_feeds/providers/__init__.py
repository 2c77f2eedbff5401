"""Market feed source providers."""

from .coingecko import CoinGeckoGlobalSource, CoinGeckoPriceSource
from .cryptopanic import CryptoPanicNewsSource
from .farcaster import FarcasterHubSource
from .fear_greed import FearGreedSource

__all__ = [
    "CoinGeckoGlobalSource",
    "CoinGeckoPriceSource",
    "CryptoPanicNewsSource",
    "FarcasterHubSource",
    "FearGreedSource",
]

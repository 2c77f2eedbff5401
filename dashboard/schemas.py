"""
Pydantic schemas for Dashboard API requests and responses.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from battle_scoring import (
    AltseasonResult,
    BattleBreakdown,
    BattleResult,
    DominanceSnapshot,
    MarketSnapshot,
    WhaleAlert,
    WhaleAlertType,
)

# =======================
# COMMON
# =======================

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str = "1.0.0"
    uptime_seconds: float = 0
    poller_running: bool = False
    sources: Dict[str, Dict] = {}

# =======================
# 1. PRICE & MARKET
# =======================

class PriceData(BaseModel):
    price_usd: float
    change_24h_pct: float
    volume_24h_usd: Optional[float] = None
    market_cap_usd: Optional[float] = None
    updated_at: Optional[datetime] = None
    formatted_price: str
    formatted_change: str
    formatted_volume: Optional[str] = None
    formatted_market_cap: Optional[str] = None

# =======================
# 2. BATTLE SCORE
# =======================

class BattleData(BaseModel):
    bull_power: float
    bear_power: float
    tug_position: float
    total_power: float
    leader: str  # bulls, bears, even

    @classmethod
    def from_result(cls, result: BattleResult) -> "BattleData":
        return cls(**result.to_dict())


class Contribution(BaseModel):
    bull: float
    bear: float


class BattleBreakdownData(BaseModel):
    contributions: Dict[str, Contribution]
    whale_alerts_used: int

    @classmethod
    def from_breakdown(cls, breakdown: BattleBreakdown) -> "BattleBreakdownData":
        return cls(**breakdown.to_dict())


class BattleResponse(BaseModel):
    battle: BattleData
    breakdown: BattleBreakdownData


class WhaleAlertIn(BaseModel):
    type: WhaleAlertType
    amount_btc: float = Field(ge=0)
    exchange: str = ""

    def to_alert(self) -> WhaleAlert:
        return WhaleAlert(type=self.type, amount_btc=self.amount_btc, exchange=self.exchange)


class BattleComputeRequest(BaseModel):
    price_change_percent_24h: float
    fear_greed_value: int = Field(ge=0, le=100)
    rsi: float = Field(ge=0, le=100)
    long_short_ratio: float = Field(gt=0)
    # Most recent first
    whale_alerts: List[WhaleAlertIn] = []
    previous_tug: float = Field(default=50.0, ge=0, le=100)

    def to_snapshot(self) -> MarketSnapshot:
        return MarketSnapshot.build(
            price_change_percent_24h=self.price_change_percent_24h,
            fear_greed_value=self.fear_greed_value,
            rsi=self.rsi,
            long_short_ratio=self.long_short_ratio,
            whale_alerts=[alert.to_alert() for alert in self.whale_alerts],
        )

# =======================
# 3. ALTSEASON SCORE
# =======================

class AltseasonData(BaseModel):
    score: int
    signals: List[str]
    is_loading: bool = False

    @classmethod
    def from_result(cls, result: AltseasonResult) -> "AltseasonData":
        return cls(**result.to_dict())


class AltseasonComputeRequest(BaseModel):
    btc_dominance_percent: float = Field(ge=0, le=100)
    others_dominance_percent: float = Field(ge=0, le=100)
    stablecoin_dominance_percent: float = Field(ge=0, le=100)
    btc_price: float = Field(gt=0)
    # Defaults to the server clock
    now: Optional[datetime] = None

    def to_snapshot(self) -> DominanceSnapshot:
        return DominanceSnapshot(
            btc_dominance_percent=self.btc_dominance_percent,
            others_dominance_percent=self.others_dominance_percent,
            stablecoin_dominance_percent=self.stablecoin_dominance_percent,
        )

# =======================
# 4. FEEDS
# =======================

class WhaleAlertData(BaseModel):
    alert_id: str
    type: str
    amount_btc: float
    exchange: str
    usd_value_millions: Optional[float] = None
    timestamp: Optional[datetime] = None
    simulated: bool


class WhaleAlertsResponse(BaseModel):
    alerts: List[WhaleAlertData]
    simulated: bool


class NewsItemData(BaseModel):
    id: str
    title: str
    source: str
    sentiment: str  # bullish, bearish, neutral
    url: str
    timestamp: datetime


class NewsResponse(BaseModel):
    items: List[NewsItemData]
    source: Optional[str] = None  # live, fallback


class CastData(BaseModel):
    id: str
    author: str
    author_pfp: str = ""
    text: str
    timestamp: datetime
    likes: Optional[int] = None
    channel: str


class FarcasterResponse(BaseModel):
    casts: List[CastData]
    source: Optional[str] = None  # live, fallback

# =======================
# 5. TA SUMMARY
# =======================

class TASummaryRequest(BaseModel):
    timeframe: str = Field(default="daily", min_length=1, max_length=32)


class TASummaryResponse(BaseModel):
    summary: str
    timeframe: str
    model: str

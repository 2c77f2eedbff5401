from typing import Any, Dict

from fastapi import APIRouter, Depends

from battle_scoring import format_market_cap, format_percent, format_price, format_volume
from dashboard.dependencies import get_service
from dashboard.schemas import PriceData, WhaleAlertData, WhaleAlertsResponse
from dashboard.services import DashboardService

router = APIRouter(prefix="/api", tags=["Market"])


@router.get("/overview")
def get_overview(service: DashboardService = Depends(get_service)) -> Dict[str, Any]:
    """
    Everything the dashboard page renders, in one call.
    """
    return service.get_overview()


@router.get("/price", response_model=PriceData)
def get_price(service: DashboardService = Depends(get_service)):
    state = service.state
    return PriceData(
        **state.price_dict(),
        formatted_price=format_price(state.price_usd),
        formatted_change=format_percent(state.price_change_pct),
        formatted_volume=(
            format_volume(state.volume_24h_usd) if state.volume_24h_usd is not None else None
        ),
        formatted_market_cap=(
            format_market_cap(state.market_cap_usd) if state.market_cap_usd is not None else None
        ),
    )


@router.get("/whales", response_model=WhaleAlertsResponse)
def get_whales(service: DashboardService = Depends(get_service)):
    """
    Recent whale alerts, most recent first.
    """
    alerts = service.state.whale_alerts
    return WhaleAlertsResponse(
        alerts=[WhaleAlertData(**alert.to_dict()) for alert in alerts],
        simulated=any(alert.simulated for alert in alerts),
    )

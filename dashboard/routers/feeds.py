import logging

from fastapi import APIRouter, Depends, HTTPException

from dashboard.dependencies import get_service
from dashboard.schemas import FarcasterResponse, NewsResponse, TASummaryRequest, TASummaryResponse
from dashboard.services import DashboardService
from market_feeds import ConfigurationError, MarketSourceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Feeds"])


@router.get("/news", response_model=NewsResponse)
def get_news(service: DashboardService = Depends(get_service)):
    return NewsResponse(**service.get_news())


@router.get("/farcaster", response_model=FarcasterResponse)
def get_farcaster(service: DashboardService = Depends(get_service)):
    return FarcasterResponse(**service.get_farcaster())


@router.post("/ta-summary", response_model=TASummaryResponse)
async def generate_ta_summary(
    request: TASummaryRequest,
    service: DashboardService = Depends(get_service),
):
    """
    Language model TA summary of the current market state.
    """
    try:
        summary = await service.generate_ta_summary(request.timeframe)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except MarketSourceError as e:
        logger.error(f"TA summary failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate summary")

    return TASummaryResponse(**summary.to_dict())

from fastapi import APIRouter, Depends

from battle_scoring import BattleScoreCalculator, compute_altseason, compute_battle
from dashboard.dependencies import get_service
from dashboard.schemas import (
    AltseasonComputeRequest,
    AltseasonData,
    BattleBreakdownData,
    BattleComputeRequest,
    BattleData,
    BattleResponse,
)
from dashboard.services import DashboardService

router = APIRouter(prefix="/api", tags=["Scores"])


@router.get("/battle", response_model=BattleResponse)
def get_battle(service: DashboardService = Depends(get_service)):
    """
    Current Battle Score of the live dashboard state.
    """
    return BattleResponse(
        battle=BattleData.from_result(service.state.battle),
        breakdown=BattleBreakdownData.from_breakdown(service.state.battle_breakdown),
    )


@router.post("/battle/compute", response_model=BattleResponse)
def compute_battle_score(request: BattleComputeRequest):
    """
    Score a caller-supplied market snapshot. Does not touch dashboard state.
    """
    snapshot = request.to_snapshot()
    result = compute_battle(snapshot, previous_tug=request.previous_tug)
    return BattleResponse(
        battle=BattleData.from_result(result),
        breakdown=BattleBreakdownData.from_breakdown(BattleScoreCalculator().breakdown(snapshot)),
    )


@router.get("/altseason", response_model=AltseasonData)
def get_altseason(service: DashboardService = Depends(get_service)):
    return AltseasonData.from_result(service.state.altseason)


@router.post("/altseason/compute", response_model=AltseasonData)
def compute_altseason_score(
    request: AltseasonComputeRequest,
    service: DashboardService = Depends(get_service),
):
    """
    Score caller-supplied dominance readings against the configured target date.
    """
    result = compute_altseason(
        request.to_snapshot(),
        request.btc_price,
        request.now or service.clock.now(),
        config=service.altseason_config,
    )
    return AltseasonData.from_result(result)

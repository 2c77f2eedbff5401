from datetime import datetime

from fastapi import APIRouter, Depends, Request

from dashboard.dependencies import get_service
from dashboard.schemas import HealthResponse
from dashboard.services import DashboardService

router = APIRouter(tags=["System Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request, service: DashboardService = Depends(get_service)):
    """
    Liveness plus the health of every upstream feed.
    """
    now = service.clock.now()
    started_at: datetime = request.app.state.started_at
    poller = getattr(request.app.state, "poller", None)

    return HealthResponse(
        status="healthy",
        timestamp=now,
        uptime_seconds=max(0.0, (now - started_at).total_seconds()),
        poller_running=poller is not None and poller.is_running,
        sources=service.get_source_health(),
    )

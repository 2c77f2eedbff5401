"""
Dashboard - API.

============================================================
RESPONSIBILITY
============================================================
Builds the FastAPI application: CORS, routers, the shared
DashboardService and, when enabled, the background poller
that keeps the service fed.
============================================================
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.clock import now_utc
from core.settings import DashboardSettings
from dashboard.poller import MarketPoller
from dashboard.routers import feeds, health, market, scores
from dashboard.services import DashboardService

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    settings: Optional[DashboardSettings] = None,
    service: Optional[DashboardService] = None,
) -> FastAPI:
    """
    Create the dashboard application.

    A service passed in is used as-is (and not closed on shutdown).
    """
    settings = settings or DashboardSettings.from_env()
    owns_service = service is None
    service = service or DashboardService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.enable_poller:
            await app.state.poller.start()
        try:
            yield
        finally:
            await app.state.poller.stop()
            if owns_service:
                await service.close()

    app = FastAPI(
        title="BTC Battle Dashboard API",
        description="Bull vs bear battle score, altseason score and market feeds for BTC.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS (Allow local frontend development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.service = service
    app.state.poller = MarketPoller(service)
    app.state.started_at = now_utc()

    app.include_router(health.router)
    app.include_router(market.router)
    app.include_router(scores.router)
    app.include_router(feeds.router)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "service": "BTC Battle Dashboard API",
            "version": VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()

"""
FastAPI dependencies shared by the dashboard routers.
"""
from fastapi import Request

from dashboard.services import DashboardService


def get_service(request: Request) -> DashboardService:
    return request.app.state.service

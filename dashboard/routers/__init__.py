"""
Dashboard API Routers.
"""
from . import feeds, health, market, scores

__all__ = ["feeds", "health", "market", "scores"]

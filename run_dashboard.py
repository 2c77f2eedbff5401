#!/usr/bin/env python
"""
Dashboard API Server Runner.

Usage:
    python run_dashboard.py

Or with PM2:
    pm2 start run_dashboard.py --interpreter python
"""

import sys
import logging
import uvicorn

from core.settings import DashboardSettings


logger = logging.getLogger(__name__)


def main():
    """Run the dashboard API server."""
    settings = DashboardSettings.from_env()

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger.info(f"Starting Dashboard API on {settings.host}:{settings.port}")
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not set - TA summaries disabled")
    if not settings.cryptopanic_api_key:
        logger.warning("CRYPTOPANIC_API_KEY not set - news may fall back to curated headlines")

    try:
        uvicorn.run(
            "dashboard.api:app",
            host=settings.host,
            port=settings.port,
            reload=settings.is_development,
            log_level=settings.log_level.lower(),
            access_log=True,
        )
    except Exception as e:
        logger.error(f"Failed to start dashboard: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

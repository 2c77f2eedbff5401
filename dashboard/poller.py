"""
Dashboard - Background Poller.

============================================================
RESPONSIBILITY
============================================================
Runs one asyncio task per cadence:

- simulation tick      every 2s
- whale generation     every 4s
- price + global       every 30s
- Farcaster            every 60s
- news                 every 120s
- Fear & Greed         every 300s

The first refresh of every feed runs in the background so
start() returns at once.
A failing iteration is logged and the loop carries on.
============================================================
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .services import DashboardService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollerIntervals:
    """Seconds between runs of each job."""
    simulation: float = 2.0
    whales: float = 4.0
    market: float = 30.0
    farcaster: float = 60.0
    news: float = 120.0
    fear_greed: float = 300.0


class MarketPoller:
    """Drives a DashboardService on fixed cadences."""

    def __init__(
        self,
        service: DashboardService,
        intervals: Optional[PollerIntervals] = None,
    ):
        self.service = service
        self.intervals = intervals or PollerIntervals()
        self._running = False
        self._tasks: list[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self, initial_refresh: bool = True) -> None:
        """Start all polling loops."""
        if self._running:
            return

        self._running = True

        jobs: list[tuple[str, float, Callable[[], Awaitable[None]]]] = [
            ("simulation", self.intervals.simulation, self._simulation_tick),
            ("whales", self.intervals.whales, self._whale_tick),
            ("market", self.intervals.market, self._market_refresh),
            ("farcaster", self.intervals.farcaster, self._farcaster_refresh),
            ("news", self.intervals.news, self._news_refresh),
            ("fear_greed", self.intervals.fear_greed, self._fear_greed_refresh),
        ]
        self._tasks = [
            asyncio.create_task(self._run(name, interval, job), name=f"poller-{name}")
            for name, interval, job in jobs
        ]
        if initial_refresh:
            self._tasks.append(
                asyncio.create_task(self._initial_refresh(), name="poller-initial-refresh")
            )
        logger.info("Market poller started")

    async def stop(self) -> None:
        """Stop all polling loops."""
        self._running = False

        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []

        logger.info("Market poller stopped")

    async def _initial_refresh(self) -> None:
        try:
            await self.service.refresh_all()
        except Exception as e:
            logger.error(f"Initial refresh failed: {e}")

    async def _run(
        self,
        name: str,
        interval: float,
        job: Callable[[], Awaitable[None]],
    ) -> None:
        while self._running:
            try:
                await asyncio.sleep(interval)
                await job()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Poller job '{name}' failed: {e}")

    # ------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------

    async def _simulation_tick(self) -> None:
        self.service.tick_simulation()

    async def _whale_tick(self) -> None:
        alert = self.service.tick_whales()
        if alert is not None:
            logger.debug(
                f"Whale {alert.type.value} {alert.amount_btc:.0f} BTC on {alert.exchange}"
            )

    async def _market_refresh(self) -> None:
        await asyncio.gather(
            self.service.refresh_price(),
            self.service.refresh_global(),
        )

    async def _farcaster_refresh(self) -> None:
        await self.service.refresh_farcaster()

    async def _news_refresh(self) -> None:
        await self.service.refresh_news()

    async def _fear_greed_refresh(self) -> None:
        await self.service.refresh_fear_greed()

# background/refresh_scheduler.py
"""
Refresh Scheduler - periodic polling refresh of the dashboard read model.
Uses APScheduler; event-driven invalidation covers in-process writes,
this job covers rows changed by other processes.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import Config
from affiliate_system.services.read_model import DashboardReadModel, readModel
from affiliate_system.events.event_bus import eventBus, PayoutEvents

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 60


class RefreshScheduler:
    """
    Background scheduler for read model refreshes.
    Uses APScheduler for reliable task scheduling.
    """

    def __init__(self, model: Optional[DashboardReadModel] = None, intervalSeconds: Optional[int] = None):
        """
        Initialize scheduler.

        Args:
            model: Read model to refresh (global instance by default)
            intervalSeconds: Polling interval (READ_MODEL_REFRESH_SECONDS by default)
        """
        self.model = model or readModel
        self.intervalSeconds = intervalSeconds or Config.get(
            Config.READ_MODEL_REFRESH_SECONDS,
            DEFAULT_REFRESH_SECONDS
        )
        self.isRunning = False

        self.scheduler = AsyncIOScheduler(
            timezone='UTC',
            job_defaults={
                'coalesce': True,
                'max_instances': 1,
                'misfire_grace_time': 30
            }
        )

        # Statistics
        self.stats = {
            "refreshesExecuted": 0,
            "errors": 0,
            "lastError": None,
            "startedAt": None,
            "lastExecutedAt": None
        }

    async def start(self):
        """
        Start scheduler.

        Jobs configured:
        - Read model refresh: every READ_MODEL_REFRESH_SECONDS
        """
        if self.isRunning:
            logger.warning("Refresh Scheduler already running")
            return

        logger.info("=" * 60)
        logger.info("Starting Refresh Scheduler with APScheduler")
        logger.info("=" * 60)

        self.isRunning = True
        self.stats["startedAt"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            func=self._safe_refresh_wrapper,
            trigger=IntervalTrigger(seconds=self.intervalSeconds),
            id='read_model_refresh',
            name='Read Model Refresh',
            replace_existing=True
        )
        logger.info(f"✓ Job registered: Read Model Refresh (every {self.intervalSeconds} seconds)")

        self.scheduler.start()

        logger.info(f"✅ Refresh Scheduler started, active jobs: {len(self.scheduler.get_jobs())}")

    async def stop(self):
        """Stop scheduler gracefully."""
        if not self.isRunning:
            return

        logger.info("Stopping Refresh Scheduler...")
        self.isRunning = False

        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)

        logger.info("✓ Refresh Scheduler stopped")

    async def _safe_refresh_wrapper(self):
        """Safe wrapper for the refresh job."""
        try:
            await self.refreshReadModel()
        except Exception as e:
            logger.error(f"Error in read model refresh job: {e}", exc_info=True)
            self.stats["errors"] += 1
            self.stats["lastError"] = str(e)

    async def refreshReadModel(self):
        """Refresh the read model and announce it."""
        result = self.model.refresh()

        self.stats["refreshesExecuted"] += 1
        self.stats["lastExecutedAt"] = datetime.now(timezone.utc)

        await eventBus.emit(PayoutEvents.READ_MODEL_REFRESHED, result)

"""
Scheduled catalog sync.

One job: sync every active sport from its provider, monthly by default
(``settings.SYNC_CRON``, 2 AM UTC on the 1st).

Scheduler: APScheduler (lightweight, FastAPI-compatible)
"""
import logging
from typing import Callable, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from sports_catalog.core.config import settings
from sports_catalog.core.database import get_session_factory
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.catalog.coordinator import SportClientCoordinator
from sports_catalog.services.sync.catalog_sync import CatalogSyncService, SyncResult

logger = logging.getLogger(__name__)

CATALOG_SYNC_JOB_ID = "catalog_sync"


class CatalogSyncScheduler:
    """Runs the full catalog sync on a cron schedule."""

    def __init__(
        self,
        coordinator: SportClientCoordinator,
        session_factory: Optional[Callable[[], Session]] = None,
        cron: Optional[str] = None,
        timezone: Optional[str] = None,
    ):
        self.coordinator = coordinator
        self.session_factory = session_factory or get_session_factory()
        self.cron = cron or settings.SYNC_CRON
        self.timezone = timezone or settings.SYNC_TIMEZONE
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler already running")
            return

        logger.info("Starting catalog sync scheduler...")

        self.scheduler = AsyncIOScheduler(
            timezone=self.timezone,
            job_defaults={
                'coalesce': True,  # Combine missed runs into one
                'max_instances': 1,
                'misfire_grace_time': 3600
            }
        )
        self.scheduler.add_job(
            self._catalog_sync_job,
            trigger=CronTrigger.from_crontab(self.cron, timezone=self.timezone),
            id=CATALOG_SYNC_JOB_ID,
            name='Sync Sports Catalog',
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info(f"Scheduled: catalog sync ({self.cron} {self.timezone})")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping scheduler...")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Scheduler stopped")

    async def run_catalog_sync(self) -> List[SyncResult]:
        """Sync every active sport now, outside the schedule."""
        with UnitOfWork.from_factory(self.session_factory) as uow:
            return await CatalogSyncService(uow, self.coordinator).sync_all()

    async def _catalog_sync_job(self):
        try:
            results = await self.run_catalog_sync()
            synced = sum(1 for r in results if r.success)
            logger.info(f"Catalog sync job: {synced}/{len(results)} sports synced")
        except Exception:
            logger.exception("Catalog sync job failed")

    def get_jobs(self) -> list:
        if self.scheduler is None:
            return []
        return self.scheduler.get_jobs()


# Global scheduler instance
_scheduler: Optional[CatalogSyncScheduler] = None


async def start_scheduler(coordinator: SportClientCoordinator) -> CatalogSyncScheduler:
    """Start the global scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = CatalogSyncScheduler(coordinator)
        await _scheduler.start()
    return _scheduler


async def stop_scheduler():
    """Stop the global scheduler."""
    global _scheduler
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None

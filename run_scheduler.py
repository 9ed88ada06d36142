#!/usr/bin/env python3
"""
Background runner for the catalog sync scheduler.

Runs the monthly catalog sync as a standalone service (systemd, supervisor,
or directly) instead of inside the API process.

Usage:
    python run_scheduler.py              # Run in foreground
    python run_scheduler.py --run-now    # Sync every sport once and exit
    python run_scheduler.py --list-jobs  # Show the schedule and exit
"""
import asyncio
import argparse
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from sports_catalog.core.config import settings
from sports_catalog.core.database import get_session_factory
from sports_catalog.core.logging import configure_logging, get_logger
from sports_catalog.core.scheduler import CatalogSyncScheduler
from sports_catalog.services.catalog.coordinator import SportClientCoordinator

configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger(__name__)


class SchedulerRunner:
    """Runner for the catalog sync scheduler."""

    def __init__(self):
        self.coordinator = SportClientCoordinator(get_session_factory())
        self.scheduler = CatalogSyncScheduler(self.coordinator)
        self.shutdown = False

    async def start(self):
        """Start the scheduler and run until shutdown."""
        logger.info("Starting scheduler runner...")
        self.coordinator.initialize()
        await self.scheduler.start()

        logger.info("Scheduler is now running. Press Ctrl+C to stop")

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._set_shutdown)

        while not self.shutdown:
            await asyncio.sleep(1)

        await self.scheduler.stop()
        await self.coordinator.close()
        logger.info("Scheduler runner stopped")

    async def run_now(self) -> bool:
        """Run the catalog sync once."""
        self.coordinator.initialize()
        try:
            results = await self.scheduler.run_catalog_sync()
        finally:
            await self.coordinator.close()

        for result in results:
            status = "skipped" if result.skipped else ("ok" if result.success else f"failed: {result.error}")
            print(f"{result.sport_code:<8} {status}")
        return all(r.success or r.skipped for r in results)

    def _set_shutdown(self):
        logger.info("Shutdown signal received")
        self.shutdown = True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Run the catalog sync scheduler')
    parser.add_argument('--run-now', action='store_true', help='Sync every sport once and exit')
    parser.add_argument('--list-jobs', action='store_true', help='Show the configured schedule and exit')
    args = parser.parse_args()

    if args.list_jobs:
        print(f"catalog_sync: cron '{settings.SYNC_CRON}' ({settings.SYNC_TIMEZONE})")
        return 0

    runner = SchedulerRunner()

    if args.run_now:
        return 0 if asyncio.run(runner.run_now()) else 1

    try:
        asyncio.run(runner.start())
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")
    return 0


if __name__ == '__main__':
    sys.exit(main())

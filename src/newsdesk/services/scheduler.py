"""
Scheduler Service for the Newsdesk automation.

Runs the hourly automation cycle:
1. Roaming cycle: ingest up to `ingests_per_run` machine-authored articles
2. Maintenance: apply the retention policy

The same cycle backs the cron HTTP endpoint and the CLI, so a cycle started
by the scheduler and one started externally never overlap.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from newsdesk.config import settings
from newsdesk.database.repositories import SqlNewsStore
from newsdesk.services.automation import RoamingScheduler, run_maintenance
from newsdesk.services.scraper import NewsScraper
from newsdesk.services.switchboard import Switchboard


logger = logging.getLogger(__name__)

MAX_INGESTS_PER_RUN = 6
JOB_ID = "news_automation"


class SchedulerServiceError(Exception):
    """Raised when scheduler service encounters an error."""
    pass


class SchedulerConfig:
    """Configuration for scheduler behavior."""

    def __init__(
        self,
        enabled: bool = False,
        auto_publish: bool = True,
        ingests_per_run: int = 1,
        cron_minute: int = 0,
    ):
        self.enabled = enabled
        self.auto_publish = auto_publish
        self.ingests_per_run = ingests_per_run
        self.cron_minute = cron_minute

    @classmethod
    def from_settings(cls) -> "SchedulerConfig":
        return cls(
            enabled=settings.SCHEDULER_ENABLED,
            auto_publish=settings.NEWS_AUTO_PUBLISH_ENABLED,
            ingests_per_run=settings.NEWS_AUTO_PUBLISH_COUNT,
            cron_minute=settings.SCHEDULER_CRON_MINUTE,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "auto_publish": self.auto_publish,
            "ingests_per_run": self.ingests_per_run,
            "cron_minute": self.cron_minute,
        }


def clamp_ingest_count(count: int) -> int:
    """Ingests per run are bounded to 1..6."""
    return max(1, min(MAX_INGESTS_PER_RUN, count))


class SchedulerService:
    """
    Service for scheduled news automation.

    Uses APScheduler to run once an hour at the configured minute.
    """

    def __init__(
        self,
        roaming_factory: Optional[Callable[[], RoamingScheduler]] = None,
        store=None
    ):
        self.scheduler = AsyncIOScheduler()
        self.config = SchedulerConfig.from_settings()
        self._roaming_factory = roaming_factory
        self._store = store
        self._cycle_lock = asyncio.Lock()  # Prevent overlapping cycles
        self.last_run: Optional[Dict[str, Any]] = None

    @property
    def store(self):
        if self._store is None:
            self._store = SqlNewsStore()
        return self._store

    def build_roaming(self) -> RoamingScheduler:
        if self._roaming_factory is not None:
            return self._roaming_factory()
        return RoamingScheduler(
            switchboard=Switchboard.from_settings(),
            scraper=NewsScraper(),
            store=self.store,
        )

    def configure(self, config: SchedulerConfig):
        """
        Update scheduler configuration.

        Args:
            config: New SchedulerConfig
        """
        config.ingests_per_run = clamp_ingest_count(config.ingests_per_run)
        self.config = config
        self._update_schedule()

    def _update_schedule(self):
        """Update APScheduler job based on current configuration."""
        if self.scheduler.get_job(JOB_ID):
            self.scheduler.remove_job(JOB_ID)

        if self.config.enabled:
            self.scheduler.add_job(
                self._run_scheduled_cycle,
                trigger=CronTrigger(minute=self.config.cron_minute),
                id=JOB_ID,
                name="News Automation",
                max_instances=1,
            )

    def start(self):
        """Start the scheduler."""
        self._update_schedule()
        if not self.scheduler.running:
            self.scheduler.start()

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return getattr(job, "next_run_time", None) if job else None

    async def _run_scheduled_cycle(self):
        """Called by APScheduler; errors are logged, never raised into the scheduler."""
        try:
            await self.run_automation_cycle()
        except Exception:
            logger.exception("Scheduled news automation failed")

    async def run_automation_cycle(
        self,
        count: Optional[int] = None,
        stop_event: Optional[asyncio.Event] = None
    ) -> Dict[str, Any]:
        """
        Run one roaming cycle followed by maintenance.

        Args:
            count: Ingests for this run (defaults to the configured value, clamped to 1..6)
            stop_event: Stops the roaming cycle between iterations when set

        Returns:
            Dict with published/pending counts and deleted article count

        Raises:
            SchedulerServiceError: If a cycle is already running
        """
        if self._cycle_lock.locked():
            raise SchedulerServiceError("An automation cycle is already running")

        async with self._cycle_lock:
            started_at = datetime.utcnow()
            persisted = []
            if self.config.auto_publish:
                target = clamp_ingest_count(count if count is not None else self.config.ingests_per_run)
                roaming = self.build_roaming()
                persisted = await roaming.run_cycle(target, stop_event=stop_event)
            else:
                logger.info("Auto-publish disabled, skipping roaming cycle")

            deleted = await run_maintenance(self.store)

            self.last_run = {
                "started_at": started_at.isoformat(),
                "finished_at": datetime.utcnow().isoformat(),
                "persisted": len(persisted),
                "published": sum(1 for c in persisted if c.status.value == "published"),
                "pending_approval": sum(1 for c in persisted if c.status.value == "pending_approval"),
                "titles": [c.title for c in persisted],
                "deleted": deleted,
            }
            return self.last_run


# Global scheduler service instance
scheduler_service = SchedulerService()

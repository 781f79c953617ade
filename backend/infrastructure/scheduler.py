"""
Background scheduler for periodic maintenance.

Jobs:
- Reload the code lookup table so edits to the spreadsheet show up without a restart
- Drop expired profile cache entries and finished digest tasks
"""

import logging
from typing import TYPE_CHECKING

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from infrastructure.cache import get_cache
from infrastructure.sheets import SheetsCodeTable

if TYPE_CHECKING:
    from orchestration import SummarizeOrchestrator

logger = logging.getLogger("BackgroundScheduler")

logging.getLogger("apscheduler.scheduler").setLevel(logging.ERROR)


class BackgroundScheduler:
    """Owns the APScheduler instance and the maintenance jobs."""

    def __init__(
        self,
        code_table: SheetsCodeTable,
        summarize_orchestrator: "SummarizeOrchestrator",
        code_table_refresh_minutes: int = 30,
    ):
        self.scheduler = AsyncIOScheduler()
        self.code_table = code_table
        self.summarize_orchestrator = summarize_orchestrator
        self.code_table_refresh_minutes = code_table_refresh_minutes
        self.is_running = False

    def start(self):
        """Start the background scheduler."""
        if self.is_running:
            return

        if self.code_table.configured and self.code_table_refresh_minutes > 0:
            self.scheduler.add_job(
                self._refresh_code_table,
                "interval",
                minutes=self.code_table_refresh_minutes,
                id="refresh_code_table",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )

        self.scheduler.add_job(self._cleanup, "interval", minutes=5, id="cleanup", replace_existing=True)

        self.scheduler.start()
        self.is_running = True
        logger.info(
            f"🚀 Background scheduler started - code table refresh every {self.code_table_refresh_minutes} min, "
            "cleanup every 5 minutes"
        )

    def stop(self):
        """Stop the background scheduler."""
        if self.is_running:
            self.scheduler.shutdown()
            self.is_running = False
            logger.info("🛑 Background scheduler stopped")

    async def _refresh_code_table(self):
        try:
            await self.code_table.refresh()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Scheduled code table refresh failed: {e}")

    async def _cleanup(self):
        cache = get_cache()
        cache.cleanup_expired()
        cache.log_stats()
        self.summarize_orchestrator.cleanup_finished_tasks()

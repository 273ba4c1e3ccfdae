import asyncio
import sys
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.article_aggregator.services.aggregator_service import NewsAggregatorService
from src.core.logging import shutdown_logging
from src.utils.config import settings
from src.utils.logger.custom_logging import LoggerMixin

logger = LoggerMixin().logger


class FetchNewsJob:
    """
    Periodic full refresh of the article store

    Each run calls fetch_all() once; per-provider failures are only logged.
    """

    def __init__(
        self,
        aggregator: Optional[NewsAggregatorService] = None,
        interval_minutes: Optional[int] = None,
    ):
        self.aggregator = aggregator
        self.interval_minutes = interval_minutes or settings.FETCH_INTERVAL_MINUTES
        self.scheduler = AsyncIOScheduler()
        self.job_id = "fetch_news_articles"

    def _get_aggregator(self) -> NewsAggregatorService:
        if self.aggregator is None:
            self.aggregator = NewsAggregatorService()
        return self.aggregator

    async def run(self) -> bool:
        """Execute one refresh; returns True when every source was updated"""
        logger.info(f"Fetching news articles... ({datetime.now(timezone.utc).isoformat()})")

        success = await self._get_aggregator().fetch_all()
        if success:
            logger.info("News articles updated successfully.")
        else:
            logger.error("Failed to fetch some news sources.")
        return success

    def start(self):
        """Schedule run() every interval_minutes on the running event loop"""
        self.scheduler.add_job(
            self.run,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=self.job_id,
            name="Fetch news articles",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        self.scheduler.start()
        logger.info(f"Fetch job scheduled every {self.interval_minutes} minutes")

    async def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        if self.aggregator is not None:
            await self.aggregator.close()


async def _run_once() -> int:
    job = FetchNewsJob()
    try:
        success = await job.run()
    finally:
        await job.shutdown()
        shutdown_logging()
    return 0 if success else 1


def main() -> None:
    """news-fetch: one-shot refresh, exit code 0 only when every source succeeded"""
    sys.exit(asyncio.run(_run_once()))


if __name__ == "__main__":
    main()

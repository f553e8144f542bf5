"""
Pipeline - Retry Scheduler

Periodic sweep that resubmits failed jobs with exponential backoff until
their retry budget is spent.
"""

import asyncio
import contextlib
import logging
from datetime import datetime
from typing import Optional

from seo_server.config import get_settings
from seo_server.pipeline.analysis_service import AnalysisPipeline
from seo_server.pipeline.work_queue import AnalysisQueue
from seo_server.schemas import utcnow

logger = logging.getLogger(__name__)


class RetryScheduler:
    """
    Background sweep over failed jobs.

    A job failed at retry_count = k is resubmitted only once 2^k seconds have
    passed since its last update; jobs with retry_count >= max_retries are
    never picked up again.
    """

    def __init__(self, pipeline: AnalysisPipeline, queue: AnalysisQueue, settings=None):
        self.settings = settings or get_settings()
        self.pipeline = pipeline
        self.queue = queue
        self.max_retries = self.settings.pipeline.max_retries
        self.interval_seconds = self.settings.pipeline.sweep_interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._running = False

    async def sweep(self, now: Optional[datetime] = None) -> dict:
        """
        Re-enqueue every failed job whose backoff has elapsed.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            Statistics dict
        """
        now = now or utcnow()
        stats = {"eligible": 0, "requeued": 0, "deferred": 0}

        jobs = await self.pipeline.job_store.retryable(self.max_retries)
        stats["eligible"] = len(jobs)

        for job in jobs:
            waited = (now - job.updated_at).total_seconds()
            if waited < job.retry_delay_seconds():
                stats["deferred"] += 1
                continue

            if await self.pipeline.reset_for_retry(job.id) is None:
                continue

            self.queue.enqueue(job.id)
            stats["requeued"] += 1

        if stats["eligible"]:
            logger.info(f"Retry sweep: {stats}")
        return stats

    async def run_continuous(self, interval_seconds: Optional[int] = None):
        """Sweep on a fixed interval until stopped."""
        interval_seconds = interval_seconds or self.interval_seconds
        self._running = True
        logger.info(f"Starting retry scheduler (every {interval_seconds}s)")

        while self._running:
            try:
                await self.sweep()
            except Exception as e:
                logger.error(f"Retry sweep error: {e}")
            await asyncio.sleep(interval_seconds)

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self.run_continuous(), name="retry-scheduler")

    async def stop(self) -> None:
        """Stop the continuous sweep."""
        self._running = False
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

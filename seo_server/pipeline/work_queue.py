"""
Pipeline - Work Queue

Single-consumer FIFO: at most one analysis runs at a time, enqueue never blocks.
"""

import asyncio
import contextlib
import logging
from typing import Optional

from seo_server.errors import JobNotFoundError
from seo_server.pipeline.analysis_service import AnalysisPipeline
from seo_server.schemas import JobStatus

logger = logging.getLogger(__name__)


class AnalysisQueue:
    """
    In-memory job queue drained by one worker task.

    One worker is the serialization policy: no two `process` calls overlap,
    which keeps load on the content analyzer predictable and needs no locking
    around job updates.
    """

    def __init__(self, pipeline: AnalysisPipeline):
        self.pipeline = pipeline
        self._queue: asyncio.Queue = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self.active_job: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker on the running event loop."""
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._drain(), name="analysis-queue-worker")
        logger.info("Analysis queue worker started")

    def enqueue(self, job_id: int) -> None:
        """Append a job id; the worker picks it up when idle."""
        self._queue.put_nowait(job_id)

    async def join(self) -> None:
        """Wait until every enqueued job has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        logger.info("Analysis queue worker stopped")

    async def _drain(self) -> None:
        while True:
            job_id = await self._queue.get()
            self.active_job = job_id
            try:
                await self._run(job_id)
            finally:
                self.active_job = None
                self._queue.task_done()

    async def _run(self, job_id: int) -> None:
        try:
            job = await self.pipeline.process(job_id)
        except JobNotFoundError as e:
            logger.warning(str(e))
            return
        except Exception as e:
            logger.exception(f"✗ Analysis job {job_id} crashed: {e}")
            return

        if job is None:
            return
        if job.status == JobStatus.COMPLETED:
            logger.info(f"✓ Analysis job {job_id} completed in {job.processing_time_ms}ms")
        else:
            logger.info(f"✗ Analysis job {job_id} failed: {job.error_message}")

"""
Pipeline - Analysis Service

Job state machine: pending → processing → completed | failed.
Turns a captured page into Schema.org JSON-LD and publishes it to the edge cache.
"""

import asyncio
import json
import logging
import time
from typing import List, Optional
from urllib.parse import urlparse

from seo_server.config import get_settings
from seo_server.errors import DomainNotFoundError, JobNotFoundError
from seo_server.llm.base_provider import BaseAnalyzerProvider
from seo_server.pipeline.text_extractor import TextExtractor
from seo_server.schemas import AnalysisJob, JobStats, JobStatus, utcnow
from seo_server.services.edge_cache import EdgeCache
from seo_server.storage import DomainStore, JobStore

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Creates analysis jobs and drives them to a terminal state."""

    def __init__(
        self,
        job_store: JobStore,
        domain_store: DomainStore,
        analyzer: BaseAnalyzerProvider,
        edge_cache: EdgeCache,
        settings=None,
    ):
        self.settings = settings or get_settings()
        self.job_store = job_store
        self.domain_store = domain_store
        self.analyzer = analyzer
        self.edge_cache = edge_cache
        self.extractor = TextExtractor(self.settings.pipeline.max_content_chars)
        self.max_retries = self.settings.pipeline.max_retries
        self.analyzer_timeout = self.settings.llm.timeout_ms / 1000
        self.cache_timeout = self.settings.cache.timeout_ms / 1000

    async def submit(
        self,
        url: str,
        html_content: Optional[str],
        domain_id: Optional[int] = None,
    ) -> AnalysisJob:
        """
        Persist a new pending job for a page.

        Args:
            url: Absolute page URL
            html_content: Page body captured at the edge
            domain_id: Owning domain; resolved from the URL host when omitted

        Returns:
            The created job

        Raises:
            DomainNotFoundError: if the owning domain cannot be resolved
        """
        if domain_id is None:
            hostname = urlparse(url).hostname
            domain = await self.domain_store.get_by_hostname(hostname) if hostname else None
        else:
            domain = await self.domain_store.get(domain_id)

        if domain is None:
            raise DomainNotFoundError(url)

        limit = self.settings.pipeline.max_stored_html_chars
        if html_content and len(html_content) > limit:
            html_content = html_content[:limit]

        job = await self.job_store.create(domain.id, url, html_content)
        logger.info(f"Created analysis job {job.id} for {url}")
        return job

    async def process(self, job_id: int) -> Optional[AnalysisJob]:
        """
        Run one analysis attempt.

        Jobs that are not pending are left untouched, so duplicate dispatch
        from the queue and the retry sweep is harmless.

        Returns:
            The job in its terminal state, or None if nothing was done

        Raises:
            JobNotFoundError: if the job does not exist
        """
        start = time.monotonic()

        job = await self.job_store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        if job.status != JobStatus.PENDING:
            logger.debug(f"Job {job_id} is {job.status.value}, skipping")
            return None

        job = await self.job_store.update(job_id, status=JobStatus.PROCESSING)

        try:
            content = self.extractor.extract(job.html_content or "")
            result = await asyncio.wait_for(
                self.analyzer.generate(content, job.url),
                timeout=self.analyzer_timeout,
            )
        except asyncio.TimeoutError:
            return await self._fail(
                job, f"Analyzer timed out after {self.analyzer_timeout:g}s", start
            )
        except asyncio.CancelledError:
            # Counted as a failed attempt so the retry sweep can pick it up again
            await self._fail(job, "Analysis interrupted by worker shutdown", start)
            raise
        except Exception as e:
            return await self._fail(job, str(e) or type(e).__name__, start)

        job = await self.job_store.update(
            job_id,
            status=JobStatus.COMPLETED,
            generated_metadata=result.metadata,
            error_message=None,
            processing_time_ms=self._elapsed_ms(start),
        )

        await self.domain_store.increment_analyzed_count(job.domain_id)
        await self.domain_store.set_last_analyzed(job.domain_id, utcnow())

        await self._publish(job.url, result.metadata)

        return job

    async def reset_for_retry(self, job_id: int) -> Optional[AnalysisJob]:
        """Move a retryable failed job back to pending; None if it no longer qualifies."""
        job = await self.job_store.get(job_id)
        if job is None or not job.can_retry(self.max_retries):
            return None
        return await self.job_store.update(
            job_id, status=JobStatus.PENDING, error_message=None
        )

    async def get_job(self, job_id: int) -> Optional[AnalysisJob]:
        return await self.job_store.get(job_id)

    async def recent_jobs(self, domain_id: int, limit: int = 10) -> List[AnalysisJob]:
        return await self.job_store.recent_by_domain(domain_id, limit)

    async def get_job_stats(self, domain_id: int) -> JobStats:
        """Aggregate job counts and average processing time for a domain."""
        jobs = await self.job_store.list_by_domain(domain_id)

        stats = JobStats(total=len(jobs))
        total_time = 0
        timed = 0

        for job in jobs:
            field = job.status.value
            setattr(stats, field, getattr(stats, field) + 1)

            if job.status == JobStatus.COMPLETED and job.processing_time_ms:
                total_time += job.processing_time_ms
                timed += 1

        if timed:
            stats.average_processing_time_ms = round(total_time / timed)

        return stats

    async def _fail(self, job: AnalysisJob, message: str, start: float) -> AnalysisJob:
        retry_count = job.retry_count + 1

        job = await self.job_store.update(
            job.id,
            status=JobStatus.FAILED,
            generated_metadata=None,
            error_message=message,
            processing_time_ms=self._elapsed_ms(start),
            retry_count=retry_count,
        )

        if retry_count >= self.max_retries:
            logger.error(f"Job {job.id} permanently failed after {retry_count} attempts: {message}")
        else:
            logger.warning(f"Job {job.id} failed (attempt {retry_count}/{self.max_retries}): {message}")

        return job

    async def _publish(self, url: str, metadata: dict) -> None:
        """Best-effort edge cache population."""
        value = json.dumps(metadata, separators=(",", ":"), ensure_ascii=False)
        try:
            await asyncio.wait_for(self.edge_cache.put(url, value), timeout=self.cache_timeout)
        except Exception as e:
            logger.warning(f"Could not publish JSON-LD for {url} to edge cache: {e}")

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)

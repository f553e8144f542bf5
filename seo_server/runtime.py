"""
SEO Edge Server - Runtime

Composition root: wires stores, cache, analyzer, pipeline, queue, and
retry scheduler once per process.
"""

import logging
from typing import Optional

from seo_server.config import get_settings
from seo_server.llm import BaseAnalyzerProvider, get_provider
from seo_server.pipeline import AnalysisPipeline, AnalysisQueue, RetryScheduler
from seo_server.schemas import AnalysisJob
from seo_server.services import EdgeCache, get_edge_cache
from seo_server.storage import DomainStore, InMemoryDomainStore, InMemoryJobStore, JobStore

logger = logging.getLogger(__name__)


class Runtime:
    """Long-lived pipeline components shared by every surface of the server."""

    def __init__(
        self,
        settings=None,
        job_store: Optional[JobStore] = None,
        domain_store: Optional[DomainStore] = None,
        edge_cache: Optional[EdgeCache] = None,
        analyzer: Optional[BaseAnalyzerProvider] = None,
    ):
        self.settings = settings or get_settings()
        self.job_store = job_store or InMemoryJobStore()
        self.domain_store = domain_store or self._seeded_domain_store()
        self.edge_cache = edge_cache or get_edge_cache(self.settings)
        self.analyzer = analyzer or get_provider(self.settings)

        if not self.analyzer.is_configured():
            logger.warning(
                f"LLM provider '{self.analyzer.provider_name()}' has no credentials; "
                "analysis jobs will fail"
            )

        self.pipeline = AnalysisPipeline(
            self.job_store,
            self.domain_store,
            self.analyzer,
            self.edge_cache,
            self.settings,
        )
        self.queue = AnalysisQueue(self.pipeline)
        self.scheduler = RetryScheduler(self.pipeline, self.queue, self.settings)

    def _seeded_domain_store(self) -> InMemoryDomainStore:
        store = InMemoryDomainStore()
        for name in self.settings.pipeline.domain_names:
            store.add(name)
        return store

    async def submit(
        self,
        url: str,
        html_content: Optional[str],
        domain_id: Optional[int] = None,
    ) -> AnalysisJob:
        """Create a job and hand it to the worker without waiting for it."""
        job = await self.pipeline.submit(url, html_content, domain_id)
        self.queue.enqueue(job.id)
        return job

    async def start(self) -> None:
        self.queue.start()
        self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()
        await self.queue.stop()


_runtime: Optional[Runtime] = None


def get_runtime(settings=None) -> Runtime:
    """Process-wide runtime, built on first use."""
    global _runtime
    if _runtime is None:
        _runtime = Runtime(settings)
    return _runtime


def set_runtime(runtime: Optional[Runtime]) -> None:
    global _runtime
    _runtime = runtime

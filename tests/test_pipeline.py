"""
Unit Tests for Pipeline Module
"""

import asyncio
import json
from datetime import timedelta

import pytest
from unittest.mock import AsyncMock

from seo_server.errors import AnalyzerError, DomainNotFoundError, JobNotFoundError
from seo_server.pipeline.text_extractor import TextExtractor
from seo_server.schemas import JobStatus, utcnow

from conftest import WEB_PAGE, StubAnalyzer, make_runtime, make_settings

PAGE_URL = "https://example.com/a"
PAGE_HTML = "<html><head></head><body>Hello</body></html>"


class TestTextExtractor:
    """Tests for TextExtractor."""

    def test_strips_tags_and_collapses_whitespace(self):
        extractor = TextExtractor()
        html = "<h1>Title</h1>\n\n<p>Hello   <b>world</b></p>"

        assert extractor.extract(html) == "Title Hello world"

    def test_drops_scripts_and_styles(self):
        extractor = TextExtractor()
        html = (
            "<head><style>body { color: red }</style>"
            "<script>var secret = 1;</script></head>"
            "<body><noscript>enable js</noscript><p>Visible</p></body>"
        )

        assert extractor.extract(html) == "Visible"

    def test_truncates_to_max_chars(self):
        extractor = TextExtractor(max_chars=10)

        result = extractor.extract("<p>" + "word " * 100 + "</p>")

        assert len(result) == 10

    def test_empty_input(self):
        assert TextExtractor().extract("") == ""


class TestSubmit:
    """Tests for AnalysisPipeline.submit."""

    @pytest.mark.asyncio
    async def test_resolves_domain_from_host(self, runtime):
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        domain = await runtime.domain_store.get_by_hostname("example.com")
        assert job.domain_id == domain.id
        assert job.status == JobStatus.PENDING
        assert job.retry_count == 0
        assert job.generated_metadata is None
        assert job.error_message is None

    @pytest.mark.asyncio
    async def test_unknown_domain_never_creates_job(self, runtime):
        with pytest.raises(DomainNotFoundError):
            await runtime.pipeline.submit("https://unknown.test/page", PAGE_HTML)

        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)
        assert job.id == 1

    @pytest.mark.asyncio
    async def test_explicit_domain_id_must_exist(self, runtime):
        with pytest.raises(DomainNotFoundError):
            await runtime.pipeline.submit(PAGE_URL, PAGE_HTML, domain_id=999)

        domain = await runtime.domain_store.get_by_hostname("shop.example.org")
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML, domain_id=domain.id)
        assert job.domain_id == domain.id

    @pytest.mark.asyncio
    async def test_truncates_stored_html(self, analyzer):
        runtime = make_runtime(analyzer, make_settings(max_stored_html_chars=20))

        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        assert job.html_content == PAGE_HTML[:20]


class TestProcess:
    """Tests for AnalysisPipeline.process."""

    @pytest.mark.asyncio
    async def test_completed_job_populates_cache_and_counters(self, runtime, analyzer):
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        result = await runtime.pipeline.process(job.id)

        assert result.status == JobStatus.COMPLETED
        assert result.generated_metadata == WEB_PAGE
        assert result.error_message is None
        assert result.processing_time_ms is not None

        domain = await runtime.domain_store.get(job.domain_id)
        assert domain.pages_analyzed == 1
        assert domain.last_analyzed is not None

        cached = await runtime.edge_cache.get(PAGE_URL)
        assert json.loads(cached) == WEB_PAGE

        assert "Content: Hello" in analyzer.prompts[0]
        assert f"URL: {PAGE_URL}" in analyzer.prompts[0]

    @pytest.mark.asyncio
    async def test_second_process_is_noop(self, runtime, analyzer):
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        await runtime.pipeline.process(job.id)
        second = await runtime.pipeline.process(job.id)

        assert second is None
        assert len(analyzer.prompts) == 1
        domain = await runtime.domain_store.get(job.domain_id)
        assert domain.pages_analyzed == 1

    @pytest.mark.asyncio
    async def test_unknown_job_raises(self, runtime):
        with pytest.raises(JobNotFoundError):
            await runtime.pipeline.process(42)

    @pytest.mark.asyncio
    async def test_analyzer_error_fails_job(self):
        analyzer = StubAnalyzer(error=AnalyzerError("upstream 503"))
        runtime = make_runtime(analyzer)
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        result = await runtime.pipeline.process(job.id)

        assert result.status == JobStatus.FAILED
        assert result.retry_count == 1
        assert result.error_message == "upstream 503"
        assert result.generated_metadata is None
        assert await runtime.edge_cache.get(PAGE_URL) is None
        domain = await runtime.domain_store.get(job.domain_id)
        assert domain.pages_analyzed == 0

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self):
        analyzer = StubAnalyzer(delay=1.0)
        runtime = make_runtime(analyzer, make_settings(timeout_ms=20))
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        result = await runtime.pipeline.process(job.id)

        assert result.status == JobStatus.FAILED
        assert result.retry_count == 1
        assert "timed out" in result.error_message

    @pytest.mark.asyncio
    async def test_missing_configuration_fails_job(self):
        runtime = make_runtime(StubAnalyzer(configured=False))
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        result = await runtime.pipeline.process(job.id)

        assert result.status == JobStatus.FAILED
        assert result.retry_count == 1
        assert result.error_message == "LLM provider not configured: stub"

    @pytest.mark.asyncio
    async def test_metadata_without_type_is_rejected(self):
        runtime = make_runtime(StubAnalyzer(metadata={"@context": "https://schema.org"}))
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        result = await runtime.pipeline.process(job.id)

        assert result.status == JobStatus.FAILED
        assert result.error_message == "Invalid Schema.org structure"

    @pytest.mark.asyncio
    async def test_cache_publish_failure_keeps_job_completed(self, analyzer):
        cache = AsyncMock()
        cache.put.side_effect = ConnectionError("kv unavailable")
        runtime = make_runtime(analyzer, edge_cache=cache)
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)

        result = await runtime.pipeline.process(job.id)

        assert result.status == JobStatus.COMPLETED
        cache.put.assert_awaited_once()


class TestJobStats:
    """Tests for per-domain statistics."""

    @pytest.mark.asyncio
    async def test_counts_and_average(self, runtime):
        done = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)
        await runtime.pipeline.submit("https://example.com/b", PAGE_HTML)
        await runtime.job_store.update(done.id, status=JobStatus.COMPLETED, processing_time_ms=300)

        stats = await runtime.pipeline.get_job_stats(done.domain_id)

        assert stats.total == 2
        assert stats.completed == 1
        assert stats.pending == 1
        assert stats.failed == 0
        assert stats.average_processing_time_ms == 300

    @pytest.mark.asyncio
    async def test_recent_jobs_newest_first(self, runtime):
        first = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)
        second = await runtime.pipeline.submit("https://example.com/b", PAGE_HTML)

        jobs = await runtime.pipeline.recent_jobs(first.domain_id, limit=1)

        assert [j.id for j in jobs] == [second.id]


class TestAnalysisQueue:
    """Tests for the single-worker queue."""

    @pytest.mark.asyncio
    async def test_processes_one_job_at_a_time(self):
        analyzer = StubAnalyzer(delay=0.02)
        runtime = make_runtime(analyzer)
        runtime.queue.start()
        try:
            for i in range(5):
                await runtime.submit(f"https://example.com/p{i}", PAGE_HTML)
            await runtime.queue.join()
        finally:
            await runtime.queue.stop()

        assert analyzer.max_active == 1
        stats = await runtime.pipeline.get_job_stats(1)
        assert stats.completed == 5

    @pytest.mark.asyncio
    async def test_enqueue_does_not_block(self, runtime):
        job = await runtime.submit(PAGE_URL, PAGE_HTML)

        assert runtime.queue.pending_count == 1
        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.PENDING

    @pytest.mark.asyncio
    async def test_worker_survives_unknown_job(self, runtime):
        runtime.queue.start()
        try:
            runtime.queue.enqueue(999)
            job = await runtime.submit(PAGE_URL, PAGE_HTML)
            await runtime.queue.join()
        finally:
            await runtime.queue.stop()

        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_duplicate_submissions_keep_counters_consistent(self, runtime):
        runtime.queue.start()
        try:
            await asyncio.gather(
                runtime.submit(PAGE_URL, PAGE_HTML),
                runtime.submit(PAGE_URL, PAGE_HTML),
            )
            await runtime.queue.join()
        finally:
            await runtime.queue.stop()

        jobs = await runtime.job_store.list_by_domain(1)
        completed = [j for j in jobs if j.status == JobStatus.COMPLETED]
        domain = await runtime.domain_store.get(1)
        assert domain.pages_analyzed == len(completed)
        assert {j.url for j in completed} == {PAGE_URL}

    @pytest.mark.asyncio
    async def test_stop_mid_analysis_leaves_job_retryable(self):
        analyzer = StubAnalyzer(delay=5.0)
        runtime = make_runtime(analyzer, make_settings(timeout_ms=10000))

        runtime.queue.start()
        job = await runtime.submit(PAGE_URL, PAGE_HTML)
        await asyncio.sleep(0.1)
        assert runtime.queue.active_job == job.id
        await runtime.queue.stop()

        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.FAILED
        assert stored.retry_count == 1
        assert "interrupted" in stored.error_message
        assert runtime.queue.active_job is None

        stats = await runtime.scheduler.sweep(now=utcnow() + timedelta(minutes=1))
        assert stats["requeued"] == 1


class TestRetryScheduler:
    """Tests for the retry sweep."""

    async def _failed_job(self, runtime, retry_count, updated_at):
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)
        return await runtime.job_store.update(
            job.id,
            status=JobStatus.FAILED,
            error_message="boom",
            retry_count=retry_count,
            updated_at=updated_at,
        )

    @pytest.mark.asyncio
    async def test_waits_exponential_backoff(self, runtime):
        t0 = utcnow()
        job = await self._failed_job(runtime, retry_count=2, updated_at=t0)

        early = await runtime.scheduler.sweep(now=t0 + timedelta(seconds=3))
        assert early["deferred"] == 1
        assert runtime.queue.pending_count == 0

        due = await runtime.scheduler.sweep(now=t0 + timedelta(seconds=4))
        assert due["requeued"] == 1
        assert runtime.queue.pending_count == 1

        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.PENDING
        assert stored.error_message is None
        assert stored.retry_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_jobs_are_excluded(self, runtime):
        t0 = utcnow()
        job = await self._failed_job(runtime, retry_count=3, updated_at=t0)

        stats = await runtime.scheduler.sweep(now=t0 + timedelta(days=1))

        assert stats == {"eligible": 0, "requeued": 0, "deferred": 0}
        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.FAILED

    @pytest.mark.asyncio
    async def test_always_timing_out_job_saturates_at_max_retries(self):
        analyzer = StubAnalyzer(delay=1.0)
        runtime = make_runtime(analyzer, make_settings(timeout_ms=10))
        later = utcnow() + timedelta(hours=1)

        runtime.queue.start()
        try:
            job = await runtime.submit(PAGE_URL, PAGE_HTML)
            await runtime.queue.join()

            for _ in range(3):
                await runtime.scheduler.sweep(now=later)
                await runtime.queue.join()
        finally:
            await runtime.queue.stop()

        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.FAILED
        assert stored.retry_count == 3
        assert len(analyzer.prompts) == 3

        final = await runtime.scheduler.sweep(now=later + timedelta(days=1))
        assert final["eligible"] == 0

    @pytest.mark.asyncio
    async def test_retry_recovers_transient_failure(self):
        analyzer = StubAnalyzer(error=AnalyzerError("flaky"))
        runtime = make_runtime(analyzer)
        job = await runtime.pipeline.submit(PAGE_URL, PAGE_HTML)
        await runtime.pipeline.process(job.id)

        analyzer.error = None
        await runtime.scheduler.sweep(now=utcnow() + timedelta(minutes=1))
        runtime.queue.start()
        try:
            await runtime.queue.join()
        finally:
            await runtime.queue.stop()

        stored = await runtime.pipeline.get_job(job.id)
        assert stored.status == JobStatus.COMPLETED
        assert stored.error_message is None
        assert stored.retry_count == 1

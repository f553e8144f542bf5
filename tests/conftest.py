"""
Shared fixtures: settings, a scriptable content analyzer, and a runtime.
"""

import asyncio
import json

import pytest

from seo_server.config import (
    CacheSettings,
    EdgeSettings,
    LLMSettings,
    PipelineSettings,
    Settings,
)
from seo_server.llm.base_provider import BaseAnalyzerProvider
from seo_server.runtime import Runtime
from seo_server.services.edge_cache import MemoryEdgeCache

WEB_PAGE = {"@context": "https://schema.org", "@type": "WebPage"}


class StubAnalyzer(BaseAnalyzerProvider):
    """Analyzer returning canned JSON-LD; tracks calls and concurrency."""

    confidence = 0.9

    def __init__(self, metadata=None, error=None, delay=0.0, configured=True):
        self.metadata = metadata if metadata is not None else dict(WEB_PAGE)
        self.error = error
        self.delay = delay
        self.configured = configured
        self.prompts = []
        self.active = 0
        self.max_active = 0

    async def request_completion(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            return json.dumps(self.metadata)
        finally:
            self.active -= 1

    def provider_name(self) -> str:
        return "stub"

    def is_configured(self) -> bool:
        return self.configured


def make_settings(
    timeout_ms: int = 2000,
    inflight_ttl_seconds: int = 0,
    max_stored_html_chars: int = 500000,
    **llm,
) -> Settings:
    return Settings(
        llm=LLMSettings(timeout_ms=timeout_ms, **llm),
        pipeline=PipelineSettings(
            registered_domains="example.com, shop.example.org",
            max_stored_html_chars=max_stored_html_chars,
        ),
        cache=CacheSettings(backend="memory", timeout_ms=500),
        edge=EdgeSettings(
            origin_url="http://origin.test",
            backend_api_url="",
            inflight_ttl_seconds=inflight_ttl_seconds,
        ),
    )


def make_runtime(analyzer=None, settings=None, edge_cache=None) -> Runtime:
    settings = settings or make_settings()
    return Runtime(
        settings,
        analyzer=analyzer or StubAnalyzer(),
        edge_cache=edge_cache or MemoryEdgeCache(settings),
    )


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def analyzer():
    return StubAnalyzer()


@pytest.fixture
def runtime(analyzer, settings):
    return make_runtime(analyzer, settings)

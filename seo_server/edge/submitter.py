"""
Edge - Job Submitters

Clients the edge uses to hand a cache miss to the analysis pipeline.
"""

from abc import ABC, abstractmethod

import httpx

from seo_server.config import get_settings


class JobSubmitter(ABC):
    """Submission side of the job API."""

    @abstractmethod
    async def submit(self, url: str, html_content: str) -> None:
        pass


class HttpJobSubmitter(JobSubmitter):
    """POSTs to the backend's /api/v1/jobs/analyze endpoint."""

    def __init__(self, settings=None, transport: httpx.AsyncBaseTransport = None):
        self.settings = settings or get_settings()
        self.endpoint = f"{self.settings.edge.backend_api_url.rstrip('/')}/api/v1/jobs/analyze"
        self.api_key = self.settings.server.worker_api_key
        self.timeout = self.settings.edge.submit_timeout_ms / 1000
        self._transport = transport

    async def submit(self, url: str, html_content: str) -> None:
        headers = {"X-API-Key": self.api_key}
        payload = {"url": url, "htmlContent": html_content}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.endpoint, json=payload, headers=headers)
            response.raise_for_status()


class LocalJobSubmitter(JobSubmitter):
    """Submits straight into an in-process runtime."""

    def __init__(self, runtime):
        self.runtime = runtime

    async def submit(self, url: str, html_content: str) -> None:
        await self.runtime.submit(url, html_content)

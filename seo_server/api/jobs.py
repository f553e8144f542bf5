"""
API - Job Routes

Job submission boundary (called by the edge) and reporting endpoints.
"""

import hmac
import json
import logging
from typing import Callable, List, Tuple

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from seo_server.errors import DomainNotFoundError
from seo_server.runtime import Runtime
from seo_server.schemas import AnalyzeAccepted, AnalyzeRequest

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 100


class JobRoutes:
    """Starlette endpoints bound to one runtime."""

    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    def routes(self) -> List[Tuple[str, List[str], Callable]]:
        """(path, methods, endpoint) triples for registration."""
        return [
            ("/health", ["GET"], self.health),
            ("/api/v1/jobs/analyze", ["POST"], self.analyze),
            ("/api/v1/jobs/{job_id:int}", ["GET"], self.get_job),
            ("/api/v1/domains/{domain_id:int}/stats", ["GET"], self.domain_stats),
            ("/api/v1/domains/{domain_id:int}/jobs", ["GET"], self.recent_jobs),
        ]

    async def health(self, request: Request) -> JSONResponse:
        return JSONResponse({
            "ok": True,
            "provider": self.runtime.analyzer.provider_name(),
            "providerConfigured": self.runtime.analyzer.is_configured(),
            "queued": self.runtime.queue.pending_count,
            "activeJob": self.runtime.queue.active_job,
        })

    async def analyze(self, request: Request) -> JSONResponse:
        """
        Accept a page for background analysis.

        Returns 202 with the job id; the job itself runs on the queue worker.
        """
        api_key = request.headers.get("x-api-key", "")
        expected = self.runtime.settings.server.worker_api_key
        # Header values arrive latin-1 decoded; compare_digest only takes ASCII str
        if not hmac.compare_digest(api_key.encode("latin-1"), expected.encode("utf-8")):
            return JSONResponse({"message": "Invalid API key"}, status_code=401)

        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse({"message": "Request body must be JSON"}, status_code=400)

        try:
            data = AnalyzeRequest.model_validate(payload)
        except ValidationError as e:
            return JSONResponse(
                {"message": "Invalid analysis request", "errors": json.loads(e.json(include_url=False))},
                status_code=422,
            )

        try:
            job = await self.runtime.submit(data.url, data.html_content, data.domain_id)
        except DomainNotFoundError as e:
            logger.info(f"Rejected analysis request: {e}")
            return JSONResponse({"message": str(e)}, status_code=404)

        accepted = AnalyzeAccepted(job_id=job.id)
        return JSONResponse(accepted.model_dump(by_alias=True), status_code=202)

    async def get_job(self, request: Request) -> JSONResponse:
        job_id = request.path_params["job_id"]
        job = await self.runtime.pipeline.get_job(job_id)
        if job is None:
            return JSONResponse({"message": "Job not found"}, status_code=404)
        return JSONResponse(job.to_public())

    async def domain_stats(self, request: Request) -> JSONResponse:
        domain_id = request.path_params["domain_id"]
        domain = await self.runtime.domain_store.get(domain_id)
        if domain is None:
            return JSONResponse({"message": "Domain not found"}, status_code=404)

        stats = await self.runtime.pipeline.get_job_stats(domain_id)
        return JSONResponse({
            "domain": domain.model_dump(mode="json", by_alias=True),
            "stats": stats.model_dump(by_alias=True),
        })

    async def recent_jobs(self, request: Request) -> JSONResponse:
        domain_id = request.path_params["domain_id"]
        try:
            limit = int(request.query_params.get("limit", DEFAULT_RECENT_LIMIT))
        except ValueError:
            return JSONResponse({"message": "limit must be an integer"}, status_code=400)
        limit = max(1, min(limit, MAX_RECENT_LIMIT))

        jobs = await self.runtime.pipeline.recent_jobs(domain_id, limit)
        return JSONResponse({"jobs": [job.to_public() for job in jobs]})

"""
Edge - Interceptor

Cache-aside request policy in front of the origin:
hit → inject cached JSON-LD, miss → serve origin and submit analysis in the
background. Any fault degrades to plain pass-through.
"""

import asyncio
import json
import logging
import threading
from typing import Optional

import httpx
from cachetools import TTLCache
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import Response

from seo_server.config import get_settings
from seo_server.edge.rewriter import inject_json_ld
from seo_server.edge.rules import cache_key, is_eligible, is_html_response
from seo_server.edge.submitter import JobSubmitter
from seo_server.services.edge_cache import EdgeCache

logger = logging.getLogger(__name__)

HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
}

# httpx computes these for the upstream request
DROPPED_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {"host", "content-length", "accept-encoding"}

# Body is re-framed after httpx decodes it
DROPPED_RESPONSE_HEADERS = HOP_BY_HOP_HEADERS | {"content-encoding", "content-length"}


class EdgeInterceptor:
    """Per-request decision logic of the edge proxy."""

    def __init__(
        self,
        cache: EdgeCache,
        submitter: JobSubmitter,
        origin_client: httpx.AsyncClient,
        settings=None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache
        self.submitter = submitter
        self.origin_client = origin_client
        self.origin_url = self.settings.edge.origin_url.rstrip("/")
        self.cache_timeout = self.settings.cache.timeout_ms / 1000

        ttl = self.settings.edge.inflight_ttl_seconds
        self._inflight: Optional[TTLCache] = TTLCache(maxsize=10000, ttl=ttl) if ttl > 0 else None
        self._inflight_lock = threading.Lock()

    async def handle(self, request: Request) -> Response:
        """
        Produce the client response for one inbound request.

        Args:
            request: Inbound request

        Returns:
            Origin response, possibly with JSON-LD injected
        """
        body = await request.body()

        if not is_eligible(request.method, request.url.path):
            return await self._pass_through(request, body)

        key = cache_key(request.url)

        try:
            cached = await asyncio.wait_for(self.cache.get(key), timeout=self.cache_timeout)
        except Exception as e:
            logger.warning(f"Edge cache lookup failed for {key}: {e!r}")
            return await self._pass_through(request, body)

        try:
            origin = await self._fetch_origin(request, body)
        except httpx.HTTPError as e:
            logger.error(f"Origin fetch failed for {key}: {e!r}")
            return Response("Bad Gateway", status_code=502)

        try:
            return self._apply_policy(key, origin, cached, request.method)
        except Exception as e:
            logger.exception(f"Edge policy failed for {key}, passing through: {e!r}")
            return self._build_response(origin, origin.content, request.method)

    def _apply_policy(
        self,
        key: str,
        origin: httpx.Response,
        cached: Optional[str],
        method: str,
    ) -> Response:
        content = origin.content

        if not is_html_response(origin.headers.get("content-type")):
            return self._build_response(origin, content, method)

        if cached is not None:
            return self._build_response(origin, self._rewrite(key, content, cached), method)

        background = None
        if self._claim(key):
            background = BackgroundTask(self._submit_in_background, key, origin.text)

        return self._build_response(origin, content, method, background)

    def _rewrite(self, key: str, content: bytes, cached: str) -> bytes:
        try:
            rewritten = inject_json_ld(content, json.loads(cached))
        except Exception as e:
            logger.warning(f"JSON-LD injection failed for {key}: {e!r}")
            return content

        if rewritten is None:
            logger.debug(f"No </head> in {key}, serving unmodified")
            return content
        return rewritten

    def _claim(self, key: str) -> bool:
        """Reserve the submission slot for a URL; always True when suppression is off."""
        if self._inflight is None:
            return True
        with self._inflight_lock:
            if key in self._inflight:
                return False
            self._inflight[key] = True
            return True

    async def _submit_in_background(self, url: str, html_content: str) -> None:
        try:
            await self.submitter.submit(url, html_content)
            logger.info(f"Queued analysis for {url}")
        except Exception as e:
            logger.error(f"Analysis trigger failed for {url}: {e!r}")

    async def _pass_through(self, request: Request, body: bytes) -> Response:
        try:
            origin = await self._fetch_origin(request, body)
        except httpx.HTTPError as e:
            logger.error(f"Origin fetch failed for {request.url}: {e!r}")
            return Response("Bad Gateway", status_code=502)
        return self._build_response(origin, origin.content, request.method)

    async def _fetch_origin(self, request: Request, body: bytes) -> httpx.Response:
        url = f"{self.origin_url}{request.url.path}"
        if request.url.query:
            url = f"{url}?{request.url.query}"

        headers = [
            (k, v) for k, v in request.headers.items()
            if k.lower() not in DROPPED_REQUEST_HEADERS
        ]
        headers.append(("x-forwarded-host", request.url.netloc))
        headers.append(("x-forwarded-proto", request.url.scheme))

        return await self.origin_client.request(
            request.method,
            url,
            headers=headers,
            content=body or None,
        )

    def _build_response(
        self,
        origin: httpx.Response,
        content: bytes,
        method: str,
        background: Optional[BackgroundTask] = None,
    ) -> Response:
        response = Response(content=content, status_code=origin.status_code, background=background)

        # Raw bytes, so non latin-1 values from the origin pass through untouched
        headers = [
            (k.lower(), v) for k, v in origin.headers.raw
            if k.decode("latin-1").lower() not in DROPPED_RESPONSE_HEADERS
        ]
        if method == "HEAD" and "content-length" in origin.headers:
            headers.append((b"content-length", origin.headers["content-length"].encode("latin-1")))
        elif origin.status_code >= 200 and origin.status_code not in (204, 304):
            headers.append((b"content-length", str(len(content)).encode("latin-1")))

        response.raw_headers = headers
        return response

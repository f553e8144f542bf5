"""
Edge - Proxy Application

Starlette reverse proxy hosting the interceptor, plus its CLI entry point.
"""

import argparse
import contextlib
import logging
from typing import Optional

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.routing import Route

from seo_server.config import get_settings
from seo_server.edge.interceptor import EdgeInterceptor
from seo_server.edge.submitter import HttpJobSubmitter, JobSubmitter, LocalJobSubmitter
from seo_server.services.edge_cache import EdgeCache, get_edge_cache

logger = logging.getLogger(__name__)

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_edge_app(
    settings=None,
    cache: Optional[EdgeCache] = None,
    submitter: Optional[JobSubmitter] = None,
    origin_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Starlette:
    """
    Create the edge proxy.

    Without BACKEND_API_URL the proxy embeds the analysis runtime and submits
    jobs in-process, sharing its edge cache with the pipeline.
    """
    settings = settings or get_settings()
    runtime = None

    if submitter is None:
        if settings.edge.backend_api_url:
            submitter = HttpJobSubmitter(settings)
        else:
            from seo_server.runtime import get_runtime
            runtime = get_runtime(settings)
            submitter = LocalJobSubmitter(runtime)
            cache = cache or runtime.edge_cache

    cache = cache or get_edge_cache(settings)

    origin_client = httpx.AsyncClient(
        timeout=settings.edge.origin_timeout_ms / 1000,
        follow_redirects=False,
        transport=origin_transport,
    )
    interceptor = EdgeInterceptor(cache, submitter, origin_client, settings)

    async def proxy(request: Request):
        return await interceptor.handle(request)

    @contextlib.asynccontextmanager
    async def lifespan(app):
        if runtime is not None:
            await runtime.start()
        try:
            yield
        finally:
            if runtime is not None:
                await runtime.stop()
            await origin_client.aclose()

    app = Starlette(
        routes=[Route("/{path:path}", proxy, methods=PROXY_METHODS)],
        lifespan=lifespan,
    )
    app.state.interceptor = interceptor
    return app


def main():
    """CLI entry point for the edge proxy."""
    import uvicorn

    parser = argparse.ArgumentParser(description="JSON-LD Edge Proxy")
    parser.add_argument(
        "--origin",
        type=str,
        default=None,
        help="Origin base URL (default: from env)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listen port (default: from env)",
    )
    args = parser.parse_args()

    settings = get_settings()
    if args.origin:
        settings.edge.origin_url = args.origin

    logging.basicConfig(level=settings.log.level)

    app = create_edge_app(settings)
    uvicorn.run(app, host=settings.edge.host, port=args.port or settings.edge.port)


if __name__ == "__main__":
    main()

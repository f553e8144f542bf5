"""
SEO Edge Server - Main Entry Point

FastMCP server hosting the job API (custom HTTP routes), the reporting
tools, and the background analysis worker.
"""

import argparse
import contextlib
import logging

from fastmcp import FastMCP

from seo_server.api import JobRoutes
from seo_server.config import get_settings
from seo_server.runtime import get_runtime
from seo_server.tools import register_tools

logger = logging.getLogger(__name__)


def create_app(settings=None) -> FastMCP:
    """Create and configure the backend application."""
    settings = settings or get_settings()
    runtime = get_runtime(settings)

    @contextlib.asynccontextmanager
    async def lifespan(server):
        await runtime.start()
        logger.info(
            f"Analysis worker running with provider '{runtime.analyzer.provider_name()}'"
        )
        try:
            yield
        finally:
            await runtime.stop()

    mcp = FastMCP(
        name="seo-edge",
        instructions="Schema.org JSON-LD analysis jobs for edge-cached pages",
        lifespan=lifespan,
    )

    register_tools(mcp)

    for path, methods, endpoint in JobRoutes(runtime).routes():
        mcp.custom_route(path, methods=methods)(endpoint)

    return mcp


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="SEO Edge Analysis Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "http"],
        default=None,
        help="Transport protocol (default: from env)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for HTTP transports (default: from env)"
    )
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log.level)

    transport = args.transport or settings.server.transport
    port = args.port or settings.server.port

    mcp = create_app(settings)

    if transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport=transport, host=settings.server.host, port=port)


if __name__ == "__main__":
    main()

"""
Tools Module - MCP Tool Implementations

Reporting tools over analysis jobs and domains.
"""

from seo_server.tools.get_analysis_job import get_analysis_job
from seo_server.tools.get_domain_stats import get_domain_stats
from seo_server.tools.get_recent_jobs import get_recent_jobs

__all__ = [
    "get_analysis_job",
    "get_domain_stats",
    "get_recent_jobs",
    "register_tools",
]


def register_tools(mcp) -> None:
    """Register every reporting tool on a FastMCP server."""
    for tool in (get_analysis_job, get_domain_stats, get_recent_jobs):
        mcp.tool()(tool)

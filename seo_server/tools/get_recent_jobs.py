"""
MCP Tool - get_recent_jobs

Most recent analysis jobs for a domain.
"""

from seo_server.runtime import get_runtime


async def get_recent_jobs(domain_id: int, limit: int = 10) -> dict:
    """
    List the latest analysis jobs for a domain, newest first.

    Args:
        domain_id: Domain ID
        limit: Maximum jobs (1-100, default 10)

    Returns:
        Jobs with URL, status, and outcome
    """
    jobs = await get_runtime().pipeline.recent_jobs(domain_id, max(1, min(limit, 100)))

    return {
        "jobs": [job.to_public() for job in jobs],
        "count": len(jobs),
    }

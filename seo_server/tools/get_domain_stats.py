"""
MCP Tool - get_domain_stats

Job statistics for a domain.
"""

from seo_server.runtime import get_runtime


async def get_domain_stats(domain_id: int) -> dict:
    """
    Summarize analysis activity for a domain.

    Args:
        domain_id: Domain ID

    Returns:
        Pages analyzed, last analysis time, and per-status job counts
    """
    runtime = get_runtime()

    domain = await runtime.domain_store.get(domain_id)
    if not domain:
        return {"error": f"Domain {domain_id} not found"}

    stats = await runtime.pipeline.get_job_stats(domain_id)

    return {
        "domain": domain.model_dump(mode="json", by_alias=True),
        "stats": stats.model_dump(by_alias=True),
    }

"""
MCP Tool - get_analysis_job

Inspect one analysis job.
"""

from seo_server.runtime import get_runtime


async def get_analysis_job(job_id: int) -> dict:
    """
    Get the state of an analysis job.

    Args:
        job_id: Analysis job ID

    Returns:
        Job status, generated JSON-LD or error message, retry count, and timings
    """
    job = await get_runtime().pipeline.get_job(job_id)

    if not job:
        return {"error": f"Job {job_id} not found"}

    return job.to_public()

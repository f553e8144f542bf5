"""
Schemas Module - Pydantic Models

Data models for analysis jobs, domains, and analyzer payloads.
"""

from seo_server.schemas.job import AnalysisJob, JobStatus, JobStats, utcnow
from seo_server.schemas.domain import Domain
from seo_server.schemas.analysis import AnalyzeRequest, AnalyzeAccepted, AnalysisResult

__all__ = [
    "AnalysisJob",
    "JobStatus",
    "JobStats",
    "utcnow",
    "Domain",
    "AnalyzeRequest",
    "AnalyzeAccepted",
    "AnalysisResult",
]

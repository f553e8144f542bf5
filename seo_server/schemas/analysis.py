"""
Schemas - Analysis Request/Result Models

Payloads crossing the job submission boundary and the analyzer interface.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AnalyzeRequest(BaseModel):
    """Job submission payload sent by the edge interceptor."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    html_content: str = ""
    domain_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError("url must be an absolute http(s) URL")
        return value


class AnalyzeAccepted(BaseModel):
    """202 response body for an accepted submission."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_id: int
    status: str = "accepted"
    message: str = "Analysis job queued for processing"


class AnalysisResult(BaseModel):
    """Structured metadata returned by a content analyzer."""
    metadata: Dict[str, Any]
    confidence: float = Field(ge=0.0, le=1.0)
    processing_time_ms: int = 0

"""
Schemas - Analysis Job Models

Pydantic models for analysis jobs and their lifecycle.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """Analysis job lifecycle states."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisJob(BaseModel):
    """
    Unit of asynchronous analysis work.

    `generated_metadata` is set only when completed and `error_message` only
    when failed; both are absent while pending or processing.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    domain_id: int
    url: str
    status: JobStatus = JobStatus.PENDING
    html_content: Optional[str] = None
    generated_metadata: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    processing_time_ms: Optional[int] = None
    retry_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def can_retry(self, max_retries: int) -> bool:
        return self.status == JobStatus.FAILED and self.retry_count < max_retries

    def retry_delay_seconds(self) -> int:
        """Exponential backoff before the sweep may resubmit this job."""
        return 2 ** self.retry_count

    def to_public(self) -> Dict[str, Any]:
        """JSON-ready payload without the captured page body."""
        return self.model_dump(mode="json", by_alias=True, exclude={"html_content"})


class JobStats(BaseModel):
    """Per-domain job counts."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    average_processing_time_ms: int = 0

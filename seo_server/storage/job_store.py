"""
Storage - Job Store

Persistence interface for analysis jobs plus an in-process implementation.
"""

import itertools
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from seo_server.errors import JobNotFoundError
from seo_server.schemas import AnalysisJob, JobStatus, utcnow


class JobStore(ABC):
    """Create/read/update access to analysis jobs."""

    @abstractmethod
    async def create(self, domain_id: int, url: str, html_content: Optional[str]) -> AnalysisJob:
        """Insert a new pending job and assign its id."""
        pass

    @abstractmethod
    async def get(self, job_id: int) -> Optional[AnalysisJob]:
        pass

    @abstractmethod
    async def update(self, job_id: int, **changes: Any) -> AnalysisJob:
        """
        Apply field changes and bump updated_at.

        Raises:
            JobNotFoundError: if the job does not exist
        """
        pass

    @abstractmethod
    async def list_by_domain(self, domain_id: int) -> List[AnalysisJob]:
        pass

    @abstractmethod
    async def recent_by_domain(self, domain_id: int, limit: int = 10) -> List[AnalysisJob]:
        """Most recently created jobs first."""
        pass

    @abstractmethod
    async def retryable(self, max_retries: int) -> List[AnalysisJob]:
        """Failed jobs whose retry budget is not exhausted."""
        pass


class InMemoryJobStore(JobStore):
    """Dict-backed job store; copies are returned so callers never share state."""

    def __init__(self):
        self._lock = threading.Lock()
        self._jobs: Dict[int, AnalysisJob] = {}
        self._ids = itertools.count(1)

    async def create(self, domain_id: int, url: str, html_content: Optional[str]) -> AnalysisJob:
        with self._lock:
            job = AnalysisJob(
                id=next(self._ids),
                domain_id=domain_id,
                url=url,
                html_content=html_content,
                status=JobStatus.PENDING,
            )
            self._jobs[job.id] = job
            return job.model_copy()

    async def get(self, job_id: int) -> Optional[AnalysisJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy() if job else None

    async def update(self, job_id: int, **changes: Any) -> AnalysisJob:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            changes.setdefault("updated_at", utcnow())
            updated = job.model_copy(update=changes)
            self._jobs[job_id] = updated
            return updated.model_copy()

    async def list_by_domain(self, domain_id: int) -> List[AnalysisJob]:
        with self._lock:
            return [j.model_copy() for j in self._jobs.values() if j.domain_id == domain_id]

    async def recent_by_domain(self, domain_id: int, limit: int = 10) -> List[AnalysisJob]:
        jobs = await self.list_by_domain(domain_id)
        jobs.sort(key=lambda j: (j.created_at, j.id), reverse=True)
        return jobs[:limit]

    async def retryable(self, max_retries: int) -> List[AnalysisJob]:
        with self._lock:
            return [j.model_copy() for j in self._jobs.values() if j.can_retry(max_retries)]

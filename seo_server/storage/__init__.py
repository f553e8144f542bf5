"""
Storage Module - Persistence Interfaces

Job store and domain aggregate used by the analysis pipeline.
"""

from seo_server.storage.job_store import JobStore, InMemoryJobStore
from seo_server.storage.domain_store import DomainStore, InMemoryDomainStore

__all__ = [
    "JobStore",
    "InMemoryJobStore",
    "DomainStore",
    "InMemoryDomainStore",
]

"""
Storage - Domain Store

Read/increment access to the domain aggregate owned by the account layer.
"""

import itertools
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional

from seo_server.schemas import Domain


class DomainStore(ABC):
    """Domain lookups and analysis counters."""

    @abstractmethod
    async def get(self, domain_id: int) -> Optional[Domain]:
        pass

    @abstractmethod
    async def get_by_hostname(self, name: str) -> Optional[Domain]:
        pass

    @abstractmethod
    async def increment_analyzed_count(self, domain_id: int) -> None:
        pass

    @abstractmethod
    async def set_last_analyzed(self, domain_id: int, timestamp: datetime) -> None:
        pass


class InMemoryDomainStore(DomainStore):
    """Domain registry seeded from configuration."""

    def __init__(self):
        self._lock = threading.Lock()
        self._domains: Dict[int, Domain] = {}
        self._ids = itertools.count(1)

    def add(self, name: str) -> Domain:
        """Register a hostname; returns the existing domain if already present."""
        name = name.lower()
        with self._lock:
            for domain in self._domains.values():
                if domain.name == name:
                    return domain.model_copy()
            domain = Domain(id=next(self._ids), name=name)
            self._domains[domain.id] = domain
            return domain.model_copy()

    async def get(self, domain_id: int) -> Optional[Domain]:
        with self._lock:
            domain = self._domains.get(domain_id)
            return domain.model_copy() if domain else None

    async def get_by_hostname(self, name: str) -> Optional[Domain]:
        name = name.lower()
        with self._lock:
            for domain in self._domains.values():
                if domain.name == name:
                    return domain.model_copy()
        return None

    async def increment_analyzed_count(self, domain_id: int) -> None:
        with self._lock:
            domain = self._domains.get(domain_id)
            if domain:
                domain.pages_analyzed += 1

    async def set_last_analyzed(self, domain_id: int, timestamp: datetime) -> None:
        with self._lock:
            domain = self._domains.get(domain_id)
            if domain:
                domain.last_analyzed = timestamp

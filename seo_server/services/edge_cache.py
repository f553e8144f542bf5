"""
Services - Edge Cache

Key/value store mapping normalized page URLs to serialized JSON-LD.
"""

import threading
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import httpx
from cachetools import TTLCache

from seo_server.config import get_settings


class EdgeCache(ABC):
    """Whole-value get/put interface shared by the edge and the pipeline."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get serialized metadata for a page.

        Args:
            key: Fully qualified request URL

        Returns:
            Serialized JSON-LD or None
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        pass


class MemoryEdgeCache(EdgeCache):
    """TTL-bounded process-local cache."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self._lock = threading.Lock()
        self._cache = TTLCache(
            maxsize=self.settings.cache.max_entries,
            ttl=self.settings.cache.ttl_seconds,
        )

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._cache.get(key)

    async def put(self, key: str, value: str) -> None:
        with self._lock:
            self._cache[key] = value

    def get_stats(self) -> dict:
        """Get cache statistics."""
        return {
            "size": len(self._cache),
            "maxsize": self._cache.maxsize,
            "ttl": self._cache.ttl,
        }


class CloudflareKVCache(EdgeCache):
    """Cloudflare Workers KV namespace accessed through the REST API."""

    def __init__(self, settings=None, transport: httpx.AsyncBaseTransport = None):
        self.settings = settings or get_settings()
        cache = self.settings.cache
        self.base_url = (
            f"{cache.cloudflare_api_base.rstrip('/')}/accounts/{cache.cloudflare_account_id}"
            f"/storage/kv/namespaces/{cache.cloudflare_namespace_id}/values"
        )
        self.headers = {"Authorization": f"Bearer {cache.cloudflare_api_token}"}
        self.timeout = cache.timeout_ms / 1000
        self.ttl = cache.ttl_seconds
        self._transport = transport

    def _value_url(self, key: str) -> str:
        return f"{self.base_url}/{quote(key, safe='')}"

    async def get(self, key: str) -> Optional[str]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self._value_url(key), headers=self.headers)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.text

    async def put(self, key: str, value: str) -> None:
        params = {"expiration_ttl": self.ttl} if self.ttl else None
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.put(
                self._value_url(key),
                content=value.encode("utf-8"),
                headers=self.headers,
                params=params,
            )
            response.raise_for_status()


def get_edge_cache(settings=None) -> EdgeCache:
    """Factory function to get the configured edge cache backend."""
    settings = settings or get_settings()

    if settings.cache.backend == "cloudflare_kv":
        return CloudflareKVCache(settings)
    return MemoryEdgeCache(settings)

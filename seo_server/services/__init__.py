"""
Services Module - Edge Cache

Key/value cache shared by the edge interceptor and the analysis pipeline.
"""

from seo_server.services.edge_cache import (
    EdgeCache,
    MemoryEdgeCache,
    CloudflareKVCache,
    get_edge_cache,
)

__all__ = [
    "EdgeCache",
    "MemoryEdgeCache",
    "CloudflareKVCache",
    "get_edge_cache",
]

"""
Edge Module - Request-Path Interceptor

Serves cached JSON-LD on hits and triggers background analysis on misses.
"""

from seo_server.edge.rules import cache_key, is_eligible, is_html_response, should_skip_processing
from seo_server.edge.rewriter import inject_json_ld, serialize_json_ld
from seo_server.edge.submitter import JobSubmitter, HttpJobSubmitter, LocalJobSubmitter
from seo_server.edge.interceptor import EdgeInterceptor
from seo_server.edge.app import create_edge_app

__all__ = [
    "cache_key",
    "is_eligible",
    "is_html_response",
    "should_skip_processing",
    "inject_json_ld",
    "serialize_json_ld",
    "JobSubmitter",
    "HttpJobSubmitter",
    "LocalJobSubmitter",
    "EdgeInterceptor",
    "create_edge_app",
]

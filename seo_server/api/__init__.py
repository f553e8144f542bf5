"""
API Module - HTTP Routes

Job submission and reporting endpoints served by the backend.
"""

from seo_server.api.jobs import JobRoutes

__all__ = ["JobRoutes"]

"""
Pipeline Module - Asynchronous Analysis Pipeline

Handles the flow from a captured page to cached structured data:
Submit → Queue → Extract → Analyze → Store → Publish, with retry sweeps.
"""

from seo_server.pipeline.text_extractor import TextExtractor
from seo_server.pipeline.analysis_service import AnalysisPipeline
from seo_server.pipeline.work_queue import AnalysisQueue
from seo_server.pipeline.retry_scheduler import RetryScheduler

__all__ = [
    "TextExtractor",
    "AnalysisPipeline",
    "AnalysisQueue",
    "RetryScheduler",
]

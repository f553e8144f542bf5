"""
LLM Module - Content Analyzer Provider Layer

Supports OpenAI and Google Gemini providers behind one capability interface.
"""

from typing import Dict, Type

from seo_server.llm.base_provider import BaseAnalyzerProvider
from seo_server.llm.openai_provider import OpenAIProvider
from seo_server.llm.gemini_provider import GeminiProvider

__all__ = [
    "BaseAnalyzerProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "get_provider",
    "register_provider",
]

PROVIDERS: Dict[str, Type[BaseAnalyzerProvider]] = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def register_provider(name: str, provider_cls: Type[BaseAnalyzerProvider]) -> None:
    """Make an additional provider selectable through LLM_PROVIDER."""
    PROVIDERS[name.lower()] = provider_cls


def get_provider(settings=None) -> BaseAnalyzerProvider:
    """Factory function to get the configured content analyzer."""
    from seo_server.config import get_settings
    settings = settings or get_settings()

    name = settings.llm.provider.lower()
    if name not in PROVIDERS:
        raise ValueError(f"Unsupported LLM provider: {settings.llm.provider}")
    return PROVIDERS[name](settings)

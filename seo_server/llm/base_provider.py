"""
LLM - Base Provider

Abstract base class for content analyzer providers.
"""

import json
import time
from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx

from seo_server.errors import AnalyzerError, AnalyzerNotConfiguredError, InvalidSchemaError
from seo_server.schemas import AnalysisResult

SYSTEM_INSTRUCTION = (
    "You are an expert in Schema.org structured data. Generate accurate JSON-LD "
    "markup for web pages. Always respond with valid JSON only."
)

REQUIRED_KEYS = ("@context", "@type")


class BaseAnalyzerProvider(ABC):
    """
    Base class for content analyzer implementations.

    Subclasses only implement the provider round trip; prompt construction,
    JSON parsing, Schema.org validation, and timing live here.
    """

    confidence: float = 0.5

    @abstractmethod
    async def request_completion(self, prompt: str) -> str:
        """
        Send the prompt to the provider.

        Args:
            prompt: User prompt (system instruction is provider-specific)

        Returns:
            Raw JSON text produced by the model
        """
        pass

    @abstractmethod
    def provider_name(self) -> str:
        """Identifier used by LLM_PROVIDER."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if credentials are present."""
        pass

    async def generate(self, content: str, url: str) -> AnalysisResult:
        """
        Generate Schema.org JSON-LD for a page.

        Args:
            content: Sanitized page text
            url: Original page URL

        Returns:
            AnalysisResult with validated metadata

        Raises:
            AnalyzerError: on any provider or validation failure
        """
        if not self.is_configured():
            raise AnalyzerNotConfiguredError(
                f"LLM provider not configured: {self.provider_name()}"
            )

        start = time.monotonic()
        try:
            text = await self.request_completion(self.build_prompt(content, url))
        except httpx.HTTPError as e:
            raise AnalyzerError(f"{self.provider_name()} analysis failed: {e}") from e

        metadata = self.parse_json_ld(text)

        return AnalysisResult(
            metadata=metadata,
            confidence=self.confidence,
            processing_time_ms=int((time.monotonic() - start) * 1000),
        )

    def build_prompt(self, content: str, url: str) -> str:
        return (
            "Analyze the following webpage content and generate appropriate "
            "Schema.org JSON-LD structured data.\n\n"
            f"URL: {url}\n"
            f"Content: {content}\n\n"
            "Requirements:\n"
            "- Generate valid Schema.org JSON-LD markup\n"
            "- Choose the most appropriate schema type (Article, Product, Organization, etc.)\n"
            "- Include relevant properties based on the content\n"
            '- Ensure the @context is "https://schema.org"\n'
            "- Return only valid JSON without any markdown formatting\n\n"
            "Respond with a JSON object in this format:\n"
            '{\n  "@context": "https://schema.org",\n  "@type": "...",\n  ...\n}'
        )

    def parse_json_ld(self, text: str) -> Dict[str, Any]:
        """Decode and validate the provider's JSON-LD answer."""
        if not text or not text.strip():
            raise AnalyzerError(f"Empty response from {self.provider_name()}")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise AnalyzerError(
                f"{self.provider_name()} returned malformed JSON: {e}"
            ) from e

        if not isinstance(data, dict) or not all(data.get(k) for k in REQUIRED_KEYS):
            raise InvalidSchemaError("Invalid Schema.org structure")

        return data

"""
LLM - OpenAI Provider

OpenAI chat completions provider in JSON mode.
"""

import httpx

from seo_server.errors import AnalyzerError
from seo_server.llm.base_provider import BaseAnalyzerProvider, SYSTEM_INSTRUCTION
from seo_server.config import get_settings


class OpenAIProvider(BaseAnalyzerProvider):
    """OpenAI provider."""

    confidence = 0.9

    def __init__(self, settings=None, transport: httpx.AsyncBaseTransport = None):
        self.settings = settings or get_settings()
        self.base_url = self.settings.llm.openai_base_url.rstrip("/")
        self.api_key = self.settings.llm.openai_api_key
        self.model = self.settings.llm.openai_model
        self.timeout = self.settings.llm.timeout_ms / 1000
        self._transport = transport

    async def request_completion(self, prompt: str) -> str:
        """Generate JSON-LD using the chat completions API."""
        url = f"{self.base_url}/chat/completions"

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.3,
            "max_tokens": 1500,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AnalyzerError(f"Unexpected OpenAI response shape: {e}") from e

    def provider_name(self) -> str:
        return "openai"

    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key)

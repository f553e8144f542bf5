"""
LLM - Gemini Provider

Google Gemini provider over the generateContent REST endpoint.
"""

import httpx

from seo_server.errors import AnalyzerError
from seo_server.llm.base_provider import BaseAnalyzerProvider, SYSTEM_INSTRUCTION
from seo_server.config import get_settings

# Constrains the model output to a JSON object carrying the required keys
RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "@context": {"type": "string"},
        "@type": {"type": "string"},
    },
    "required": ["@context", "@type"],
}


class GeminiProvider(BaseAnalyzerProvider):
    """Google Gemini provider."""

    confidence = 0.85

    def __init__(self, settings=None, transport: httpx.AsyncBaseTransport = None):
        self.settings = settings or get_settings()
        self.base_url = self.settings.llm.gemini_base_url.rstrip("/")
        self.api_key = self.settings.llm.gemini_api_key
        self.model = self.settings.llm.gemini_model
        self.timeout = self.settings.llm.timeout_ms / 1000
        self._transport = transport

    async def request_completion(self, prompt: str) -> str:
        """Generate JSON-LD using generateContent."""
        url = f"{self.base_url}/models/{self.model}:generateContent"

        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        payload = {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise AnalyzerError(f"Unexpected Gemini response shape: {e}") from e

        return "".join(part.get("text", "") for part in parts)

    def provider_name(self) -> str:
        return "gemini"

    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key)

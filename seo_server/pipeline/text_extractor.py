"""
Pipeline - Text Extractor

HTML → plain text sanitizer feeding the content analyzer.
"""

import re
from bs4 import BeautifulSoup

# Elements whose text is never page content
NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]

DEFAULT_MAX_CHARS = 8000


class TextExtractor:
    """Strips markup from captured pages and bounds the analyzer input."""

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS):
        self.max_chars = max_chars

    def extract(self, html_content: str) -> str:
        """
        Extract visible text from raw HTML.

        Args:
            html_content: Page body captured at the edge

        Returns:
            Whitespace-collapsed text, truncated to max_chars
        """
        if not html_content:
            return ""

        soup = BeautifulSoup(html_content, "html.parser")

        for tag in soup.find_all(NON_CONTENT_TAGS):
            tag.decompose()

        text = soup.get_text(separator=" ")
        text = self._collapse_whitespace(text)

        return text[: self.max_chars]

    def _collapse_whitespace(self, text: str) -> str:
        return re.sub(r"\s+", " ", text).strip()

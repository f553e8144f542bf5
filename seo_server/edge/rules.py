"""
Edge - Request Rules

Which requests the interceptor may touch, and how they are keyed.
"""

import re
from typing import Optional

# Static assets and administrative surfaces are always passed through
SKIP_PATTERNS = [
    re.compile(r"\.(css|js|png|jpg|jpeg|gif|ico|svg|woff|woff2|ttf|pdf)$", re.IGNORECASE),
    re.compile(r"^/api/"),
    re.compile(r"^/admin/"),
    re.compile(r"^/wp-admin/"),
    re.compile(r"^/wp-content/"),
]

ELIGIBLE_METHODS = {"GET"}


def should_skip_processing(path: str) -> bool:
    return any(pattern.search(path) for pattern in SKIP_PATTERNS)


def is_eligible(method: str, path: str) -> bool:
    """Only read-only page fetches outside the exclusion list are intercepted."""
    return method.upper() in ELIGIBLE_METHODS and not should_skip_processing(path)


def cache_key(url) -> str:
    """Fully qualified request URL, case preserved, query string included."""
    return str(url)


def is_html_response(content_type: Optional[str]) -> bool:
    return "text/html" in (content_type or "").lower()

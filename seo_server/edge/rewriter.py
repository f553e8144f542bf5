"""
Edge - JSON-LD Rewriter

Inserts a structured-data script as the last child of <head>, leaving every
other byte of the document untouched.
"""

import json
import re
from typing import Any, Dict, Optional

HEAD_CLOSE = re.compile(rb"</head\s*>", re.IGNORECASE)

# Regions where a literal </head> is text, not markup
OPAQUE_REGION = re.compile(
    rb"<!--.*?-->|<script\b[^>]*>.*?</script\s*>",
    re.IGNORECASE | re.DOTALL,
)


def serialize_json_ld(metadata: Dict[str, Any]) -> str:
    """Compact ASCII JSON that cannot close the surrounding script element."""
    return json.dumps(metadata, separators=(",", ":")).replace("</", "<\\/")


def build_script_tag(metadata: Dict[str, Any]) -> bytes:
    return (
        '<script type="application/ld+json">' + serialize_json_ld(metadata) + "</script>"
    ).encode("ascii")


def inject_json_ld(body: bytes, metadata: Dict[str, Any]) -> Optional[bytes]:
    """
    Inject JSON-LD immediately before the first </head>.

    Args:
        body: Origin HTML document
        metadata: Structured data object

    Returns:
        Rewritten document, or None if the document has no </head>
    """
    if not isinstance(metadata, dict):
        raise TypeError(f"JSON-LD payload must be an object, got {type(metadata).__name__}")

    pos = find_head_close(body)
    if pos is None:
        return None

    return body[:pos] + build_script_tag(metadata) + body[pos:]


def find_head_close(body: bytes) -> Optional[int]:
    """Offset of the first </head> outside comments and script elements."""
    opaque = [m.span() for m in OPAQUE_REGION.finditer(body)]
    for match in HEAD_CLOSE.finditer(body):
        if not any(start <= match.start() < end for start, end in opaque):
            return match.start()
    return None

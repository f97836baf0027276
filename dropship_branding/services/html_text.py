from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_WHITESPACE_PATTERN = re.compile(r"\s+")
_NON_CONTENT_TAGS = ["script", "style", "noscript"]


def html_to_text(html: str) -> str:
    """Best-effort plain text from HTML; returns the input unchanged if anything goes wrong."""

    try:
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(_NON_CONTENT_TAGS):
            tag.decompose()
        text = soup.get_text(separator=" ")
        return _WHITESPACE_PATTERN.sub(" ", text).strip()
    except Exception:
        logger.warning("HTML text extraction failed; using raw input", exc_info=True)
        return html


def truncate_text(text: str, max_chars: int) -> str:
    if max_chars <= 0:
        return ""
    return text[:max_chars]

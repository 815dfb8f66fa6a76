"""Parse AI Web Module - URL fetching and readable-content extraction."""

from parseai.modules.web.extractor import (
    WebContentExtractor,
    detect_urls,
    fetch_url,
    fetch_urls,
    format_for_context,
)
from parseai.modules.web.schemas import FetchedContent

__all__ = [
    "WebContentExtractor",
    "FetchedContent",
    "detect_urls",
    "fetch_url",
    "fetch_urls",
    "format_for_context",
]

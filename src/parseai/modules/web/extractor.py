"""
Parse AI Web - Content Extractor.

Fetches a URL and extracts readable text plus metadata from HTML, JSON and
plain-text responses.

Every outcome is a FetchedContent: invalid schemes, timeouts, HTTP errors and
unsupported content types come back as success=False with an error code.
"""

import asyncio
import json
import logging
import re
import time
from urllib.parse import urlsplit

import httpx
from bs4 import BeautifulSoup, Tag

from parseai.config import FetchSettings, get_settings
from parseai.modules.web.schemas import FetchedContent, FetchErrorCode
from parseai.observability import get_metrics_store

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+", re.IGNORECASE)
TRAILING_PUNCTUATION = re.compile(r"[.,;:!?)]+$")

REMOVED_SELECTORS = (
    "script, style, nav, header, footer, aside, .sidebar, .comments, "
    ".advertisement, .ads, [role=navigation], [role=banner], [role=complementary]"
)

TITLE_SELECTORS = [
    ('meta[property="og:title"]', "content"),
    ('meta[name="twitter:title"]', "content"),
    ("title", None),
]
DESCRIPTION_SELECTORS = [
    ('meta[property="og:description"]', "content"),
    ('meta[name="description"]', "content"),
    ('meta[name="twitter:description"]', "content"),
]
AUTHOR_SELECTORS = [
    ('meta[name="author"]', "content"),
    ('meta[property="article:author"]', "content"),
    ('[rel="author"]', None),
]
PUBLISHED_SELECTORS = [
    ('meta[property="article:published_time"]', "content"),
    ("time[datetime]", "datetime"),
    ('meta[name="date"]', "content"),
]
SITE_NAME_SELECTORS = [
    ('meta[property="og:site_name"]', "content"),
]

ARTICLE_SELECTORS = [
    "article",
    '[role="main"]',
    "main",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
    "#content",
    ".post-body",
    ".story-body",
]
TEXT_ELEMENTS = ["h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "td", "th", "blockquote", "pre"]
MIN_ARTICLE_LENGTH = 200


# =============================================================================
# Text helpers
# =============================================================================


def detect_urls(text: str) -> list[str]:
    """Find http(s) URLs in free text, trailing punctuation stripped."""
    return [TRAILING_PUNCTUATION.sub("", match) for match in URL_PATTERN.findall(text or "")]


def has_urls(text: str) -> bool:
    return bool(detect_urls(text))


def clean_inline(text: str) -> str:
    """Collapse all whitespace to single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


def clean_block(text: str) -> str:
    """Collapse whitespace inside lines and runs of blank lines, keeping paragraph breaks."""
    text = re.sub(r"[^\S\n]+", " ", text or "")
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def count_words(text: str) -> int:
    return len(text.split())


def _first_value(soup: BeautifulSoup, selectors: list[tuple[str, str | None]]) -> str | None:
    """Return the first non-empty attribute (or text when attr is None) in priority order."""
    for selector, attr in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        value = element.get(attr) if attr else element.get_text()
        if isinstance(value, list):
            value = " ".join(value)
        if value and value.strip():
            return value.strip()
    return None


def _extract_text(element: Tag) -> str:
    """Walk heading/paragraph/list/table/quote/code elements with light Markdown formatting."""
    parts = []
    for node in element.find_all(TEXT_ELEMENTS):
        text = node.get_text().strip()
        if not text:
            continue
        name = node.name.lower()
        if name.startswith("h"):
            text = f"\n## {text}\n"
        elif name == "li":
            text = f"• {text}"
        elif name == "blockquote":
            text = f"> {text}"
        parts.append(text)

    if not parts:
        return element.get_text()
    return "\n\n".join(parts)


# =============================================================================
# Extractor
# =============================================================================


class WebContentExtractor:
    """Fetches URLs and turns the responses into FetchedContent."""

    def __init__(
        self,
        settings: FetchSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings().fetch
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    def _failure(self, url: str, code: FetchErrorCode, message: str) -> FetchedContent:
        get_metrics_store().record_stage_error("fetch_url", code)
        return FetchedContent.failure(url, code, message)

    async def _get(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            transport=self._transport,
            headers=self.headers,
            follow_redirects=True,
            timeout=httpx.Timeout(self.settings.timeout_seconds),
        ) as client:
            return await client.get(url)

    async def fetch_url(self, url: str) -> FetchedContent:
        """
        Fetch and parse one URL.

        Returns:
            FetchedContent; failures are returned, never raised
        """
        try:
            parts = urlsplit(url)
        except ValueError as e:
            logger.warning(f"[FETCH] Malformed URL {url!r}: {e}")
            return self._failure(url, "INVALID_URL", f"Invalid URL: {e}")

        if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
            return self._failure(
                url, "INVALID_URL", "Invalid URL protocol. Only HTTP and HTTPS are supported."
            )

        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(self._get(url), timeout=self.settings.timeout_seconds)
            result = self._build_result(url, response)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(f"[FETCH] Timed out after {self.settings.timeout_seconds}s: {url}")
            return self._failure(
                url, "TIMEOUT", "Request timed out. The website took too long to respond."
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, RecursionError) as e:
            logger.warning(f"[FETCH] Failed to fetch {url}: {e}")
            return self._failure(url, "FETCH_FAILED", f"Failed to fetch URL: {e}")
        finally:
            get_metrics_store().record_stage_latency("fetch_url", (time.perf_counter() - started) * 1000)

        return result

    def _build_result(self, url: str, response: httpx.Response) -> FetchedContent:
        if not response.is_success:
            return self._failure(
                url,
                "HTTP_ERROR",
                f"Failed to fetch URL: {response.status_code} {response.reason_phrase}".rstrip(),
            )

        content_type = response.headers.get("content-type", "").lower()
        max_length = self.settings.max_content_length

        if "application/json" in content_type:
            text = json.dumps(response.json(), indent=2, ensure_ascii=False)
            return FetchedContent(
                url=url,
                title="JSON Data",
                content=text[:max_length],
                word_count=count_words(text),
                success=True,
            )

        if "text/plain" in content_type:
            text = response.text
            return FetchedContent(
                url=url,
                title="Plain Text",
                content=text[:max_length],
                word_count=count_words(text),
                success=True,
            )

        if "text/html" not in content_type and "application/xhtml" not in content_type:
            return self._failure(
                url,
                "UNSUPPORTED_CONTENT_TYPE",
                f"Unsupported content type: {content_type or 'unknown'}. "
                "Only HTML, JSON, and plain text are supported.",
            )

        return self.parse_html(url, response.text)

    def parse_html(self, url: str, html: str) -> FetchedContent:
        """Extract title, metadata and article text from an HTML document."""
        soup = BeautifulSoup(html, "html.parser")

        for element in soup.select(REMOVED_SELECTORS):
            element.decompose()

        title = _first_value(soup, TITLE_SELECTORS) or "Untitled"
        description = _first_value(soup, DESCRIPTION_SELECTORS)
        author = _first_value(soup, AUTHOR_SELECTORS)
        published_date = _first_value(soup, PUBLISHED_SELECTORS)
        site_name = _first_value(soup, SITE_NAME_SELECTORS) or urlsplit(url).hostname

        content = ""
        for selector in ARTICLE_SELECTORS:
            element = soup.select_one(selector)
            if element is not None and len(element.get_text().strip()) > MIN_ARTICLE_LENGTH:
                content = _extract_text(element)
                break

        if len(content) < MIN_ARTICLE_LENGTH:
            content = _extract_text(soup.body or soup)

        content = clean_block(content)[: self.settings.max_content_length]

        return FetchedContent(
            url=url,
            title=clean_inline(title),
            content=content,
            description=clean_inline(description) if description else None,
            author=clean_inline(author) if author else None,
            published_date=published_date,
            site_name=site_name,
            word_count=count_words(content),
            success=True,
        )

    async def fetch_urls(self, urls: list[str]) -> list[FetchedContent]:
        """
        Fetch up to max_urls unique URLs concurrently.

        Each fetch is bounded by its own timeout; one failure never cancels
        the others. Results come back in input order once all have settled.
        """
        unique = list(dict.fromkeys(urls))[: self.settings.max_urls]
        if not unique:
            return []

        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def bounded(url: str) -> FetchedContent:
            async with semaphore:
                return await self.fetch_url(url)

        results = await asyncio.gather(*(bounded(url) for url in unique))

        failed = [r for r in results if not r.success]
        logger.info(f"[FETCH] Fetched {len(results) - len(failed)}/{len(results)} URL(s)")
        for result in failed:
            logger.info(f"[FETCH] {result.url}: {result.error}")

        return list(results)


def format_for_context(results: list[FetchedContent]) -> str:
    """Format successful fetches as a model context block ('' when none succeeded)."""
    successful = [r for r in results if r.success]
    if not successful:
        return ""

    context = "\n\n--- FETCHED WEB CONTENT ---\n"
    for i, item in enumerate(successful, start=1):
        context += f"\n[URL {i}: {item.title}]\n"
        context += f"Source: {item.url}\n"
        if item.site_name:
            context += f"Site: {item.site_name}\n"
        if item.author:
            context += f"Author: {item.author}\n"
        if item.published_date:
            context += f"Published: {item.published_date}\n"
        context += f"Word count: ~{item.word_count:,}\n\n"
        context += item.content
        context += "\n---\n"
    return context


async def fetch_url(url: str) -> FetchedContent:
    """Fetch one URL with the default settings."""
    return await WebContentExtractor().fetch_url(url)


async def fetch_urls(urls: list[str]) -> list[FetchedContent]:
    """Fetch several URLs with the default settings."""
    return await WebContentExtractor().fetch_urls(urls)

"""
Tests for URL fetching and content extraction.

All network traffic goes through httpx.MockTransport.
"""

import asyncio

import httpx
import pytest

from parseai.config import FetchSettings
from parseai.modules.web.extractor import (
    WebContentExtractor,
    clean_block,
    detect_urls,
    format_for_context,
    has_urls,
)
from parseai.modules.web.schemas import FetchedContent


ARTICLE_HTML = """
<html>
<head>
  <title>Fallback Title</title>
  <meta property="og:title" content="  Rust   in Production ">
  <meta name="description" content="A field report.">
  <meta name="author" content="Dana Ortiz">
  <meta property="article:published_time" content="2024-03-01T10:00:00Z">
</head>
<body>
  <nav><a href="/">Home</a> <a href="/about">About</a></nav>
  <script>var tracking = true;</script>
  <article>
    <h1>Rust in Production</h1>
    <p>We migrated our ingestion service from Go to Rust over the course of two quarters and measured everything along the way.</p>
    <ul><li>Lower tail latency</li><li>Smaller memory footprint</li></ul>
    <blockquote>It was worth it.</blockquote>
    <p>The remaining sections cover build times, hiring and the incidents we hit during rollout, in that order.</p>
  </article>
  <footer>Copyright</footer>
</body>
</html>
"""


def make_extractor(handler, **overrides) -> WebContentExtractor:
    settings = FetchSettings(**overrides)
    return WebContentExtractor(settings=settings, transport=httpx.MockTransport(handler))


class TestUrlDetection:
    """URL detection in free text."""

    def test_trailing_punctuation_stripped(self):
        text = "Read https://example.com/post. Also (see http://foo.org/a?b=1)!"
        assert detect_urls(text) == ["https://example.com/post", "http://foo.org/a?b=1"]

    def test_no_urls(self):
        assert detect_urls("no links here") == []
        assert has_urls("ftp://files.example.com") is False


class TestFetchUrl:
    """Single URL fetches."""

    @pytest.mark.asyncio
    async def test_invalid_scheme_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        result = await make_extractor(handler).fetch_url("ftp://files.example.com/x")

        assert result.success is False
        assert result.error_code == "INVALID_URL"
        assert result.content == ""
        assert calls == []

    @pytest.mark.asyncio
    async def test_malformed_url_is_invalid(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        result = await make_extractor(handler).fetch_url("http://[::1")

        assert result.success is False
        assert result.error_code == "INVALID_URL"
        assert calls == []

    @pytest.mark.asyncio
    async def test_http_404(self):
        def handler(request):
            return httpx.Response(404)

        result = await make_extractor(handler).fetch_url("https://example.com/missing")

        assert result.success is False
        assert result.error_code == "HTTP_ERROR"
        assert "404" in result.error
        assert result.content == ""

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def handler(request):
            await asyncio.sleep(1)
            return httpx.Response(200, text="late")

        extractor = make_extractor(handler, timeout_seconds=0.05)
        result = await extractor.fetch_url("https://slow.example.com")

        assert result.success is False
        assert result.error_code == "TIMEOUT"
        assert result.error == "Request timed out. The website took too long to respond."

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await make_extractor(handler).fetch_url("https://down.example.com")

        assert result.error_code == "FETCH_FAILED"
        assert result.error.startswith("Failed to fetch URL:")

    @pytest.mark.asyncio
    async def test_json_pretty_printed(self):
        def handler(request):
            return httpx.Response(200, json={"items": [1, 2]})

        result = await make_extractor(handler).fetch_url("https://api.example.com/items")

        assert result.success is True
        assert result.title == "JSON Data"
        assert result.content == '{\n  "items": [\n    1,\n    2\n  ]\n}'

    @pytest.mark.asyncio
    async def test_plain_text_truncated(self):
        def handler(request):
            return httpx.Response(200, text="word " * 100, headers={"content-type": "text/plain"})

        result = await make_extractor(handler, max_content_length=50).fetch_url("https://example.com/a.txt")

        assert result.title == "Plain Text"
        assert len(result.content) == 50
        assert result.word_count == 100

    @pytest.mark.asyncio
    async def test_unsupported_content_type(self):
        def handler(request):
            return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

        result = await make_extractor(handler).fetch_url("https://example.com/logo.png")

        assert result.success is False
        assert result.error_code == "UNSUPPORTED_CONTENT_TYPE"
        assert "image/png" in result.error

    @pytest.mark.asyncio
    async def test_sends_user_agent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["user-agent"]
            return httpx.Response(200, text="ok", headers={"content-type": "text/plain"})

        await make_extractor(handler).fetch_url("https://example.com")

        assert "ParseBot" in seen["ua"]


class TestParseHtml:
    """HTML extraction."""

    def test_article_and_metadata(self):
        extractor = WebContentExtractor(settings=FetchSettings())
        result = extractor.parse_html("https://blog.example.com/rust", ARTICLE_HTML)

        assert result.success is True
        assert result.title == "Rust in Production"
        assert result.description == "A field report."
        assert result.author == "Dana Ortiz"
        assert result.published_date == "2024-03-01T10:00:00Z"
        assert result.site_name == "blog.example.com"
        assert "## Rust in Production" in result.content
        assert "• Lower tail latency" in result.content
        assert "> It was worth it." in result.content
        assert "tracking" not in result.content
        assert "Copyright" not in result.content
        assert result.word_count == len(result.content.split())

    def test_untitled_page_falls_back_to_body(self):
        extractor = WebContentExtractor(settings=FetchSettings())
        result = extractor.parse_html("https://example.com", "<html><body><p>Short note.</p></body></html>")

        assert result.title == "Untitled"
        assert result.content == "Short note."

    def test_clean_block_keeps_paragraphs(self):
        assert clean_block("  a   b \n\n\n\n  c\t d  ") == "a b\n\nc d"


class TestFetchUrls:
    """Concurrent multi-URL fetches."""

    @pytest.mark.asyncio
    async def test_dedupes_caps_and_preserves_order(self):
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, text=str(request.url), headers={"content-type": "text/plain"})

        urls = [f"https://example.com/{i}" for i in range(7)]
        urls.insert(1, urls[0])

        results = await make_extractor(handler).fetch_urls(urls)

        assert [r.url for r in results] == urls[:1] + urls[2:6]
        assert len(results) == 5
        assert sorted(requested) == sorted(r.url for r in results)

    @pytest.mark.asyncio
    async def test_one_failure_does_not_affect_others(self):
        async def handler(request):
            if request.url.path == "/bad":
                return httpx.Response(500)
            await asyncio.sleep(0.01)
            return httpx.Response(200, text="fine", headers={"content-type": "text/plain"})

        results = await make_extractor(handler).fetch_urls(
            ["https://a.example.com/ok", "https://a.example.com/bad", "ftp://nope", "https://b.example.com/ok"]
        )

        assert [r.success for r in results] == [True, False, False, True]
        assert results[1].error_code == "HTTP_ERROR"
        assert results[2].error_code == "INVALID_URL"
        assert all(r.content == "" for r in results if not r.success)

    @pytest.mark.asyncio
    async def test_malformed_urls_do_not_sink_the_batch(self):
        def handler(request):
            return httpx.Response(200, text="fine", headers={"content-type": "text/plain"})

        results = await make_extractor(handler).fetch_urls(
            ["https://a\u2100b.com", "ftp://x", "http://[::1", "https://ok.example.com"]
        )

        assert [r.error_code for r in results] == ["INVALID_URL", "INVALID_URL", "INVALID_URL", None]
        assert results[3].success is True

    @pytest.mark.asyncio
    async def test_empty_input(self):
        assert await make_extractor(lambda r: httpx.Response(200)).fetch_urls([]) == []


class TestFormatForContext:
    """Model context block for fetched pages."""

    def test_only_successes_included(self):
        ok = FetchedContent(
            url="https://example.com/a",
            title="Alpha",
            content="alpha body",
            site_name="example.com",
            author="Kim",
            word_count=1200,
            success=True,
        )
        failed = FetchedContent.failure("https://example.com/b", "TIMEOUT", "timed out")

        context = format_for_context([ok, failed])

        assert context.startswith("\n\n--- FETCHED WEB CONTENT ---\n")
        assert "[URL 1: Alpha]" in context
        assert "Source: https://example.com/a" in context
        assert "Author: Kim" in context
        assert "Word count: ~1,200" in context
        assert "example.com/b" not in context

    def test_nothing_successful(self):
        failed = FetchedContent.failure("https://example.com/b", "HTTP_ERROR", "boom")
        assert format_for_context([failed]) == ""

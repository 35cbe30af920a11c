"""
Tests for article and document fetching.
"""

import asyncio

import httpx
import pytest

from conftest import ARTICLE_HTML, ARTICLE_URL, Upstream, make_settings
from threadcraft.errors import UpstreamFetchError
from threadcraft.repositories import HttpContentFetcher
from threadcraft.repositories.http_content_fetcher import (
    extract_content,
    is_pdf_url,
    is_preprint_url,
    resolve_document_url,
)
from threadcraft.utils import TRUNCATION_MARKER


def run(upstream: Upstream, call, **overrides):
    """Run ``call(fetcher)`` against the scripted upstream."""

    async def go():
        async with httpx.AsyncClient(transport=upstream.transport) as client:
            fetcher = HttpContentFetcher(client, make_settings(**overrides))
            return await call(fetcher)

    return asyncio.run(go())


def test_extract_article():
    """Metadata comes from meta tags and body text from headings and paragraphs."""
    content = extract_content(ARTICLE_URL, ARTICLE_HTML, max_chars=1200)

    assert content.url == ARTICLE_URL
    assert content.title == "Launch Day"
    assert content.site_name == "Example Blog"
    assert content.description == "How we shipped version one."
    assert content.text == (
        "Launch Day\n\n"
        "We shipped version one after six months of work.\n\n"
        "Faster builds\n\n"
        "Smaller bundles"
    )


def test_extract_skips_page_chrome():
    content = extract_content(ARTICLE_URL, ARTICLE_HTML, max_chars=1200)
    for noise in ("Home", "Subscribe", "Copyright", "tracking"):
        assert noise not in content.text


def test_extract_title_fallbacks():
    twitter = '<meta name="twitter:title" content="Tweet Title"><title>Doc</title>'
    assert extract_content("https://x.test", twitter).title == "Tweet Title"
    assert extract_content("https://x.test", "<title> Doc Title </title>").title == "Doc Title"
    assert extract_content("https://x.test", "<p>body</p>").title == "Untitled"


def test_extract_without_text_blocks():
    """A page with no recognizable blocks yields empty text, not an error."""
    content = extract_content("https://x.test", "<html><body><div>Only a div</div></body></html>")
    assert content.text == ""
    assert content.site_name is None
    assert content.description is None


def test_extract_empty_document():
    content = extract_content("https://x.test", "")
    assert content.title == "Untitled"
    assert content.text == ""


def test_extract_collapses_whitespace():
    content = extract_content("https://x.test", "<p>  spread \n\n  across   lines </p>")
    assert content.text == "spread across lines"


def test_extract_truncates_to_budget():
    html = "<p>" + "a" * 50 + "</p>"
    content = extract_content("https://x.test", html, max_chars=20)
    assert content.text == "a" * 20 + TRUNCATION_MARKER


def test_extract_keeps_text_around_nested_blocks():
    """A block's own text survives when it wraps other text blocks."""
    html = (
        "<ul><li>Parent<ul><li>Child</li></ul></li></ul>"
        "<blockquote>Quoted <p>para</p></blockquote>"
        "<p>Plain <em>inline</em> text<!-- hidden --></p>"
    )
    content = extract_content("https://x.test", html)
    assert content.text == "Parent\n\nChild\n\nQuoted\n\npara\n\nPlain inline text"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://arxiv.org/abs/2401.01234", True),
        ("https://arxiv.org/pdf/2401.01234v2", True),
        ("https://www.biorxiv.org/content/10.1101/2024.01.01.123456v1", True),
        ("https://www.medrxiv.org/content/10.1101/2024.02.02.654321v1", True),
        ("https://example.com/blog/arxiv-roundup", False),
    ],
)
def test_is_preprint_url(url, expected):
    assert is_preprint_url(url) is expected


def test_is_pdf_url():
    assert is_pdf_url("https://example.com/paper.PDF")
    assert is_pdf_url("https://example.com/paper.pdf?download=1")
    assert not is_pdf_url("https://example.com/pdf/overview")


def test_resolve_document_url():
    assert resolve_document_url("https://arxiv.org/abs/2401.01234v2") == "https://arxiv.org/pdf/2401.01234v2"
    assert resolve_document_url("https://example.com/a.pdf") == "https://example.com/a.pdf"


def test_fetch_article_sends_user_agent():
    upstream = Upstream()
    upstream.html(ARTICLE_URL, ARTICLE_HTML)

    content = run(upstream, lambda f: f.fetch_article(ARTICLE_URL), user_agent="TestBot/1.0")

    assert content.title == "Launch Day"
    assert upstream.requests[0].headers["User-Agent"] == "TestBot/1.0"


def test_fetch_article_uses_configured_budget():
    upstream = Upstream()
    upstream.html(ARTICLE_URL, "<p>" + "b" * 100 + "</p>")
    content = run(upstream, lambda f: f.fetch_article(ARTICLE_URL), article_max_chars=10)
    assert content.text == "b" * 10 + TRUNCATION_MARKER


def test_fetch_article_non_2xx():
    """A non-2xx response raises with the upstream status."""
    upstream = Upstream()
    upstream.html(ARTICLE_URL, "down", status_code=503)

    with pytest.raises(UpstreamFetchError) as exc_info:
        run(upstream, lambda f: f.fetch_article(ARTICLE_URL))

    assert exc_info.value.upstream_status == 503
    assert exc_info.value.message == "Fetch failed: 503 Service Unavailable"
    assert exc_info.value.status_code == 400


def test_fetch_article_transport_error():
    upstream = Upstream()

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.add("GET", ARTICLE_URL, refuse)
    with pytest.raises(UpstreamFetchError, match="connection refused"):
        run(upstream, lambda f: f.fetch_article(ARTICLE_URL))


def test_fetch_document_resolves_arxiv():
    """arXiv abstract pages are fetched from their PDF URL."""
    upstream = Upstream()
    upstream.add(
        "GET",
        "https://arxiv.org/pdf/2401.01234",
        lambda request: httpx.Response(200, content=b"%PDF-1.7"),
    )
    document = run(upstream, lambda f: f.fetch_document("https://arxiv.org/abs/2401.01234"))
    assert document == b"%PDF-1.7"


def test_fetch_document_rejects_declared_oversize():
    """A Content-Length above the upload ceiling is refused."""
    upstream = Upstream()
    url = "https://example.com/huge.pdf"
    upstream.add("GET", url, lambda request: httpx.Response(200, content=b"%" * (3 * 1024 * 1024)))

    with pytest.raises(UpstreamFetchError, match="Document too large \\(max 1MB\\)"):
        run(upstream, lambda f: f.fetch_document(url), upload_max_bytes=1024 * 1024)


def test_fetch_document_stops_reading_oversized_stream():
    """Without a Content-Length the body is read only until it passes the ceiling."""
    upstream = Upstream()
    url = "https://example.com/endless.pdf"
    sent = []

    async def chunks():
        for _ in range(64):
            sent.append(1)
            yield b"x" * 1024

    upstream.add("GET", url, lambda request: httpx.Response(200, content=chunks()))

    with pytest.raises(UpstreamFetchError, match="Document too large"):
        run(upstream, lambda f: f.fetch_document(url), upload_max_bytes=4 * 1024)
    assert len(sent) < 64


def test_fetch_document_streamed_body_within_limit():
    upstream = Upstream()
    url = "https://example.com/small.pdf"

    async def chunks():
        yield b"%PDF-"
        yield b"1.7"

    upstream.add("GET", url, lambda request: httpx.Response(200, content=chunks()))
    assert run(upstream, lambda f: f.fetch_document(url), upload_max_bytes=8) == b"%PDF-1.7"


def test_fetch_document_non_2xx():
    upstream = Upstream()
    url = "https://example.com/missing.pdf"
    upstream.add("GET", url, lambda request: httpx.Response(404, content=b"nope"))

    with pytest.raises(UpstreamFetchError) as exc_info:
        run(upstream, lambda f: f.fetch_document(url))
    assert exc_info.value.upstream_status == 404


def test_is_pdf_by_url_skips_head_request():
    upstream = Upstream()
    assert run(upstream, lambda f: f.is_pdf("https://example.com/paper.pdf")) is True
    assert upstream.requests == []


def test_is_pdf_by_content_type():
    """URLs without an extension are checked with a HEAD request."""
    upstream = Upstream()
    url = "https://example.com/download?id=7"
    upstream.add(
        "HEAD",
        url,
        lambda request: httpx.Response(200, headers={"content-type": "application/pdf"}),
    )
    assert run(upstream, lambda f: f.is_pdf(url)) is True
    assert upstream.requests[0].method == "HEAD"


def test_is_pdf_head_failure_is_false():
    upstream = Upstream()

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.add("HEAD", ARTICLE_URL, refuse)
    assert run(upstream, lambda f: f.is_pdf(ARTICLE_URL)) is False


def test_is_pdf_html_page():
    upstream = Upstream()
    upstream.add(
        "HEAD",
        ARTICLE_URL,
        lambda request: httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}),
    )
    assert run(upstream, lambda f: f.is_pdf(ARTICLE_URL)) is False

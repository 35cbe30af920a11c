"""HTTP implementation of ContentFetcher.

Retrieves article pages and research-paper PDFs with a shared
``httpx.AsyncClient``. HTML is reduced to title/description metadata plus
heading and paragraph text using BeautifulSoup; PDFs are returned as raw
bytes for the model to read.

Extraction is best-effort: a page with no recognizable text blocks yields an
empty ``text`` rather than an error.
"""

import logging
import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from threadcraft.config import Settings, settings
from threadcraft.entities import ExtractedContentEntity
from threadcraft.errors import UpstreamFetchError
from threadcraft.utils import truncate

logger = logging.getLogger(__name__)

# Blocks that never carry article prose
NOISE_TAGS = ["script", "style", "noscript", "nav", "footer", "header", "aside", "form"]

# Heading and paragraph-like blocks collected as body text
TEXT_TAGS = ["h1", "h2", "h3", "p", "li", "blockquote"]

PREPRINT_PATTERNS = [
    re.compile(r"arxiv\.org/(abs|pdf)/", re.I),
    re.compile(r"(bio|med)rxiv\.org/content/", re.I),
]

ARXIV_ABS_PATTERN = re.compile(r"^(https?://(?:www\.)?arxiv\.org)/abs/([^?#]+)", re.I)


def is_preprint_url(url: str) -> bool:
    """Return True for arXiv/bioRxiv/medRxiv paper URLs."""
    return any(pattern.search(url) for pattern in PREPRINT_PATTERNS)


def is_pdf_url(url: str) -> bool:
    """Return True when the URL path names a PDF file."""
    return urlparse(url).path.lower().endswith(".pdf")


def resolve_document_url(url: str) -> str:
    """Map a preprint landing page to its PDF download URL.

    Only arXiv abstract pages are rewritten; other URLs pass through.

    Example:
        ```python
        resolve_document_url("https://arxiv.org/abs/2401.01234")
        # "https://arxiv.org/pdf/2401.01234"
        ```
    """
    match = ARXIV_ABS_PATTERN.match(url)
    if match:
        return f"{match.group(1)}/pdf/{match.group(2)}"
    return url


def _meta_content(soup: BeautifulSoup, **attrs) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _own_text(element: Tag) -> str:
    """Text of a block, leaving out nested text blocks (they are collected separately)."""
    parts = []
    for child in element.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag) and child.name not in TEXT_TAGS:
            parts.append(_own_text(child) if child.find(TEXT_TAGS) else child.get_text(" "))
    return " ".join(parts)


def extract_content(url: str, html: str, max_chars: int | None = None) -> ExtractedContentEntity:
    """Extract title, site name, description and body text from HTML.

    Args:
        url: The page URL (copied into the result)
        html: Raw page markup
        max_chars: Body text budget; defaults to settings.article_max_chars

    Returns:
        ExtractedContentEntity with empty text when no blocks matched
    """
    limit = max_chars or settings.article_max_chars
    soup = BeautifulSoup(html or "", "html.parser")

    title_tag = soup.find("title")
    title = (
        _meta_content(soup, property="og:title")
        or _meta_content(soup, name="twitter:title")
        or (title_tag.get_text(strip=True) if title_tag else None)
        or "Untitled"
    )
    site_name = _meta_content(soup, property="og:site_name")
    description = _meta_content(soup, property="og:description") or _meta_content(
        soup, name="description"
    )

    for tag in soup(NOISE_TAGS):
        tag.decompose()

    blocks = []
    for element in soup.find_all(TEXT_TAGS):
        text = " ".join(_own_text(element).split())
        if text:
            blocks.append(text)

    return ExtractedContentEntity(
        url=url,
        title=title,
        site_name=site_name,
        description=description,
        text=truncate("\n\n".join(blocks), limit),
    )


def _check_status(url: str, response: httpx.Response) -> None:
    if not response.is_success:
        logger.warning("Fetch of %s returned HTTP %s", url, response.status_code)
        raise UpstreamFetchError(
            f"Fetch failed: {response.status_code} {response.reason_phrase}".strip(),
            upstream_status=response.status_code,
        )


class HttpContentFetcher:
    """httpx-based implementation of ContentFetcher protocol.

    This class satisfies the ContentFetcher protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        async with httpx.AsyncClient() as client:
            fetcher = HttpContentFetcher(client)
            content = await fetcher.fetch_article("https://example.com/post")
            print(content.title)
        ```
    """

    def __init__(self, client: httpx.AsyncClient, config: Settings | None = None) -> None:
        """Initialize the fetcher.

        Args:
            client: Shared async HTTP client (owned by the caller)
            config: Settings for user agent, timeout and budgets. Defaults to settings.
        """
        self._client = client
        self._settings = config or settings

    async def _get(self, url: str, accept: str) -> httpx.Response:
        headers = {"User-Agent": self._settings.user_agent, "Accept": accept}
        try:
            response = await self._client.get(
                url,
                headers=headers,
                timeout=self._settings.fetch_timeout_seconds,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            logger.warning("Fetch of %s failed: %s", url, e)
            raise UpstreamFetchError(f"Fetch failed: {e}") from e

        _check_status(url, response)
        return response

    async def fetch_article(self, url: str) -> ExtractedContentEntity:
        """Fetch an HTML page and extract its readable content.

        Args:
            url: Article URL

        Returns:
            ExtractedContentEntity (text may be empty)

        Raises:
            UpstreamFetchError: On transport failure or a non-2xx status
        """
        response = await self._get(url, accept="text/html,application/xhtml+xml")
        content = extract_content(url, response.text, self._settings.article_max_chars)
        logger.debug("Extracted %d chars from %s", len(content.text), url)
        return content

    async def fetch_document(self, url: str) -> bytes:
        """Fetch raw document bytes, resolving preprint landing pages first.

        The body is streamed and abandoned as soon as it exceeds
        ``settings.upload_max_bytes``, the same ceiling as for uploads.

        Args:
            url: PDF or preprint URL

        Returns:
            The response body

        Raises:
            UpstreamFetchError: On transport failure, a non-2xx status or an
                oversized document
        """
        target = resolve_document_url(url)
        limit = self._settings.upload_max_bytes
        too_large = UpstreamFetchError(f"Document too large (max {limit // (1024 * 1024)}MB)")
        headers = {"User-Agent": self._settings.user_agent, "Accept": "application/pdf,*/*"}

        body = bytearray()
        try:
            async with self._client.stream(
                "GET",
                target,
                headers=headers,
                timeout=self._settings.fetch_timeout_seconds,
                follow_redirects=True,
            ) as response:
                _check_status(target, response)
                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > limit:
                    raise too_large
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise too_large
        except httpx.HTTPError as e:
            logger.warning("Fetch of %s failed: %s", target, e)
            raise UpstreamFetchError(f"Fetch failed: {e}") from e

        return bytes(body)

    async def is_pdf(self, url: str) -> bool:
        """Return True when the URL points at a PDF or a known preprint host.

        URLs without an obvious extension are checked with a HEAD request;
        a failed HEAD request counts as "not a PDF".
        """
        if is_pdf_url(url) or is_preprint_url(url):
            return True

        try:
            response = await self._client.head(
                url,
                headers={"User-Agent": self._settings.user_agent},
                timeout=self._settings.fetch_timeout_seconds,
                follow_redirects=True,
            )
        except httpx.HTTPError:
            return False
        return response.headers.get("content-type", "").lower().startswith("application/pdf")

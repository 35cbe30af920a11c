"""Content fetcher protocol."""

from typing import Protocol, runtime_checkable

from threadcraft.entities import ExtractedContentEntity


@runtime_checkable
class ContentFetcher(Protocol):
    """Protocol for retrieving source content over the network."""

    async def fetch_article(self, url: str) -> ExtractedContentEntity:
        """Fetch an HTML page and extract its readable content.

        Raises:
            UpstreamFetchError: If the page cannot be retrieved
        """
        ...

    async def fetch_document(self, url: str) -> bytes:
        """Fetch raw document bytes (PDF).

        Raises:
            UpstreamFetchError: If the document cannot be retrieved
        """
        ...

    async def is_pdf(self, url: str) -> bool:
        """Return True when the URL points at a PDF document."""
        ...

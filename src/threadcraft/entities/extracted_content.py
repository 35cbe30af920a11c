"""Extracted article content entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractedContentEntity:
    """Best-effort structured view of a fetched article.

    Attributes:
        url: The source URL as requested
        title: Page title ("Untitled" when nothing matched)
        site_name: Publisher name from Open Graph tags, if any
        description: Meta description, if any
        text: Heading and paragraph text joined by blank lines (may be empty)
    """

    url: str
    title: str = "Untitled"
    site_name: str | None = None
    description: str | None = None
    text: str = ""

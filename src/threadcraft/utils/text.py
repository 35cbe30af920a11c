"""Text helpers shared by the fetcher and services."""

TRUNCATION_MARKER = "\n[truncated]"


def truncate(text: str, limit: int) -> str:
    """Cap text at limit characters, appending a marker when cut.

    Example:
        ```python
        truncate("abcdef", 3)
        # 'abc\\n[truncated]'
        ```
    """
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER

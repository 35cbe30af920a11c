"""Domain error hierarchy.

Each error carries the HTTP status it maps to. The API layer renders any
ThreadcraftError as ``{"error": message}`` with that status.
"""

from fastapi import status


class ThreadcraftError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(ThreadcraftError):
    """Malformed input or a missing required field."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnsupportedMediaTypeError(ThreadcraftError):
    """Request body content type is not accepted by the endpoint."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class RateLimitedError(ThreadcraftError):
    """Caller exceeded the request ceiling for the current window."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"Rate limit exceeded. Try again in {retry_after}s.")
        self.retry_after = retry_after


class UpstreamFetchError(ThreadcraftError):
    """The source URL could not be retrieved."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class ModelGatewayError(ThreadcraftError):
    """The LLM provider rejected the request or returned unusable content."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, upstream_status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


def describe_validation_errors(errors: list[dict]) -> str:
    """Render pydantic/FastAPI validation errors as one human-readable line.

    Example:
        ```python
        describe_validation_errors([{"loc": ("body", "url"), "msg": "Invalid url"}])
        # 'Invalid request: url: Invalid url'
        ```
    """
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Invalid JSON body."

    parts = []
    for error in errors:
        loc = [str(item) for item in error.get("loc", ()) if item != "body"]
        parts.append(f"{'.'.join(loc) or 'body'}: {error.get('msg', 'invalid value')}")
    return f"Invalid request: {'; '.join(parts)}"

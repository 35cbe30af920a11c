"""Domain entities for internal representation.

These are plain dataclasses used internally by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.
"""

from .cache_entry import CacheEntryEntity
from .extracted_content import ExtractedContentEntity
from .rate_limit_state import RateLimitDecision, RateLimitState

__all__ = [
    "CacheEntryEntity",
    "ExtractedContentEntity",
    "RateLimitDecision",
    "RateLimitState",
]

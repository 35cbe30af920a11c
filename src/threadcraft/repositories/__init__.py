"""Repository layer for data access.

This layer hides external dependencies (process memory, source websites,
LLM provider APIs) behind protocol-based interfaces. This enables:
- Swapping implementations without changing services
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
"""

from threadcraft.protocols import CacheStore, ContentFetcher, ModelGateway

from .chat_completion_gateway import ChatCompletionGateway
from .http_content_fetcher import HttpContentFetcher
from .memory_cache_repository import InMemoryCacheRepository

__all__ = [
    "CacheStore",
    "ContentFetcher",
    "ModelGateway",
    "ChatCompletionGateway",
    "HttpContentFetcher",
    "InMemoryCacheRepository",
]

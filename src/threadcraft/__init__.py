"""ThreadCraft - article-to-social-content and paper analysis service.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, ContentFetcher, ModelGateway)
    - repositories: In-memory cache, HTTP content fetcher, chat-completion gateway
    - services: Rate limiting, caching, prompts, normalization, orchestration
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from threadcraft.services import normalize_social

    payload, used_default = normalize_social('```json\\n{"thread": [], "linkedin": ""}\\n```')
    ```

For HTTP API:
    ```python
    from threadcraft.api.app import app, create_app
    ```
"""

from threadcraft.config import ProviderConfig, Settings, get_settings, settings
from threadcraft.dto import AnalyzeRequest, GenerateRequest, GenerateResponse, PaperAnalysisResponse
from threadcraft.entities import (
    CacheEntryEntity,
    ExtractedContentEntity,
    RateLimitDecision,
    RateLimitState,
)
from threadcraft.errors import (
    InvalidRequestError,
    ModelGatewayError,
    RateLimitedError,
    ThreadcraftError,
    UnsupportedMediaTypeError,
    UpstreamFetchError,
)
from threadcraft.handlers import AnalysisHandler, GenerationHandler
from threadcraft.protocols import CacheStore, ContentFetcher, ModelGateway
from threadcraft.repositories import (
    ChatCompletionGateway,
    HttpContentFetcher,
    InMemoryCacheRepository,
)
from threadcraft.services import (
    AnalysisService,
    CacheService,
    GenerationService,
    RateLimitService,
    normalize_analysis,
    normalize_social,
)

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    "Settings",
    "ProviderConfig",
    # Protocols (interfaces)
    "CacheStore",
    "ContentFetcher",
    "ModelGateway",
    # Services (business logic)
    "AnalysisService",
    "CacheService",
    "GenerationService",
    "RateLimitService",
    "normalize_analysis",
    "normalize_social",
    # Handlers (HTTP)
    "AnalysisHandler",
    "GenerationHandler",
    # Repositories (data access)
    "ChatCompletionGateway",
    "HttpContentFetcher",
    "InMemoryCacheRepository",
    # Entities (domain models)
    "CacheEntryEntity",
    "ExtractedContentEntity",
    "RateLimitDecision",
    "RateLimitState",
    # DTOs (API contracts)
    "AnalyzeRequest",
    "GenerateRequest",
    "GenerateResponse",
    "PaperAnalysisResponse",
    # Errors
    "ThreadcraftError",
    "InvalidRequestError",
    "UnsupportedMediaTypeError",
    "RateLimitedError",
    "UpstreamFetchError",
    "ModelGatewayError",
]

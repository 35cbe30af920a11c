"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services built once during lifespan and stored in app.state
    - Dependency functions retrieve them from request.app.state
    - No module-level mutable state; the rate limiter and cache live exactly
      as long as the application
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

import httpx
from fastapi import Depends, FastAPI, Request

from threadcraft.config import Settings, settings
from threadcraft.errors import RateLimitedError
from threadcraft.handlers import AnalysisHandler, GenerationHandler
from threadcraft.models import PerformanceMetrics
from threadcraft.repositories import (
    ChatCompletionGateway,
    HttpContentFetcher,
    InMemoryCacheRepository,
)
from threadcraft.services import AnalysisService, CacheService, GenerationService, RateLimitService

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_settings_from_state(request: Request) -> Settings:
    """Dependency injection for the Settings the app was created with."""
    return getattr(request.app.state, "settings", None) or settings


def get_generation_handler(request: Request) -> GenerationHandler:
    """Dependency injection for GenerationHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "generation_handler")


def get_analysis_handler(request: Request) -> AnalysisHandler:
    """Dependency injection for AnalysisHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "analysis_handler")


def get_rate_limiter(request: Request) -> RateLimitService:
    """Dependency injection for RateLimitService from app.state."""
    return _from_state(request, "rate_limiter")


def get_cache_service(request: Request) -> CacheService:
    """Dependency injection for CacheService from app.state."""
    return _from_state(request, "cache_service")


def get_metrics(request: Request) -> PerformanceMetrics:
    """Dependency injection for PerformanceMetrics from app.state."""
    return _from_state(request, "metrics")


def client_identity(request: Request) -> str:
    """Best-effort caller identity for rate limiting.

    First X-Forwarded-For entry, else the socket peer, else "unknown". The
    header is client-controlled, so this is abuse mitigation, not a security
    boundary.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[RateLimitService, Depends(get_rate_limiter)],
) -> None:
    """Reject the request with 429 once the caller exceeds the window ceiling.

    Raises:
        RateLimitedError: With seconds until the caller's window resets
    """
    caller = client_identity(request)
    decision = limiter.check(caller)
    if not decision.allowed:
        logger.info("Rate limited %s for %ss", caller, decision.retry_after)
        raise RateLimitedError(decision.retry_after)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Shared httpx client (closed on shutdown)
    2. Repositories: content fetcher, model gateway, in-memory cache
    3. Services: cache, rate limiter, generation, analysis
    4. Handlers: generation and analysis

    Tests may set ``app.state.transport`` before startup to route every
    outbound HTTP call through an ``httpx.MockTransport``.
    """
    config: Settings = getattr(app.state, "settings", None) or settings
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = httpx.AsyncClient(
        transport=getattr(app.state, "transport", None),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )

    fetcher = HttpContentFetcher(client, config)
    gateway = ChatCompletionGateway(client, config)
    repository = InMemoryCacheRepository(ttl=config.cache_ttl, max_entries=config.cache_max_entries)
    cache_service = CacheService.create(repository=repository)
    rate_limiter = RateLimitService(
        max_requests=config.rate_limit_max_requests,
        window_seconds=config.rate_limit_window_seconds,
        max_keys=config.rate_limit_max_keys,
    )
    metrics = PerformanceMetrics()

    generation_service = GenerationService.create(
        fetcher=fetcher,
        gateway=gateway,
        cache=cache_service,
        metrics=metrics,
        config=config,
    )
    analysis_service = AnalysisService.create(
        fetcher=fetcher,
        gateway=gateway,
        metrics=metrics,
        config=config,
    )

    app.state.http_client = client
    app.state.cache_service = cache_service
    app.state.rate_limiter = rate_limiter
    app.state.metrics = metrics
    app.state.generation_handler = GenerationHandler(generation_service=generation_service)
    app.state.analysis_handler = AnalysisHandler(analysis_service=analysis_service, config=config)

    provider = config.resolve_provider()
    if provider:
        logger.info("LLM provider: %s (%s)", provider.provider, provider.model)
    else:
        logger.warning("No LLM credentials configured; /api/generate will return stub content")
    logger.info(
        "Rate limit: %d requests / %gs; cache TTL: %ds",
        config.rate_limit_max_requests,
        config.rate_limit_window_seconds,
        config.cache_ttl,
    )

    try:
        yield
    finally:
        await client.aclose()
        del app.state.analysis_handler
        del app.state.generation_handler
        del app.state.metrics
        del app.state.rate_limiter
        del app.state.cache_service
        del app.state.http_client
        logger.info("ThreadCraft API shut down")


# Type aliases for cleaner dependency injection
GenerationHandlerDep = Annotated[GenerationHandler, Depends(get_generation_handler)]
AnalysisHandlerDep = Annotated[AnalysisHandler, Depends(get_analysis_handler)]
CacheServiceDep = Annotated[CacheService, Depends(get_cache_service)]
RateLimiterDep = Annotated[RateLimitService, Depends(get_rate_limiter)]
MetricsDep = Annotated[PerformanceMetrics, Depends(get_metrics)]
SettingsDep = Annotated[Settings, Depends(get_settings_from_state)]

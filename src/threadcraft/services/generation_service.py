"""Social content generation service.

Orchestrates one request:
    cache lookup -> fetch article -> build prompt -> model call (or stub)
    -> normalize -> cache write.

Nothing is written to the cache unless every step completed.
"""

import logging
import time

from threadcraft.config import ProviderConfig, Settings, settings
from threadcraft.dto import (
    ContentCounts,
    GenerateRequest,
    GenerateResponse,
    GenerationMeta,
    GenerationOptions,
    SourceInfo,
)
from threadcraft.errors import ModelGatewayError
from threadcraft.models import PerformanceMetrics
from threadcraft.protocols import ContentFetcher, ModelGateway
from threadcraft.services.cache_service import CacheService, fingerprint
from threadcraft.services.normalizer import normalize_social
from threadcraft.services.prompt_builder import SOCIAL_SYSTEM_PROMPT, build_social_prompt

logger = logging.getLogger(__name__)

# Returned instead of a model call when no provider credentials are configured
STUB_RESPONSE = """STUB_RESPONSE:
Hook: 1-2 sentence compelling opener 🧵 1/4
Insight 1: Concrete takeaway 🧵 2/4
Insight 2: Concrete takeaway 🧵 3/4
CTA. [URL] @account1 @account2 @account3 #tag1 #tag2 🧵 4/4

LinkedIn:
🚀 A strong opening hook.

💡 Key insight 1 with actionable value
📈 Key insight 2 with practical application
🎯 Key insight 3 with clear takeaway

What's your experience with this topic?

Read the full article: [URL]

#Industry #Growth #Innovation"""


async def call_model(
    gateway: ModelGateway,
    metrics: PerformanceMetrics,
    prompt: str,
    provider: ProviderConfig,
    system_prompt: str,
    temperature: float,
    json_mode: bool = False,
) -> str:
    """Call the gateway and record duration and outcome in metrics."""
    start_time = time.time()
    try:
        text = await gateway.complete(
            prompt,
            provider,
            system_prompt=system_prompt,
            temperature=temperature,
            json_mode=json_mode,
        )
    except ModelGatewayError as e:
        metrics.record_llm_call((time.time() - start_time) * 1000, failed=True)
        logger.error("Model call to %s/%s failed: %s", provider.provider, provider.model, e)
        raise
    duration_ms = (time.time() - start_time) * 1000
    metrics.record_llm_call(duration_ms)
    logger.info("Model %s answered in %.0fms", provider.model, duration_ms)
    return text


class GenerationService:
    """Turns an article URL into an X thread and a LinkedIn post.

    Example:
        ```python
        service = GenerationService.create(fetcher=fetcher, gateway=gateway, cache=cache)
        response = await service.generate(GenerateRequest(url="https://example.com/post"))
        print(response.thread[0])
        ```
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        gateway: ModelGateway,
        cache: CacheService,
        metrics: PerformanceMetrics | None = None,
        config: Settings | None = None,
    ) -> None:
        """Initialize the generation service.

        Args:
            fetcher: Article fetcher (required).
            gateway: Model gateway (required).
            cache: Result cache (required).
            metrics: Shared metrics. Defaults to a fresh instance.
            config: Settings for provider resolution. Defaults to settings.
        """
        self._fetcher = fetcher
        self._gateway = gateway
        self._cache = cache
        self._metrics = metrics or PerformanceMetrics()
        self._settings = config or settings

    @classmethod
    def create(
        cls,
        fetcher: ContentFetcher,
        gateway: ModelGateway,
        cache: CacheService,
        metrics: PerformanceMetrics | None = None,
        config: Settings | None = None,
    ) -> "GenerationService":
        """Factory method to create GenerationService."""
        return cls(fetcher=fetcher, gateway=gateway, cache=cache, metrics=metrics, config=config)

    def resolve_provider(self, request: GenerateRequest) -> ProviderConfig | None:
        """Pick request-supplied OpenRouter credentials, else the server provider."""
        if request.api_key:
            return ProviderConfig(
                provider="openrouter",
                api_key=request.api_key,
                model=request.model or self._settings.openrouter_model,
            )
        return self._settings.resolve_provider()

    @staticmethod
    def cache_key(request: GenerateRequest) -> str:
        """Fingerprint of the URL and style options."""
        return fingerprint(
            url=request.url,
            thread_type=request.thread_type,
            tone=request.tone,
            industry=request.industry,
        )

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate (or return cached) social content for an article.

        Args:
            request: Validated generation request

        Returns:
            GenerateResponse; ``cached`` is True when served from cache

        Raises:
            UpstreamFetchError: If the article cannot be fetched
            ModelGatewayError: If the provider call fails
        """
        key = self.cache_key(request)
        cached = self._cache.get(key)
        if cached is not None:
            self._metrics.record_hit()
            logger.info("Cache hit for %s", request.url)
            return cached.model_copy(update={"cached": True})
        self._metrics.record_miss()

        content = await self._fetcher.fetch_article(request.url)
        prompt = build_social_prompt(
            content,
            thread_type=request.thread_type,
            tone=request.tone,
            industry=request.industry,
        )

        provider = self.resolve_provider(request)
        if provider is None:
            logger.info("No LLM provider configured; using stub response")
            self._metrics.record_stub()
            raw = STUB_RESPONSE
        else:
            raw = await call_model(
                self._gateway,
                self._metrics,
                prompt,
                provider,
                system_prompt=SOCIAL_SYSTEM_PROMPT,
                temperature=0.7,
            )

        social, fallback = normalize_social(raw)
        if fallback and provider is not None:
            self._metrics.record_fallback()
            logger.warning("Unparseable model output for %s; using default content", request.url)

        thread, linkedin = social["thread"], social["linkedin"]
        response = GenerateResponse(
            thread=thread,
            linkedin=linkedin,
            source=SourceInfo(title=content.title, site_name=content.site_name, url=content.url),
            meta=GenerationMeta(
                options=GenerationOptions(
                    thread_type=request.thread_type,
                    tone=request.tone,
                    industry=request.industry,
                ),
                counts=ContentCounts(x=[len(t) for t in thread], linkedin=len(linkedin)),
                model=provider.model if provider else "Unknown",
            ),
        )

        self._cache.put(key, response)
        return response

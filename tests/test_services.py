"""
Tests for the generation and analysis services using in-memory fakes.
"""

import asyncio
import json

import pytest

from conftest import make_settings
from threadcraft.config import ProviderConfig
from threadcraft.dto import GenerateRequest
from threadcraft.entities import ExtractedContentEntity
from threadcraft.errors import ModelGatewayError, UpstreamFetchError
from threadcraft.models import PerformanceMetrics
from threadcraft.protocols import CacheStore, ContentFetcher, ModelGateway
from threadcraft.repositories import InMemoryCacheRepository
from threadcraft.services import AnalysisService, CacheService, GenerationService
from threadcraft.utils import TRUNCATION_MARKER


class FakeFetcher:
    def __init__(self, pdf: bool = False, fail: bool = False) -> None:
        self.pdf = pdf
        self.fail = fail
        self.article_calls: list[str] = []
        self.document_calls: list[str] = []

    async def fetch_article(self, url: str) -> ExtractedContentEntity:
        self.article_calls.append(url)
        if self.fail:
            raise UpstreamFetchError("Fetch failed: 500 Internal Server Error", upstream_status=500)
        return ExtractedContentEntity(url=url, title="Post", site_name="Blog", text="Body")

    async def fetch_document(self, url: str) -> bytes:
        self.document_calls.append(url)
        return b"%PDF-1.4"

    async def is_pdf(self, url: str) -> bool:
        return self.pdf


class FakeGateway:
    def __init__(self, reply: str = "", error: ModelGatewayError | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def complete(self, prompt, provider, system_prompt, temperature=0.7, json_mode=False):
        self.calls.append(
            {
                "prompt": prompt,
                "provider": provider,
                "temperature": temperature,
                "json_mode": json_mode,
            }
        )
        if self.error:
            raise self.error
        return self.reply


def make_generation(fetcher=None, gateway=None, **overrides):
    metrics = PerformanceMetrics()
    service = GenerationService.create(
        fetcher=fetcher or FakeFetcher(),
        gateway=gateway or FakeGateway(),
        cache=CacheService.create(InMemoryCacheRepository(ttl=3600, max_entries=10)),
        metrics=metrics,
        config=make_settings(**overrides),
    )
    return service, metrics


def test_stub_generation_is_cached():
    """Without credentials the stub path runs once, then the cache answers."""
    fetcher, gateway = FakeFetcher(), FakeGateway()
    service, metrics = make_generation(fetcher, gateway)
    request = GenerateRequest(url="https://example.com/post")

    first = asyncio.run(service.generate(request))
    second = asyncio.run(service.generate(request))

    assert first.cached is False
    assert second.cached is True
    assert second.thread == first.thread
    assert fetcher.article_calls == ["https://example.com/post"]
    assert gateway.calls == []
    assert metrics.stub_responses == 1
    assert metrics.cache_hits == 1


def test_generation_uses_server_provider():
    gateway = FakeGateway(json.dumps({"thread": ["t1"], "linkedin": "post"}))
    service, _ = make_generation(gateway=gateway, openai_api_key="sk-oa", openai_model="gpt-4o-mini")

    response = asyncio.run(service.generate(GenerateRequest(url="https://example.com/post")))

    assert response.thread == ["t1"]
    assert response.meta.model == "gpt-4o-mini"
    assert response.meta.counts.x == [2]
    call = gateway.calls[0]
    assert call["provider"].provider == "openai"
    assert call["temperature"] == 0.7
    assert call["json_mode"] is False


def test_request_key_overrides_server_provider():
    service, _ = make_generation(openai_api_key="sk-oa")
    request = GenerateRequest(url="https://example.com", apiKey="sk-user")

    provider = service.resolve_provider(request)
    assert provider == ProviderConfig(
        provider="openrouter", api_key="sk-user", model=make_settings().openrouter_model
    )


def test_failed_fetch_is_not_cached():
    fetcher = FakeFetcher(fail=True)
    service, _ = make_generation(fetcher)
    request = GenerateRequest(url="https://example.com/post")

    for _ in range(2):
        with pytest.raises(UpstreamFetchError):
            asyncio.run(service.generate(request))
    assert len(fetcher.article_calls) == 2


def test_failed_model_call_is_recorded():
    gateway = FakeGateway(error=ModelGatewayError("OpenRouter error: 503", upstream_status=503))
    service, metrics = make_generation(gateway=gateway, openrouter_api_key="sk-or")

    with pytest.raises(ModelGatewayError):
        asyncio.run(service.generate(GenerateRequest(url="https://example.com/post")))
    assert metrics.llm_calls == 1
    assert metrics.llm_failures == 1


def test_cache_key_ignores_credentials():
    with_key = GenerateRequest(url="https://example.com", apiKey="sk-1", model="a/b")
    without_key = GenerateRequest(url="https://example.com")
    assert GenerationService.cache_key(with_key) == GenerationService.cache_key(without_key)


PROVIDER = ProviderConfig(provider="openrouter", api_key="sk-or", model="openai/gpt-4o")


def make_analysis(fetcher=None, gateway=None, **overrides):
    return AnalysisService.create(
        fetcher=fetcher or FakeFetcher(),
        gateway=gateway or FakeGateway("{}"),
        config=make_settings(**overrides),
    )


def test_analyze_pdf_url_embeds_document():
    fetcher, gateway = FakeFetcher(pdf=True), FakeGateway('{"core_contribution": "X"}')
    service = make_analysis(fetcher, gateway)

    result = asyncio.run(service.analyze_url("https://arxiv.org/abs/1", PROVIDER))

    assert result.core_contribution == "X"
    assert result.metadata.link == "https://arxiv.org/abs/1"
    assert fetcher.document_calls == ["https://arxiv.org/abs/1"]
    assert "PDF_BASE64:\nJVBERi0xLjQ=" in gateway.calls[0]["prompt"]
    assert gateway.calls[0]["json_mode"] is True
    assert gateway.calls[0]["temperature"] == 0.2


def test_analyze_web_url_passes_link():
    fetcher, gateway = FakeFetcher(pdf=False), FakeGateway("{}")
    service = make_analysis(fetcher, gateway)

    asyncio.run(service.analyze_url("https://example.com/paper", PROVIDER))

    assert fetcher.document_calls == []
    assert "URL: https://example.com/paper" in gateway.calls[0]["prompt"]


def test_encode_document_respects_budget():
    service = make_analysis(document_max_chars=8)
    assert service.encode_document(b"%PDF-1.4 long document") == "JVBERi0x" + TRUNCATION_MARKER


def test_fakes_and_implementations_satisfy_protocols():
    assert isinstance(FakeFetcher(), ContentFetcher)
    assert isinstance(FakeGateway(), ModelGateway)
    assert isinstance(InMemoryCacheRepository(ttl=1, max_entries=1), CacheStore)


class SlowGateway(FakeGateway):
    async def complete(self, prompt, provider, system_prompt, temperature=0.7, json_mode=False):
        await asyncio.sleep(10)
        return json.dumps({"thread": ["late"], "linkedin": "late"})


def test_cancelled_generation_is_not_cached():
    """A request abandoned mid-call leaves nothing behind in the cache."""
    repository = InMemoryCacheRepository(ttl=3600, max_entries=10)
    service = GenerationService.create(
        fetcher=FakeFetcher(),
        gateway=SlowGateway(),
        cache=CacheService.create(repository),
        metrics=PerformanceMetrics(),
        config=make_settings(openrouter_api_key="sk-or"),
    )
    request = GenerateRequest(url="https://example.com/post")

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(asyncio.wait_for(service.generate(request), timeout=0.01))
    assert repository.count_all() == 0


def test_encode_large_document_reads_only_the_head():
    """Bytes past the budget never reach the encoder output."""
    service = make_analysis(document_max_chars=12)
    encoded = service.encode_document(b"%PDF-1.4" + b"\xff" * (5 * 1024 * 1024))
    assert encoded == "JVBERi0xLjT/" + TRUNCATION_MARKER

#!/usr/bin/env python3
"""
Demo script for ThreadCraft.

Shows output normalization, the rate limiter window, and one end-to-end
generation against a live article URL (stub content unless provider
credentials are configured).

Usage:
    python scripts/demo.py [ARTICLE_URL]
"""

import asyncio
import sys

import httpx

from threadcraft import (
    CacheService,
    ChatCompletionGateway,
    GenerateRequest,
    GenerationService,
    HttpContentFetcher,
    InMemoryCacheRepository,
    RateLimitService,
    normalize_analysis,
    normalize_social,
    settings,
)


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_normalizer() -> None:
    """Show how messy model output is recovered."""
    print_section("Response Normalizer")

    samples = [
        ("plain JSON", '{"thread": ["Hello 🧵 1/1"], "linkedin": "Post"}'),
        ("code fenced", '```json\n{"thread": ["Fenced 🧵 1/1"], "linkedin": "Post"}\n```'),
        ("prose around", 'Sure! {"thread": ["Embedded 🧵 1/1"], "linkedin": "Post"} Enjoy.'),
        ("not JSON", "I cannot do that."),
    ]
    for label, raw in samples:
        payload, used_default = normalize_social(raw)
        marker = "default" if used_default else "parsed"
        print(f"  {label:<13} -> [{marker}] {payload['thread'][0][:50]}")

    analysis, _ = normalize_analysis('{"metadata": {"title": "A Paper"}}', link="https://arxiv.org/abs/1706.03762")
    print(f"\n  analysis link pinned -> {analysis['metadata']['link']}")
    print(f"  missing fields filled -> authors={analysis['metadata']['authors']}")


def demo_rate_limiter() -> None:
    """Walk a caller through a window with a fake clock."""
    print_section("Rate Limiter")

    now = [0.0]
    limiter = RateLimitService(max_requests=3, window_seconds=60, clock=lambda: now[0])

    for i in range(1, 5):
        decision = limiter.check("203.0.113.7")
        status = "allowed" if decision.allowed else f"denied, retry in {decision.retry_after}s"
        print(f"  request {i} at t={now[0]:>4.0f}s: {status}")
        now[0] += 10

    now[0] = 61
    decision = limiter.check("203.0.113.7")
    print(f"  request 5 at t={now[0]:>4.0f}s: {'allowed' if decision.allowed else 'denied'} (new window)")


async def demo_generation(url: str) -> None:
    """Generate a thread twice to show the cache."""
    print_section("Generation")

    provider = settings.resolve_provider()
    print(f"  provider: {provider.provider + '/' + provider.model if provider else 'none (stub mode)'}")

    async with httpx.AsyncClient() as client:
        service = GenerationService.create(
            fetcher=HttpContentFetcher(client),
            gateway=ChatCompletionGateway(client),
            cache=CacheService.create(InMemoryCacheRepository.create()),
        )
        request = GenerateRequest(url=url)
        for attempt in (1, 2):
            response = await service.generate(request)
            print(f"\n  attempt {attempt}: cached={response.cached} title={response.source.title!r}")
            for tweet in response.thread:
                print(f"    - {tweet[:90]}")


def main() -> None:
    url = sys.argv[1] if len(sys.argv) > 1 else "https://example.com"

    print("\n" + "🧵" * 35)
    print("  ThreadCraft Demo")
    print("🧵" * 35)

    demo_normalizer()
    demo_rate_limiter()
    asyncio.run(demo_generation(url))

    print_section("Demo Complete")


if __name__ == "__main__":
    main()

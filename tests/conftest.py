"""
Shared pytest fixtures for ThreadCraft tests.

Outbound HTTP (source pages and LLM providers) never leaves the process:
every client is wired to an ``httpx.MockTransport`` backed by ``Upstream``.
"""

import json
from collections.abc import Callable
from contextlib import contextmanager

import httpx
import pytest
from fastapi.testclient import TestClient

from threadcraft.api.app import create_app
from threadcraft.config import Settings

ARTICLE_URL = "https://example.com/posts/launch-day"
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"

ARTICLE_HTML = """
<html>
  <head>
    <title>Launch Day | Example Blog</title>
    <meta property="og:title" content="Launch Day">
    <meta property="og:site_name" content="Example Blog">
    <meta name="description" content="How we shipped version one.">
    <script>window.tracking = true;</script>
  </head>
  <body>
    <nav><p>Home</p><p>About</p></nav>
    <header><p>Subscribe now</p></header>
    <h1>Launch Day</h1>
    <p>We shipped version one after six months of work.</p>
    <ul><li>Faster builds</li><li><p>Smaller bundles</p></li></ul>
    <footer><p>Copyright 2024</p></footer>
  </body>
</html>
"""


def chat_completion(content: str) -> dict:
    """Minimal OpenAI-compatible chat completion body."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's environment."""
    values = {
        "llm_provider": "",
        "openrouter_api_key": None,
        "openai_api_key": None,
        "openrouter_base_url": "https://openrouter.ai/api/v1",
        "openai_base_url": "https://api.openai.com/v1",
        "rate_limit_max_requests": 20,
        "rate_limit_window_seconds": 600,
        "cache_ttl": 3600,
        "llm_timeout_seconds": 5,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


class Upstream:
    """Scripted stand-in for every remote server the app talks to."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method.upper(), url)] = responder

    def html(self, url: str, body: str, status_code: int = 200) -> None:
        self.add(
            "GET",
            url,
            lambda request: httpx.Response(
                status_code, text=body, headers={"content-type": "text/html"}
            ),
        )

    def chat(self, content: str, url: str = OPENROUTER_URL) -> None:
        self.add("POST", url, lambda request: httpx.Response(200, json=chat_completion(content)))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, str(request.url)))
        if responder is None:
            return httpx.Response(404, text="not found")
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]

    def json_bodies_to(self, url: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests_to(url)]


@pytest.fixture
def upstream():
    """Upstream with a reachable article page."""
    server = Upstream()
    server.html(ARTICLE_URL, ARTICLE_HTML)
    return server


@pytest.fixture
def build_client(upstream):
    """Factory for a TestClient running the full lifespan with custom settings."""

    @contextmanager
    def _build(**overrides):
        app = create_app(config=make_settings(**overrides), transport=upstream.transport)
        with TestClient(app) as client:
            yield client

    return _build


@pytest.fixture
def client(build_client):
    """Test client with no LLM credentials (stub mode)."""
    with build_client() as test_client:
        yield test_client

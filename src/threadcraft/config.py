import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

SUPPORTED_PROVIDERS = ("openrouter", "openai")


@dataclass(frozen=True)
class ProviderConfig:
    """Resolved LLM provider selection for a single call."""

    provider: str
    api_key: str
    model: str


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # LLM provider
    llm_provider: str = os.getenv("LLM_PROVIDER", "").strip().lower()
    openrouter_api_key: str | None = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3.7-sonnet")
    openrouter_base_url: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    llm_timeout_seconds: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    app_referer: str = os.getenv("APP_REFERER", "https://threadcraft.ai")
    app_title: str = os.getenv("APP_TITLE", "ThreadCraft")

    # Content fetching
    user_agent: str = os.getenv("FETCH_USER_AGENT", "ThreadCraftBot/0.1")
    fetch_timeout_seconds: float = float(os.getenv("FETCH_TIMEOUT_SECONDS", "15"))
    article_max_chars: int = int(os.getenv("ARTICLE_MAX_CHARS", "1200"))
    document_max_chars: int = int(os.getenv("DOCUMENT_MAX_CHARS", "400000"))
    upload_max_bytes: int = int(os.getenv("UPLOAD_MAX_BYTES", str(20 * 1024 * 1024)))

    # Rate limiting (20 requests per 10 minutes by default)
    rate_limit_max_requests: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "20"))
    rate_limit_window_seconds: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "600"))
    rate_limit_max_keys: int = int(os.getenv("RATE_LIMIT_MAX_KEYS", "10000"))

    # Result cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "3600"))  # 1 hour default
    cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "1000"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.llm_provider and self.llm_provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"LLM_PROVIDER must be one of {list(SUPPORTED_PROVIDERS)}, got {self.llm_provider!r}"
            )

        if self.rate_limit_max_requests < 1:
            raise ValueError("RATE_LIMIT_MAX_REQUESTS must be at least 1")

        if self.rate_limit_window_seconds <= 0:
            raise ValueError("RATE_LIMIT_WINDOW_SECONDS must be positive")

        if self.cache_ttl < 0:
            raise ValueError("CACHE_TTL must not be negative")

    def base_url_for(self, provider: str) -> str:
        """Return the chat-completions base URL for a provider."""
        if provider == "openai":
            return self.openai_base_url
        return self.openrouter_base_url

    def resolve_provider(self) -> ProviderConfig | None:
        """Pick the provider configured through the environment.

        An explicit LLM_PROVIDER wins. Without one, the first provider with a
        key is used (OpenRouter before OpenAI).

        Returns:
            ProviderConfig, or None when no credentials are configured.
        """
        candidates = {
            "openrouter": (self.openrouter_api_key, self.openrouter_model),
            "openai": (self.openai_api_key, self.openai_model),
        }

        if self.llm_provider:
            key, model = candidates[self.llm_provider]
            if not key:
                return None
            return ProviderConfig(provider=self.llm_provider, api_key=key, model=model)

        for provider, (key, model) in candidates.items():
            if key:
                return ProviderConfig(provider=provider, api_key=key, model=model)
        return None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()

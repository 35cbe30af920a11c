"""Request DTOs for API endpoints."""

from enum import Enum
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ThreadType(str, Enum):
    REGULAR = "regular"
    VIRAL = "viral"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    ENGAGING = "engaging"


class Industry(str, Enum):
    GENERAL = "general"
    SAAS = "saas"
    DEVELOPER = "developer"
    MARKETING = "marketing"
    AI = "ai"
    PRODUCT = "product"
    DESIGN = "design"
    FINANCE = "finance"
    HEALTH = "health"
    EDUCATION = "education"


def validate_http_url(value: str) -> str:
    """Require an absolute http(s) URL."""
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid url")
    return value


class GenerateRequest(BaseModel):
    """Request DTO for social content generation.

    Credentials are optional; without them the server-side provider (or the
    stub response) is used.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, validate_default=True)

    url: str = Field(..., description="Article URL", min_length=1, max_length=2048)
    thread_type: ThreadType = Field(
        ThreadType.REGULAR,
        validation_alias=AliasChoices("threadType", "thread_type"),
        description="Thread style",
    )
    tone: Tone = Field(Tone.PROFESSIONAL, description="Writing tone")
    industry: Industry = Field(Industry.GENERAL, description="Audience industry")
    api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("apiKey", "openrouterApiKey", "api_key"),
        description="Optional OpenRouter API key overriding the server configuration",
    )
    model: str | None = Field(
        None,
        validation_alias=AliasChoices("model", "openrouterModel"),
        description="Optional OpenRouter model name",
    )

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return validate_http_url(value)


class AnalyzeRequest(BaseModel):
    """Request DTO for paper analysis (JSON body or multipart form fields)."""

    model_config = ConfigDict(populate_by_name=True)

    url: str | None = Field(None, description="PDF or preprint URL", max_length=2048)
    api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("apiKey", "openrouterApiKey", "api_key"),
        description="OpenRouter API key",
    )
    model: str | None = Field(
        None,
        validation_alias=AliasChoices("model", "openrouterModel"),
        description="OpenRouter model name",
    )

    @field_validator("url")
    @classmethod
    def check_optional_url(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return validate_http_url(value)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip() and self.model and self.model.strip())

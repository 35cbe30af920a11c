"""Response DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class SourceInfo(BaseModel):
    """The article the content was generated from."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Article title")
    site_name: str | None = Field(None, alias="siteName", description="Publisher name")
    url: str = Field(..., description="Article URL")


class GenerationOptions(BaseModel):
    """Style options echoed back in the response."""

    model_config = ConfigDict(populate_by_name=True)

    thread_type: str = Field(..., alias="threadType")
    tone: str
    industry: str


class ContentCounts(BaseModel):
    """Character counts of the generated content."""

    x: list[int] = Field(default_factory=list, description="Length of each tweet")
    linkedin: int = Field(0, description="Length of the LinkedIn post", ge=0)


class GenerationMeta(BaseModel):
    """Generation metadata."""

    options: GenerationOptions
    counts: ContentCounts
    model: str = Field("Unknown", description="Model that produced the content")


class GenerateResponse(BaseModel):
    """Response DTO for social content generation."""

    thread: list[str] = Field(..., description="X/Twitter thread, one entry per tweet")
    linkedin: str = Field(..., description="LinkedIn post text")
    source: SourceInfo
    meta: GenerationMeta
    cached: bool = Field(False, description="Whether the result was served from cache")


class PaperMetadata(BaseModel):
    title: str = ""
    authors: list[str] = Field(default_factory=list)
    venue_year: str = ""
    link: str = ""
    code_or_data: str = ""


class Significance(BaseModel):
    classification: str = ""
    justification: str = ""


class PaperAnalysisResponse(BaseModel):
    """Response DTO for research paper analysis."""

    metadata: PaperMetadata = Field(default_factory=PaperMetadata)
    core_contribution: str = ""
    innovations_methodology: list[str] = Field(default_factory=list)
    significance: Significance = Field(default_factory=Significance)
    limitations: list[str] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)
    plain_english_summary: str = ""


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(..., description="Human-readable error message")
    retry_after: int | None = Field(
        None,
        alias="retryAfter",
        description="Seconds until the rate limit window resets (429 only)",
    )


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy'")
    provider: str | None = Field(None, description="Configured LLM provider, if any")
    model: str | None = Field(None, description="Configured model, if any")
    stub_mode: bool = Field(..., description="True when no provider credentials are configured")

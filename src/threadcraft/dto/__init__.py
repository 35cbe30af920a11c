"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import AnalyzeRequest, GenerateRequest, Industry, ThreadType, Tone
from .responses import (
    ContentCounts,
    ErrorResponse,
    GenerateResponse,
    GenerationMeta,
    GenerationOptions,
    HealthCheckResponse,
    PaperAnalysisResponse,
    PaperMetadata,
    Significance,
    SourceInfo,
)

__all__ = [
    "GenerateRequest",
    "AnalyzeRequest",
    "ThreadType",
    "Tone",
    "Industry",
    "SourceInfo",
    "GenerationOptions",
    "ContentCounts",
    "GenerationMeta",
    "GenerateResponse",
    "PaperMetadata",
    "Significance",
    "PaperAnalysisResponse",
    "ErrorResponse",
    "HealthCheckResponse",
]

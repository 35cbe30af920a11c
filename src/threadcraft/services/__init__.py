"""Service layer for business logic.

Services coordinate repositories through their protocols and never touch
HTTP request/response objects.
"""

from .analysis_service import AnalysisService
from .cache_service import CacheService, fingerprint
from .generation_service import GenerationService
from .normalizer import normalize_analysis, normalize_social, parse_json_object
from .rate_limit_service import RateLimitService

__all__ = [
    "AnalysisService",
    "CacheService",
    "GenerationService",
    "RateLimitService",
    "fingerprint",
    "normalize_analysis",
    "normalize_social",
    "parse_json_object",
]

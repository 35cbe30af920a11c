"""HTTP handlers layer.

Handlers process HTTP requests and delegate to services.
"""

from .analysis_handler import AnalysisHandler
from .generation_handler import GenerationHandler

__all__ = ["AnalysisHandler", "GenerationHandler"]

"""HTTP handler for social content generation.

Handlers convert between DTOs (API contracts) and service calls.
They own HTTP concerns like error mapping.
"""

import logging

from threadcraft.dto import GenerateRequest, GenerateResponse
from threadcraft.errors import ThreadcraftError
from threadcraft.services import GenerationService

logger = logging.getLogger(__name__)


class GenerationHandler:
    """HTTP handler for POST /api/generate.

    Domain errors pass through untouched (the app renders them with their
    own status); anything unexpected becomes a 500 with the error message.
    """

    def __init__(self, generation_service: GenerationService) -> None:
        """Initialize the handler.

        Args:
            generation_service: The generation service (required).
        """
        self._service = generation_service

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Handle POST /api/generate requests.

        Args:
            request: The validated request DTO

        Returns:
            GenerateResponse with thread, LinkedIn post, source and meta

        Raises:
            ThreadcraftError: On fetch, gateway or unexpected failures
        """
        try:
            return await self._service.generate(request)
        except ThreadcraftError:
            raise
        except Exception as e:
            logger.exception("Generation failed for %s", request.url)
            raise ThreadcraftError(str(e) or "Unexpected server error.") from e

"""HTTP handler for research paper analysis.

Accepts either a JSON body ``{url, apiKey, model}`` or a multipart form
with a ``file`` PDF plus the same fields.
"""

import logging

from fastapi import Request
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from threadcraft.config import ProviderConfig, Settings, settings
from threadcraft.dto import AnalyzeRequest, PaperAnalysisResponse
from threadcraft.errors import InvalidRequestError, ThreadcraftError, describe_validation_errors
from threadcraft.services import AnalysisService

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class AnalysisHandler:
    """HTTP handler for POST /api/research/analyze."""

    def __init__(self, analysis_service: AnalysisService, config: Settings | None = None) -> None:
        """Initialize the handler.

        Args:
            analysis_service: The analysis service (required).
            config: Settings for the upload size ceiling. Defaults to settings.
        """
        self._service = analysis_service
        self._settings = config or settings

    @staticmethod
    def _parse(fields: dict) -> AnalyzeRequest:
        try:
            return AnalyzeRequest.model_validate(fields)
        except ValidationError as e:
            raise InvalidRequestError(describe_validation_errors(e.errors())) from e

    @staticmethod
    def _provider(body: AnalyzeRequest) -> ProviderConfig:
        if not body.has_credentials:
            raise InvalidRequestError("Missing OpenRouter credentials")
        return ProviderConfig(provider="openrouter", api_key=body.api_key.strip(), model=body.model.strip())

    async def analyze(self, request: Request) -> PaperAnalysisResponse:
        """Handle POST /api/research/analyze requests.

        Args:
            request: The raw request (JSON or multipart)

        Returns:
            PaperAnalysisResponse conforming to the analysis schema

        Raises:
            InvalidRequestError: On missing credentials, file or URL
            ThreadcraftError: On fetch, gateway or unexpected failures
        """
        content_type = request.headers.get("content-type", "")
        try:
            if "multipart/form-data" in content_type:
                return await self._analyze_form(request)
            return await self._analyze_json(request)
        except ThreadcraftError:
            raise
        except Exception as e:
            logger.exception("Analysis failed")
            raise ThreadcraftError(str(e) or "Internal error") from e

    async def _analyze_json(self, request: Request) -> PaperAnalysisResponse:
        try:
            fields = await request.json()
        except ValueError as e:
            raise InvalidRequestError("Invalid JSON body.") from e
        if not isinstance(fields, dict):
            raise InvalidRequestError("Invalid request: body: expected a JSON object")

        body = self._parse(fields)
        provider = self._provider(body)
        if not body.url:
            raise InvalidRequestError(
                "Provide a PDF or preprint URL or upload a PDF via multipart/form-data"
            )
        return await self._service.analyze_url(body.url, provider)

    async def _analyze_form(self, request: Request) -> PaperAnalysisResponse:
        form = await request.form()
        upload = form.get("file")
        fields = {key: value for key, value in form.items() if isinstance(value, str)}

        document = await upload.read() if isinstance(upload, UploadFile) else b""
        if not document:
            raise InvalidRequestError("No file uploaded")

        body = self._parse(fields)
        provider = self._provider(body)

        if upload.content_type != PDF_CONTENT_TYPE:
            raise InvalidRequestError("Only PDF uploads are supported")
        if len(document) > self._settings.upload_max_bytes:
            limit_mb = self._settings.upload_max_bytes // (1024 * 1024)
            raise InvalidRequestError(f"PDF too large (max {limit_mb}MB)")

        logger.info("Analyzing uploaded PDF %s (%d bytes)", upload.filename, len(document))
        return await self._service.analyze_upload(document, provider, url=body.url)

"""Research paper analysis service.

PDFs (uploaded, linked directly, or hosted on a preprint server) are
base64-encoded into the prompt. Any other URL is handed to the model as-is.
"""

import base64
import logging

from threadcraft.config import ProviderConfig, Settings, settings
from threadcraft.dto import PaperAnalysisResponse
from threadcraft.models import PerformanceMetrics
from threadcraft.protocols import ContentFetcher, ModelGateway
from threadcraft.services.generation_service import call_model
from threadcraft.services.normalizer import normalize_analysis
from threadcraft.services.prompt_builder import (
    ANALYSIS_SYSTEM_PROMPT,
    build_document_analysis_prompt,
    build_url_analysis_prompt,
)
from threadcraft.utils import truncate

logger = logging.getLogger(__name__)


class AnalysisService:
    """Produces structured analyses of research papers."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        gateway: ModelGateway,
        metrics: PerformanceMetrics | None = None,
        config: Settings | None = None,
    ) -> None:
        """Initialize the analysis service.

        Args:
            fetcher: Document fetcher (required).
            gateway: Model gateway (required).
            metrics: Shared metrics. Defaults to a fresh instance.
            config: Settings for payload budgets. Defaults to settings.
        """
        self._fetcher = fetcher
        self._gateway = gateway
        self._metrics = metrics or PerformanceMetrics()
        self._settings = config or settings

    @classmethod
    def create(
        cls,
        fetcher: ContentFetcher,
        gateway: ModelGateway,
        metrics: PerformanceMetrics | None = None,
        config: Settings | None = None,
    ) -> "AnalysisService":
        """Factory method to create AnalysisService."""
        return cls(fetcher=fetcher, gateway=gateway, metrics=metrics, config=config)

    def encode_document(self, document: bytes) -> str:
        """Base64-encode a PDF, capped at the configured budget.

        Only the leading bytes that can fit the budget are encoded.
        """
        budget = self._settings.document_max_chars
        # One group past the budget so an oversized document still gets the marker
        head = document[: budget // 4 * 3 + 3]
        encoded = base64.b64encode(head).decode("ascii")
        return truncate(encoded, budget)

    async def analyze_url(self, url: str, provider: ProviderConfig) -> PaperAnalysisResponse:
        """Analyze the paper behind a URL.

        Raises:
            UpstreamFetchError: If a PDF target cannot be fetched
            ModelGatewayError: If the provider call fails
        """
        if await self._fetcher.is_pdf(url):
            document = await self._fetcher.fetch_document(url)
            logger.info("Fetched %d byte document from %s", len(document), url)
            prompt = build_document_analysis_prompt(self.encode_document(document), url)
        else:
            prompt = build_url_analysis_prompt(url)
        return await self._analyze(prompt, provider, link=url)

    async def analyze_upload(
        self,
        document: bytes,
        provider: ProviderConfig,
        url: str | None = None,
    ) -> PaperAnalysisResponse:
        """Analyze an uploaded PDF.

        Args:
            document: PDF bytes
            provider: Provider credentials from the request
            url: Optional source URL pinned into metadata.link

        Raises:
            ModelGatewayError: If the provider call fails
        """
        prompt = build_document_analysis_prompt(self.encode_document(document), url)
        return await self._analyze(prompt, provider, link=url)

    async def _analyze(
        self, prompt: str, provider: ProviderConfig, link: str | None
    ) -> PaperAnalysisResponse:
        raw = await call_model(
            self._gateway,
            self._metrics,
            prompt,
            provider,
            system_prompt=ANALYSIS_SYSTEM_PROMPT,
            temperature=0.2,
            json_mode=True,
        )
        analysis, fallback = normalize_analysis(raw, link=link)
        if fallback:
            self._metrics.record_fallback()
            logger.warning("Unparseable analysis output from %s; returning empty fields", provider.model)
        return PaperAnalysisResponse.model_validate(analysis)

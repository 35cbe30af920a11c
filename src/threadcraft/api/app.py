from typing import Any

import httpx
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from threadcraft.api.dependencies import (
    AnalysisHandlerDep,
    CacheServiceDep,
    GenerationHandlerDep,
    MetricsDep,
    RateLimiterDep,
    SettingsDep,
    enforce_rate_limit,
    lifespan,
)
from threadcraft.config import Settings, settings
from threadcraft.dto import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthCheckResponse,
    PaperAnalysisResponse,
)
from threadcraft.errors import (
    RateLimitedError,
    ThreadcraftError,
    UnsupportedMediaTypeError,
    describe_validation_errors,
)

API_PREFIX = "/api/"
ANALYZE_PATH = "/api/research/analyze"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    415: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter()


def _error_body(message: str, retry_after: int | None = None) -> dict[str, Any]:
    return ErrorResponse(error=message, retry_after=retry_after).model_dump(
        by_alias=True, exclude_none=True
    )


async def handle_threadcraft_error(request: Request, exc: ThreadcraftError) -> JSONResponse:
    """Render domain errors as ``{"error": ...}`` with their status code."""
    if isinstance(exc, RateLimitedError):
        return JSONResponse(
            _error_body(exc.message, exc.retry_after),
            status_code=exc.status_code,
            headers={"Retry-After": str(exc.retry_after)},
        )
    return JSONResponse(_error_body(exc.message), status_code=exc.status_code)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body validation failures as 400 instead of FastAPI's 422."""
    return JSONResponse(_error_body(describe_validation_errors(exc.errors())), status_code=400)


async def guard_content_type(request: Request, call_next):
    """Require JSON on API POSTs and add security headers to every response."""
    if request.method == "POST" and request.url.path.startswith(API_PREFIX):
        content_type = request.headers.get("content-type", "")
        accepted = "application/json" in content_type or (
            request.url.path == ANALYZE_PATH and "multipart/form-data" in content_type
        )
        if not accepted:
            error = UnsupportedMediaTypeError("Content-Type must be application/json")
            response = JSONResponse(_error_body(error.message), status_code=error.status_code)
            response.headers.update(SECURITY_HEADERS)
            return response

    response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


@router.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "ThreadCraft API",
        "version": "0.1.0",
        "description": "Turns articles into X threads and LinkedIn posts, and papers into structured analyses",
        "endpoints": {
            "generate": "/api/generate",
            "analyze": ANALYZE_PATH,
            "stats": "/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@router.get("/health", response_model=HealthCheckResponse)
async def health(config: SettingsDep) -> HealthCheckResponse:
    """Health check endpoint."""
    provider = config.resolve_provider()
    return HealthCheckResponse(
        status="healthy",
        provider=provider.provider if provider else None,
        model=provider.model if provider else None,
        stub_mode=provider is None,
    )


@router.post(
    "/api/generate",
    response_model=GenerateResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(enforce_rate_limit)],
)
async def generate(body: GenerateRequest, handler: GenerationHandlerDep) -> GenerateResponse:
    """Generate an X thread and a LinkedIn post from an article URL."""
    return await handler.generate(body)


@router.post(
    ANALYZE_PATH,
    response_model=PaperAnalysisResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(enforce_rate_limit)],
)
async def analyze(request: Request, handler: AnalysisHandlerDep) -> PaperAnalysisResponse:
    """Analyze a research paper from a URL (JSON) or an uploaded PDF (multipart)."""
    return await handler.analyze(request)


@router.get("/stats", response_model=dict[str, Any])
async def get_stats(
    cache: CacheServiceDep,
    limiter: RateLimiterDep,
    metrics: MetricsDep,
) -> dict[str, Any]:
    """Get cache, rate limiter and model-call statistics."""
    return {
        "cache": cache.get_stats(),
        "rate_limit": limiter.get_stats(),
        "performance": metrics.to_dict(),
    }


@router.delete("/cache", response_model=dict[str, Any])
async def clear_cache(cache: CacheServiceDep) -> dict[str, Any]:
    """Clear all cached generation results."""
    count = cache.clear()
    return {"deleted_count": count, "message": "Cache cleared successfully"}


def create_app(
    config: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings to run with. Defaults to the environment settings.
        transport: Optional httpx transport for all outbound calls (tests).

    Returns:
        Configured FastAPI app; services are created when its lifespan starts
    """
    app = FastAPI(
        title="ThreadCraft API",
        description="Article-to-social-content and research paper analysis service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = config or settings
    app.state.transport = transport

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(guard_content_type)
    app.add_exception_handler(ThreadcraftError, handle_threadcraft_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "threadcraft.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()

"""
JobAI: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints:
- /api/llm-providers: Provider and model selection
- /api/resumes, /api/jobs, /api/cover-letter, /api/chat: Capability endpoints
- /health: Health check endpoint
- /config: Non-sensitive configuration values
- /metrics: Capability call statistics

The application uses a lifespan context manager to:
1. Load configuration and configure logging
2. Build the provider registry, adapters, and dispatch facade
3. Discover provider models (failures keep the baseline lists)
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import time

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobai import __version__
from jobai.config import Settings, configure_logging, get_settings
from jobai.dispatcher import (
    CapabilityError,
    DispatchFacade,
    GeminiAdapter,
    OpenAIAdapter,
)
from jobai.extraction import ALLOWED_EXTENSIONS, save_upload
from jobai.metrics import MetricsStore
from jobai.registry import ProviderId, ProviderRegistry
from jobai.schemas import (
    AnalyzeResumeBody,
    AnalyzeResumeRequest,
    AnalyzeResumeResult,
    ChatBody,
    ChatResponse,
    ComponentHealth,
    CoverLetterBody,
    CoverLetterResponse,
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    ImproveResumeBody,
    MatchJobBody,
    MatchSkillsResult,
    MetricsResponse,
    ProvidersInfo,
    SetModelBody,
    SetModelResponse,
    SetProviderBody,
    SetProviderResponse,
    TextExtractionSetting,
)

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _secret(value) -> str | None:
    return value.get_secret_value() if value else None


def build_facade(settings: Settings) -> DispatchFacade:
    """
    Wire the registry, one adapter per provider, and the facade.

    Adapters are registered for every provider; availability is decided
    by the registry from the configured keys.
    """
    registry = ProviderRegistry.from_settings(settings)
    adapters = {
        ProviderId.OPENAI: OpenAIAdapter(registry, api_key=_secret(settings.openai_api_key)),
        ProviderId.GEMINI: GeminiAdapter(registry, api_key=_secret(settings.gemini_api_key)),
    }
    return DispatchFacade(registry, adapters, metrics=MetricsStore())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    On startup:
    - Loads configuration from environment
    - Configures logging
    - Builds the dispatch facade and discovers provider models

    On shutdown:
    - Logs shutdown message
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("JobAI starting up...")
    logger.info("=" * 60)
    logger.info(f"OpenAI API key: {'configured' if settings.openai_configured else 'not configured'}")
    logger.info(f"Gemini API key: {'configured' if settings.gemini_configured else 'not configured'}")
    logger.info(
        f"Local text extraction: {'skipped' if settings.skip_local_text_extraction else 'enabled'}"
    )
    logger.info(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    if not (settings.openai_configured or settings.gemini_configured):
        logger.warning("No provider API key configured; capability calls will fail")

    facade = build_facade(settings)
    await facade.initialize_providers()

    app.state.facade = facade
    app.state.start_time = time.time()

    info = facade.get_providers_info()
    logger.info(f"Current provider: {info['current']}")
    logger.info("=" * 60)
    logger.info("JobAI ready to accept requests")

    yield  # Application runs here

    logger.info("JobAI shutting down...")


app = FastAPI(
    title="JobAI",
    description="Multi-provider AI assistant for job search",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_facade(request: Request) -> DispatchFacade:
    return request.app.state.facade


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "JobAI",
        "description": "Multi-provider AI assistant for job search",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "config": "/config",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check registry and provider status.",
)
async def health_check(request: Request, facade: DispatchFacade = Depends(get_facade)):
    """
    Health check endpoint for monitoring and orchestration.

    Reports the registry (current provider and model) and one component per
    provider. Unavailable providers are degraded; the service is unhealthy
    when no provider is available.
    """
    registry = facade.registry
    current = registry.get_current()
    available = registry.list_available()

    components = [
        ComponentHealth(
            name="registry",
            status="healthy",
            message=f"Current provider {current.value} ({registry.get_model(current)})",
        )
    ]
    for provider in ProviderId:
        if provider in available:
            components.append(ComponentHealth(name=provider.value, status="healthy"))
        else:
            components.append(
                ComponentHealth(
                    name=provider.value,
                    status="degraded",
                    message="No API key configured",
                )
            )

    if not available:
        overall_status = "unhealthy"
    elif len(available) < len(ProviderId):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    start_time = getattr(request.app.state, "start_time", 0.0)
    uptime = time.time() - start_time if start_time > 0 else 0.0

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        uptime_seconds=uptime,
    )


@app.get("/config")
async def show_config(
    settings: Settings = Depends(get_settings),
    facade: DispatchFacade = Depends(get_facade),
):
    """
    Returns non-sensitive configuration values.

    API keys are SecretStr and are NOT exposed in this endpoint.
    This is safe to call for debugging configuration issues.
    """
    return {
        "providers": {
            "default": facade.registry.default_provider.value,
            "current": facade.registry.get_current().value,
        },
        "text_extraction": {
            "skip_local_text_extraction": facade.skip_local_text_extraction,
        },
        "uploads": {
            "directory": settings.upload_dir,
            "max_size_mb": settings.max_upload_mb,
            "allowed_extensions": sorted(ALLOWED_EXTENSIONS),
        },
        "server": {
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
        },
        "logging": {
            "level": settings.log_level,
        },
        "api_keys_configured": {
            "openai": settings.openai_configured,
            "gemini": settings.gemini_configured,
        },
    }


@app.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Get metrics",
    description="Retrieve aggregated capability call metrics.",
)
async def get_metrics(
    recent: int = Query(default=0, ge=0, le=1000),
    facade: DispatchFacade = Depends(get_facade),
):
    """
    Return request, error, and latency aggregates per provider and capability.

    Pass ?recent=N to include the last N recorded calls.
    """
    return facade.metrics.report(recent=recent)


# =============================================================================
# PROVIDER SETTINGS
# =============================================================================


@app.get("/api/llm-providers", response_model=ProvidersInfo)
async def get_providers(facade: DispatchFacade = Depends(get_facade)):
    return ProvidersInfo.model_validate(facade.get_providers_info())


@app.post("/api/llm-providers/set", response_model=SetProviderResponse, responses=ERROR_RESPONSES)
async def set_provider(body: SetProviderBody, facade: DispatchFacade = Depends(get_facade)):
    """Switch the provider used for all subsequent capability calls."""
    if not facade.set_provider(body.provider):
        raise _error(
            400,
            ErrorCodes.PROVIDER_UNAVAILABLE,
            f"Provider '{body.provider}' is not available",
        )
    return SetProviderResponse(provider=facade.registry.get_current().value, success=True)


@app.post("/api/llm-providers/model", response_model=SetModelResponse, responses=ERROR_RESPONSES)
async def set_provider_model(body: SetModelBody, facade: DispatchFacade = Depends(get_facade)):
    """Select a model for a provider. The model must be in the provider's list."""
    if not facade.set_provider_model(body.provider, body.model):
        raise _error(
            400,
            ErrorCodes.MODEL_UNAVAILABLE,
            f"Model '{body.model}' is not available for provider '{body.provider}'",
        )
    return SetModelResponse(
        provider=ProviderId(body.provider.lower()).value, model=body.model, success=True
    )


@app.get("/api/llm-providers/text-extraction", response_model=TextExtractionSetting)
async def get_text_extraction(facade: DispatchFacade = Depends(get_facade)):
    return TextExtractionSetting(skip_local_text_extraction=facade.skip_local_text_extraction)


@app.post("/api/llm-providers/text-extraction", response_model=TextExtractionSetting)
async def set_text_extraction(
    body: TextExtractionSetting, facade: DispatchFacade = Depends(get_facade)
):
    facade.set_skip_local_text_extraction(body.skip_local_text_extraction)
    return TextExtractionSetting(skip_local_text_extraction=facade.skip_local_text_extraction)


# =============================================================================
# CAPABILITIES
# =============================================================================


@app.post("/api/resumes/analyze", response_model=AnalyzeResumeResult, responses=ERROR_RESPONSES)
async def analyze_resume(body: AnalyzeResumeBody, facade: DispatchFacade = Depends(get_facade)):
    """Extract skills, experience, education, and a summary from resume text."""
    return await facade.analyze_resume(body.resume_text)


@app.post(
    "/api/resumes/analyze/upload",
    response_model=AnalyzeResumeResult,
    responses={**ERROR_RESPONSES, 413: {"model": ErrorResponse}},
)
async def analyze_resume_upload(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    facade: DispatchFacade = Depends(get_facade),
):
    """
    Upload a resume file and analyze it.

    The file is stored under the upload directory. Depending on the text
    extraction setting, the provider receives either locally extracted text
    or the file itself.
    """
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        raise _error(
            422,
            ErrorCodes.INVALID_FILE,
            f"File type '{suffix}' not supported. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )

    content = await file.read()
    size_mb = len(content) / (1024 * 1024)
    if size_mb > settings.max_upload_mb:
        raise _error(
            413,
            ErrorCodes.INVALID_FILE,
            f"File too large ({size_mb:.1f} MB). Maximum: {settings.max_upload_mb} MB",
        )

    file_path = await asyncio.to_thread(
        save_upload, content, file.filename or f"resume{suffix}", settings.upload_dir
    )
    return await facade.analyze_resume(AnalyzeResumeRequest(resume_file_path=str(file_path)))


@app.post("/api/resumes/improve", response_model=list[str], responses=ERROR_RESPONSES)
async def improve_resume(body: ImproveResumeBody, facade: DispatchFacade = Depends(get_facade)):
    return await facade.suggest_resume_improvements(body.to_request())


@app.post("/api/jobs/match", response_model=MatchSkillsResult, responses=ERROR_RESPONSES)
async def match_job(body: MatchJobBody, facade: DispatchFacade = Depends(get_facade)):
    """Compare resume skills (or a full resume) with a job description."""
    return await facade.match_job_skills(body.to_request())


@app.post("/api/cover-letter", response_model=CoverLetterResponse, responses=ERROR_RESPONSES)
async def cover_letter(body: CoverLetterBody, facade: DispatchFacade = Depends(get_facade)):
    letter = await facade.generate_cover_letter(body.to_request())
    return CoverLetterResponse(cover_letter=letter)


@app.post("/api/chat", response_model=ChatResponse, responses=ERROR_RESPONSES)
async def chat(body: ChatBody, facade: DispatchFacade = Depends(get_facade)):
    reply = await facade.chat_with_assistant(body.to_request())
    return ChatResponse(response=reply)


# =============================================================================
# ERROR HANDLERS
# =============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns a consistent error response format with the first validation
    error's details for client-side error handling.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code=ErrorCodes.VALIDATION_ERROR,
                message=first_error.get("msg", "Validation failed"),
                field=".".join(str(loc) for loc in first_error.get("loc", [])),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """
    Handle HTTP exceptions with consistent format.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(detail)}},
    )


@app.exception_handler(CapabilityError)
async def capability_exception_handler(
    request: Request, exc: CapabilityError
) -> JSONResponse:
    """
    Handle provider failures.

    The message names the failed capability and carries the provider error.
    """
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(code=ErrorCodes.PROVIDER_ERROR, message=str(exc))
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    response to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code=ErrorCodes.INTERNAL_ERROR,
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )

"""
Pydantic Schemas for the HTTP API

This module defines the request bodies and responses of the REST endpoints:
- Provider selection bodies and responses
- Capability endpoint bodies (mapped onto capability requests)
- Error, metrics, and health check schemas
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobai.schemas.capabilities import (
    CamelModel,
    ChatMessage,
    ChatRequest,
    CoverLetterRequest,
    ImprovementRequest,
    MatchSkillsRequest,
)


# =============================================================================
# PROVIDER SETTINGS
# =============================================================================


class ProviderModelsInfo(CamelModel):
    models: list[str]
    current_model: str


class ProvidersInfo(CamelModel):
    """
    Snapshot of provider state for UI display.

    Example:
        {
            "current": "openai",
            "available": ["openai", "gemini"],
            "defaultProvider": "openai",
            "providers": {
                "openai": {"models": ["gpt-4o"], "currentModel": "gpt-4o"},
                "gemini": {"models": ["gemini-2.0-flash"], "currentModel": "gemini-2.0-flash"}
            }
        }
    """

    current: str
    available: list[str]
    default_provider: str
    providers: dict[str, ProviderModelsInfo]


class SetProviderBody(CamelModel):
    provider: str = Field(..., min_length=1)


class SetProviderResponse(CamelModel):
    provider: str
    success: bool


class SetModelBody(CamelModel):
    provider: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)


class SetModelResponse(CamelModel):
    provider: str
    model: str
    success: bool


class TextExtractionSetting(CamelModel):
    skip_local_text_extraction: bool


# =============================================================================
# CAPABILITY BODIES
# =============================================================================


class AnalyzeResumeBody(CamelModel):
    resume_text: str = Field(..., min_length=1)


class ImproveResumeBody(CamelModel):
    resume_text: str = Field(..., min_length=1)
    target_job_title: str | None = None

    def to_request(self) -> ImprovementRequest:
        return ImprovementRequest(
            resume_text=self.resume_text,
            target_job=self.target_job_title or "",
        )


class MatchJobBody(CamelModel):
    resume_skills: list[str]
    job_description: str = Field(..., min_length=1)
    resume_document: str | None = None

    def to_request(self) -> MatchSkillsRequest:
        return MatchSkillsRequest(
            resume_skills=self.resume_skills,
            job_description=self.job_description,
            resume_document=self.resume_document,
        )


class CoverLetterBody(CamelModel):
    resume_text: str = Field(..., min_length=1)
    job_description: str = Field(..., min_length=1)
    candidate_name: str | None = None
    additional_info: str | None = None

    def to_request(self) -> CoverLetterRequest:
        details = [f"Candidate name: {self.candidate_name or 'Candidate'}"]
        if self.additional_info:
            details.append(self.additional_info)
        return CoverLetterRequest(
            resume_text=self.resume_text,
            job_description=self.job_description,
            additional_info="\n".join(details),
        )


class CoverLetterResponse(CamelModel):
    cover_letter: str


class ChatBody(CamelModel):
    messages: list[ChatMessage] = Field(..., min_length=1)
    user_id: int | None = None

    @field_validator("messages")
    @classmethod
    def require_user_message(cls, v: list[ChatMessage]) -> list[ChatMessage]:
        """At least one message must come from the user."""
        if not any(m.role == "user" for m in v):
            raise ValueError("At least one user message is required")
        return v

    def to_request(self) -> ChatRequest:
        return ChatRequest(messages=self.messages, user_id=self.user_id)


class ChatResponse(CamelModel):
    response: str


# =============================================================================
# ERROR MODELS
# =============================================================================


class ErrorCodes:
    """
    Standard error codes for API responses.

    These codes enable programmatic error handling by clients
    without parsing human-readable messages.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    MODEL_UNAVAILABLE = "MODEL_UNAVAILABLE"
    INVALID_FILE = "INVALID_FILE"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """Machine-readable code, human-readable message, optional field."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(
        default=None,
        description="Field that caused the error (for validation errors)",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "PROVIDER_ERROR",
                "message": "Failed to analyze resume: connection reset"
            }
        }
    """

    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error": {
                        "code": "PROVIDER_UNAVAILABLE",
                        "message": "Provider 'gemini' is not available",
                    }
                }
            ]
        }
    )


# =============================================================================
# METRICS MODELS
# =============================================================================


class BreakdownMetrics(BaseModel):
    """Call counts and latency for one provider or capability."""

    name: str
    request_count: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    avg_latency_ms: float = Field(..., ge=0.0)


class RecentCall(BaseModel):
    """One recorded capability call."""

    timestamp: float
    provider: str
    model: str
    capability: str
    latency_ms: float
    success: bool


class MetricsResponse(BaseModel):
    total_requests: int = Field(..., ge=0)
    total_errors: int = Field(..., ge=0)
    avg_latency_ms: float = Field(..., ge=0.0)
    providers: dict[str, BreakdownMetrics] = Field(default_factory=dict)
    capabilities: dict[str, BreakdownMetrics] = Field(default_factory=dict)
    recent_calls: list[RecentCall] = Field(default_factory=list)


# =============================================================================
# HEALTH MODELS
# =============================================================================


class ComponentHealth(BaseModel):
    """Health status of an individual component (registry or a provider)."""

    name: str = Field(..., description="Component name (e.g., 'registry', 'openai')")
    status: Literal["healthy", "degraded", "unhealthy"]
    message: str | None = None


class HealthResponse(BaseModel):
    """
    Response from the /health endpoint.

    Example:
        {
            "status": "healthy",
            "service": "jobai",
            "version": "0.1.0",
            "components": [
                {"name": "registry", "status": "healthy"},
                {"name": "openai", "status": "healthy"},
                {"name": "gemini", "status": "degraded", "message": "No API key configured"}
            ],
            "uptime_seconds": 3600.5
        }
    """

    status: Literal["healthy", "degraded", "unhealthy"]
    service: str = "jobai"
    version: str
    components: list[ComponentHealth] = Field(default_factory=list)
    uptime_seconds: float | None = Field(default=None, ge=0.0)

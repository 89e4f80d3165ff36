"""
Schemas module: Pydantic request/response models.

- capabilities.py: capability requests and results shared by adapters
- api.py: HTTP bodies, provider settings, errors, metrics, health

Example usage:
    from jobai.schemas import AnalyzeResumeRequest

    request = AnalyzeResumeRequest(resume_text="Senior engineer ...")
"""

from jobai.schemas.capabilities import (
    AnalyzeResumeRequest,
    AnalyzeResumeResult,
    CamelModel,
    ChatMessage,
    ChatRequest,
    CoverLetterRequest,
    ImprovementRequest,
    MatchSkillsRequest,
    MatchSkillsResult,
    TuningParams,
)
from jobai.schemas.api import (
    AnalyzeResumeBody,
    BreakdownMetrics,
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
    MetricsResponse,
    ProvidersInfo,
    RecentCall,
    SetModelBody,
    SetModelResponse,
    SetProviderBody,
    SetProviderResponse,
    TextExtractionSetting,
)

__all__ = [
    # Capabilities
    "CamelModel",
    "TuningParams",
    "AnalyzeResumeRequest",
    "AnalyzeResumeResult",
    "MatchSkillsRequest",
    "MatchSkillsResult",
    "CoverLetterRequest",
    "ChatMessage",
    "ChatRequest",
    "ImprovementRequest",
    # Provider settings
    "ProvidersInfo",
    "SetProviderBody",
    "SetProviderResponse",
    "SetModelBody",
    "SetModelResponse",
    "TextExtractionSetting",
    # Capability bodies
    "AnalyzeResumeBody",
    "ImproveResumeBody",
    "MatchJobBody",
    "CoverLetterBody",
    "CoverLetterResponse",
    "ChatBody",
    "ChatResponse",
    # Errors
    "ErrorCodes",
    "ErrorDetail",
    "ErrorResponse",
    # Metrics and health
    "BreakdownMetrics",
    "MetricsResponse",
    "RecentCall",
    "ComponentHealth",
    "HealthResponse",
]

"""
Pydantic Schemas for Capability Requests and Results

One request and one result model per capability:
- Resume analysis
- Job skill matching
- Cover letter generation
- Assistant chat
- Resume improvement suggestions

Python attribute names are snake_case; the wire format is camelCase
(populate_by_name allows either on input).
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


# =============================================================================
# REQUEST MODELS
# =============================================================================


class TuningParams(CamelModel):
    """
    Optional generation parameters shared by every capability request.

    Unset values fall back to per-capability defaults in the adapters.
    """

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, gt=0)
    model_name: str | None = Field(
        default=None,
        description="Model override; the provider's current model when unset",
    )


class AnalyzeResumeRequest(TuningParams):
    """
    Resume analysis input.

    Exactly one of resume_text or resume_file_path must be supplied.
    """

    resume_text: str | None = None
    resume_file_path: str | None = None

    @model_validator(mode="after")
    def check_single_source(self) -> "AnalyzeResumeRequest":
        if bool(self.resume_text) == bool(self.resume_file_path):
            raise ValueError("Provide exactly one of resumeText or resumeFilePath")
        return self


class MatchSkillsRequest(TuningParams):
    """
    Job matching input.

    A full resume (resume_document, else resume_file_path) takes
    precedence over the resume_skills list when present.
    """

    resume_skills: list[str] = Field(default_factory=list)
    job_description: str = Field(..., min_length=1)
    resume_document: str | None = None
    resume_file_path: str | None = None


class CoverLetterRequest(TuningParams):
    resume_text: str = Field(..., min_length=1)
    job_description: str = Field(..., min_length=1)
    additional_info: str = ""


class ChatMessage(CamelModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(TuningParams):
    messages: list[ChatMessage] = Field(..., min_length=1)
    user_id: int | None = None


class ImprovementRequest(TuningParams):
    resume_text: str = Field(..., min_length=1)
    target_job: str = ""


# =============================================================================
# RESULT MODELS
# =============================================================================


class AnalyzeResumeResult(CamelModel):
    """
    Structured resume analysis.

    experience and education are passed through in whichever shape the
    provider returned: a list of entries or a single string.
    """

    skills: list[str] = Field(default_factory=list)
    experience: list[str] | str = Field(default_factory=list)
    education: list[str] | str = Field(default_factory=list)
    summary: str = ""


class MatchSkillsResult(CamelModel):
    match_percentage: int | float = Field(default=0, ge=0, le=100)
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)

"""
Backend Adapter Base - Shared capability algorithm.

Every provider adapter runs the same steps for each capability:
1. Resolve the model (request override, else the registry's current model)
2. Resolve the resume content (text, locally extracted file, or inline file)
3. Compose a provider-specific prompt
4. Call the provider
5. Parse the raw reply, defaulting missing or malformed fields
6. Wrap any failure as CapabilityError; no retries

Steps 1, 2, 5 and 6 live here. Subclasses implement the provider calls
(steps 3 and 4) and return raw response text.
"""

import asyncio
import json
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from jobai.extraction.text import (
    InlineDocument,
    extract_text_from_file,
    guess_mime_type,
    load_inline_document,
)
from jobai.registry.providers import ProviderId, ProviderRegistry
from jobai.schemas.capabilities import (
    AnalyzeResumeRequest,
    AnalyzeResumeResult,
    ChatRequest,
    CoverLetterRequest,
    ImprovementRequest,
    MatchSkillsRequest,
    MatchSkillsResult,
    TuningParams,
)

logger = logging.getLogger(__name__)


ASSISTANT_SYSTEM_PROMPT = (
    "You are JobAI, an advanced job search assistant powered by AI. Help users find "
    "jobs, improve their resumes, prepare for interviews, and provide career advice. "
    "Be concise, helpful, and professional."
)


class JobAIError(Exception):
    """Base class for service errors."""


class CapabilityError(JobAIError):
    """
    A capability call failed at the provider boundary.

    The message names the capability and carries the original error,
    e.g. "Failed to analyze resume: connection reset".
    """

    def __init__(self, capability: "Capability", provider: ProviderId, message: str) -> None:
        self.capability = capability
        self.provider = provider
        super().__init__(f"Failed to {capability.value}: {message}")


class Capability(str, Enum):
    ANALYZE_RESUME = "analyze resume"
    MATCH_JOB_SKILLS = "match job skills"
    COVER_LETTER = "generate cover letter"
    CHAT = "chat with assistant"
    IMPROVEMENTS = "suggest resume improvements"


# Applied when a request leaves the value unset
CAPABILITY_DEFAULTS: dict[Capability, dict[str, Any]] = {
    Capability.ANALYZE_RESUME: {"temperature": 0.2},
    Capability.MATCH_JOB_SKILLS: {"temperature": 0.3},
    Capability.COVER_LETTER: {"temperature": 0.7, "max_tokens": 1024},
    Capability.CHAT: {"temperature": 0.7, "max_tokens": 800},
    Capability.IMPROVEMENTS: {"temperature": 0.4},
}


@dataclass
class GenerationParams:
    """Resolved model and sampling parameters for one provider call."""

    model: str
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None


ResumeContent = str | InlineDocument


# =============================================================================
# RESPONSE PARSING
# =============================================================================

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def extract_json_object(response_text: str | None) -> dict:
    """
    Parse the outermost {...} span of a reply.

    Returns:
        The parsed object, or {} if none is found or it does not parse
    """
    if not response_text:
        return {}

    match = _OBJECT_PATTERN.search(response_text)
    if not match:
        return {}

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning(f"Unparseable JSON object in reply: {response_text[:200]}")
        return {}

    return parsed if isinstance(parsed, dict) else {}


def extract_json_array(response_text: str | None) -> list | None:
    """
    Parse the outermost [...] span of a reply.

    Returns:
        The parsed list, or None if none is found or it does not parse
    """
    if not response_text:
        return None

    match = _ARRAY_PATTERN.search(response_text)
    if not match:
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None

    return parsed if isinstance(parsed, list) else None


def _as_text(item: Any) -> str:
    return item if isinstance(item, str) else json.dumps(item)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value if item is not None]


def _string_list_or_str(value: Any) -> list[str] | str:
    # Shape is preserved: strings stay strings, lists stay lists
    if isinstance(value, str):
        return value
    return _string_list(value)


def _percentage(value: Any) -> int | float:
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    number = min(max(number, 0.0), 100.0)
    return int(number) if number.is_integer() else number


def parse_analysis(response_text: str | None) -> AnalyzeResumeResult:
    data = extract_json_object(response_text)
    summary = data.get("summary")
    return AnalyzeResumeResult(
        skills=_string_list(data.get("skills")),
        experience=_string_list_or_str(data.get("experience")),
        education=_string_list_or_str(data.get("education")),
        summary=summary if isinstance(summary, str) else "",
    )


def parse_match(response_text: str | None) -> MatchSkillsResult:
    data = extract_json_object(response_text)
    return MatchSkillsResult(
        match_percentage=_percentage(data.get("matchPercentage", 0)),
        matched_skills=_string_list(data.get("matchedSkills")),
        missing_skills=_string_list(data.get("missingSkills")),
    )


def parse_suggestions(response_text: str | None) -> list[str]:
    """
    Parse improvement suggestions.

    Accepts a bare JSON array, or an object holding the suggestions under
    its first list-valued key (JSON object mode cannot return arrays).
    """
    items = extract_json_array(response_text)
    if items is None:
        data = extract_json_object(response_text)
        items = next((v for v in data.values() if isinstance(v, list)), [])
    return _string_list(items)


# =============================================================================
# ADAPTER BASE
# =============================================================================


class BackendAdapter(ABC):
    """
    Base class for provider adapters.

    Attributes:
        provider: ProviderId served by this adapter
        inline_mime_types: File types the provider accepts inline; other
            files are always extracted locally
        default_sampling: Provider-wide sampling defaults (e.g. top_p, top_k)
    """

    provider: ProviderId
    inline_mime_types: frozenset[str] = frozenset()
    default_sampling: dict[str, Any] = {}

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    def resolve_model(self, request: TuningParams) -> str:
        return request.model_name or self._registry.get_model(self.provider)

    def resolve_params(self, capability: Capability, request: TuningParams) -> GenerationParams:
        defaults = {**self.default_sampling, **CAPABILITY_DEFAULTS[capability]}

        def pick(name: str) -> Any:
            value = getattr(request, name)
            return value if value is not None else defaults.get(name)

        return GenerationParams(
            model=self.resolve_model(request),
            temperature=pick("temperature"),
            max_tokens=pick("max_tokens"),
            top_p=pick("top_p"),
            top_k=pick("top_k"),
        )

    async def resolve_file(self, file_path: str) -> ResumeContent:
        """
        Turn a resume file into prompt content.

        With skip_local_text_extraction on, files of a type the provider
        accepts are sent inline; everything else is extracted locally.
        """
        if self._registry.skip_local_text_extraction:
            mime_type = guess_mime_type(file_path)
            if mime_type in self.inline_mime_types:
                return await asyncio.to_thread(load_inline_document, file_path)
            logger.warning(
                f"{self.provider.value} does not accept {mime_type} inline, "
                f"extracting text locally: {file_path}"
            )
        return await asyncio.to_thread(extract_text_from_file, file_path)

    async def _run(self, capability: Capability, call) -> Any:
        """Await a provider call, wrapping any failure as CapabilityError."""
        start_time = time.perf_counter()
        try:
            result = await call()
        except Exception as e:
            logger.error(f"{self.provider.value} {capability.value} failed: {e}")
            raise CapabilityError(capability, self.provider, str(e)) from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{self.provider.value} {capability.value} completed: latency={latency_ms:.0f}ms"
        )
        return result

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    async def analyze_resume(self, request: AnalyzeResumeRequest) -> AnalyzeResumeResult:
        params = self.resolve_params(Capability.ANALYZE_RESUME, request)

        async def call() -> str:
            if request.resume_file_path:
                content = await self.resolve_file(request.resume_file_path)
            else:
                content = request.resume_text
            return await self._analyze_resume(content, params)

        return parse_analysis(await self._run(Capability.ANALYZE_RESUME, call))

    async def match_job_skills(self, request: MatchSkillsRequest) -> MatchSkillsResult:
        params = self.resolve_params(Capability.MATCH_JOB_SKILLS, request)

        async def call() -> str:
            resume: ResumeContent | None = request.resume_document or None
            if resume is None and request.resume_file_path:
                resume = await self.resolve_file(request.resume_file_path)
            return await self._match_job_skills(request, resume, params)

        return parse_match(await self._run(Capability.MATCH_JOB_SKILLS, call))

    async def generate_cover_letter(self, request: CoverLetterRequest) -> str:
        params = self.resolve_params(Capability.COVER_LETTER, request)
        text = await self._run(
            Capability.COVER_LETTER, lambda: self._generate_cover_letter(request, params)
        )
        return text or ""

    async def chat_with_assistant(self, request: ChatRequest) -> str:
        params = self.resolve_params(Capability.CHAT, request)
        text = await self._run(Capability.CHAT, lambda: self._chat(request, params))
        return text or ""

    async def suggest_resume_improvements(self, request: ImprovementRequest) -> list[str]:
        params = self.resolve_params(Capability.IMPROVEMENTS, request)
        text = await self._run(
            Capability.IMPROVEMENTS, lambda: self._suggest_improvements(request, params)
        )
        return parse_suggestions(text)

    # -------------------------------------------------------------------------
    # Provider calls
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_models(self) -> list[str]:
        """Return model ids advertised by the provider."""

    @abstractmethod
    async def _analyze_resume(self, resume: ResumeContent, params: GenerationParams) -> str:
        ...

    @abstractmethod
    async def _match_job_skills(
        self,
        request: MatchSkillsRequest,
        resume: ResumeContent | None,
        params: GenerationParams,
    ) -> str:
        ...

    @abstractmethod
    async def _generate_cover_letter(
        self, request: CoverLetterRequest, params: GenerationParams
    ) -> str:
        ...

    @abstractmethod
    async def _chat(self, request: ChatRequest, params: GenerationParams) -> str:
        ...

    @abstractmethod
    async def _suggest_improvements(
        self, request: ImprovementRequest, params: GenerationParams
    ) -> str:
        ...

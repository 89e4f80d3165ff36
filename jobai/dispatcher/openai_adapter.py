"""
OpenAI Adapter - Chat Completions backend.

Prompts are composed as a system instruction plus a user message.
Structured capabilities use JSON object mode. PDFs can be attached
inline as base64 data URLs when local extraction is switched off.
"""

import logging

from openai import AsyncOpenAI

from jobai.dispatcher.base import (
    ASSISTANT_SYSTEM_PROMPT,
    BackendAdapter,
    GenerationParams,
    ResumeContent,
)
from jobai.extraction.text import InlineDocument
from jobai.registry.providers import ProviderId, ProviderRegistry
from jobai.schemas.capabilities import (
    ChatRequest,
    CoverLetterRequest,
    ImprovementRequest,
    MatchSkillsRequest,
)

logger = logging.getLogger(__name__)


ANALYZE_RESUME_PROMPT = (
    "You are a resume analysis expert. Extract key information from the provided resume "
    "and respond with JSON in this format: "
    '{"skills": string[], "experience": string[], "education": string[], "summary": string}'
)

MATCH_SKILLS_PROMPT = (
    "You are a job matching expert. Given a candidate's skills or full resume and a job "
    "description, determine the match percentage, skills that match, and skills that are "
    "missing. Respond with JSON in this format: "
    '{"matchPercentage": number, "matchedSkills": string[], "missingSkills": string[]}'
)

COVER_LETTER_PROMPT = (
    "You are a professional cover letter writer. Create a personalized cover letter "
    "based on the provided resume and job description."
)

IMPROVEMENTS_PROMPT = (
    "You are a resume optimization expert. Provide actionable suggestions to improve the "
    "resume. Respond with JSON in this format: "
    '{"suggestions": ["suggestion1", "suggestion2"]}'
)


class OpenAIAdapter(BackendAdapter):
    """
    Adapter for the OpenAI Chat Completions API.

    The AsyncOpenAI client is created on first use so a missing key only
    fails when OpenAI is actually called.
    """

    provider = ProviderId.OPENAI
    inline_mime_types = frozenset({"application/pdf"})

    def __init__(
        self,
        registry: ProviderRegistry,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        super().__init__(registry)
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
            logger.debug("Initialized OpenAI client")
        return self._client

    async def _complete(
        self,
        messages: list[dict],
        params: GenerationParams,
        json_mode: bool = False,
    ) -> str:
        kwargs: dict = {"model": params.model, "messages": messages}
        if params.temperature is not None:
            kwargs["temperature"] = params.temperature
        if params.max_tokens is not None:
            kwargs["max_tokens"] = params.max_tokens
        if params.top_p is not None:
            kwargs["top_p"] = params.top_p
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content or ""

    @staticmethod
    def _user_content(text: str, document: InlineDocument | None = None) -> str | list[dict]:
        if document is None:
            return text
        return [
            {
                "type": "file",
                "file": {"filename": document.filename, "file_data": document.data_url},
            },
            {"type": "text", "text": text},
        ]

    async def list_models(self) -> list[str]:
        models = []
        async for model in self.client.models.list():
            if model.id.startswith("gpt-"):
                models.append(model.id)
        return sorted(models)

    async def _analyze_resume(self, resume: ResumeContent, params: GenerationParams) -> str:
        if isinstance(resume, InlineDocument):
            user_content = self._user_content("Analyze the attached resume.", resume)
        else:
            user_content = resume

        return await self._complete(
            [
                {"role": "system", "content": ANALYZE_RESUME_PROMPT},
                {"role": "user", "content": user_content},
            ],
            params,
            json_mode=True,
        )

    async def _match_job_skills(
        self,
        request: MatchSkillsRequest,
        resume: ResumeContent | None,
        params: GenerationParams,
    ) -> str:
        job = f"Job description: {request.job_description}"
        if isinstance(resume, InlineDocument):
            user_content = self._user_content(f"The candidate's resume is attached.\n\n{job}", resume)
        elif resume:
            user_content = f"Candidate resume: {resume}\n\n{job}"
        else:
            user_content = f"Candidate skills: {', '.join(request.resume_skills)}\n\n{job}"

        return await self._complete(
            [
                {"role": "system", "content": MATCH_SKILLS_PROMPT},
                {"role": "user", "content": user_content},
            ],
            params,
            json_mode=True,
        )

    async def _generate_cover_letter(
        self, request: CoverLetterRequest, params: GenerationParams
    ) -> str:
        user_content = f"Resume: {request.resume_text}\n\nJob description: {request.job_description}"
        if request.additional_info:
            user_content += f"\n\n{request.additional_info}"
        user_content += "\n\nPlease write a professional cover letter."

        return await self._complete(
            [
                {"role": "system", "content": COVER_LETTER_PROMPT},
                {"role": "user", "content": user_content},
            ],
            params,
        )

    async def _chat(self, request: ChatRequest, params: GenerationParams) -> str:
        messages = [{"role": "system", "content": ASSISTANT_SYSTEM_PROMPT}]
        messages.extend({"role": m.role, "content": m.content} for m in request.messages)
        return await self._complete(messages, params)

    async def _suggest_improvements(
        self, request: ImprovementRequest, params: GenerationParams
    ) -> str:
        prompt = "Analyze this resume and suggest specific improvements:"
        if request.target_job:
            prompt += f" Focus on making it more appealing for {request.target_job} positions."

        return await self._complete(
            [
                {"role": "system", "content": IMPROVEMENTS_PROMPT},
                {"role": "user", "content": f"{prompt}\n\nResume: {request.resume_text}"},
            ],
            params,
            json_mode=True,
        )

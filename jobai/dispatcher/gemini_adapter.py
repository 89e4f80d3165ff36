"""
Gemini Adapter - Google Gen AI backend.

Every capability is sent as a single user prompt with the instruction
inlined; chat history is flattened into that prompt instead of using
multi-turn contents, which avoids Gemini's role-ordering constraints.
Structured capabilities request an application/json response.
"""

import logging

from google import genai
from google.genai import types

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

ATTACHED_RESUME = "The resume is attached as a document."


ANALYZE_RESUME_TEMPLATE = """You are an expert resume analyst with years of experience in HR and recruitment.
Please analyze the following resume and extract key information.

{resume}

Please extract and return ONLY a JSON object with the following structure:
{{
  "skills": [array of technical and soft skills present in the resume],
  "experience": [array of work experiences with company and position],
  "education": [array of educational qualifications],
  "summary": "brief professional summary based on the resume"
}}

Return ONLY the JSON object, no other text."""


MATCH_SKILLS_TEMPLATE = """You are an AI expert in job matching and skills analysis.

I have a job description and my resume.

{resume}

Job description:
{job_description}

Please analyze the job description and extract the required skills. Then compare them with my resume skills.
Return ONLY a JSON object with the following structure:
{{
  "requiredSkills": [array of skills required for the job],
  "matchedSkills": [array of my skills that match the job requirements],
  "missingSkills": [array of skills required for the job that are missing from my resume],
  "matchPercentage": numerical percentage of how well my skills match the job requirements
}}

Return ONLY the JSON object, no other text."""


COVER_LETTER_TEMPLATE = """You are a professional cover letter writer with years of experience.

Please create a personalized cover letter based on my resume and the job description.

My resume:
{resume_text}

Job description:
{job_description}

Additional information:
{additional_info}

Create a professional, compelling cover letter that highlights my relevant skills and experience for this specific job.
Make it concise (no more than 400 words), well-structured, and persuasive.
Avoid generic language and cliches. Focus on specific achievements and how they relate to the job requirements."""


IMPROVEMENTS_TEMPLATE = """You are an expert resume coach with years of experience helping job seekers improve their resumes.

Please analyze the following resume{target}:

{resume_text}

Provide specific, actionable suggestions to improve this resume. Focus on:
1. Content and phrasing
2. Structure and organization
3. Skills presentation
4. Achievement highlighting
5. ATS optimization

Return ONLY a JSON array of suggestions, with each suggestion being clear and specific.
Example: ["Add measurable achievements to your work experience", "Use more action verbs in your descriptions"]

Return ONLY the JSON array, no other text."""


def build_chat_prompt(request: ChatRequest) -> str:
    """
    Flatten a chat history into a single prompt.

    Layout: system instruction, previous turns (excluding system messages
    and the latest user message), then the latest user message.

    Raises:
        ValueError: If the history contains no user message
    """
    messages = request.messages
    user_indexes = [i for i, m in enumerate(messages) if m.role == "user"]
    if not user_indexes:
        raise ValueError("No user messages found in the chat history")

    last_user = user_indexes[-1]
    system = next((m.content for m in messages if m.role == "system"), ASSISTANT_SYSTEM_PROMPT)

    prompt = f"{system}\n\n"

    context = [m for i, m in enumerate(messages) if m.role != "system" and i != last_user]
    if context:
        prompt += "Previous conversation:\n"
        for m in context:
            speaker = "User" if m.role == "user" else "Assistant"
            prompt += f"{speaker}: {m.content}\n"
        prompt += "\n"

    prompt += f"User: {messages[last_user].content}\n\nAssistant: "
    return prompt


class GeminiAdapter(BackendAdapter):
    """
    Adapter for Gemini through the google-genai SDK (async surface).

    The genai.Client is created on first use so a missing key only fails
    when Gemini is actually called.
    """

    provider = ProviderId.GEMINI
    inline_mime_types = frozenset({"application/pdf", "text/plain"})
    default_sampling = {"top_p": 0.8, "top_k": 40}

    def __init__(
        self,
        registry: ProviderRegistry,
        api_key: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        super().__init__(registry)
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
            logger.debug("Initialized Gemini client")
        return self._client

    async def _generate(
        self,
        prompt: str,
        params: GenerationParams,
        document: InlineDocument | None = None,
        json_mode: bool = False,
    ) -> str:
        contents: list = [prompt]
        if document is not None:
            contents.insert(
                0, types.Part.from_bytes(data=document.data, mime_type=document.mime_type)
            )

        config = types.GenerateContentConfig(
            temperature=params.temperature,
            top_p=params.top_p,
            top_k=params.top_k,
            max_output_tokens=params.max_tokens,
            response_mime_type="application/json" if json_mode else None,
        )

        response = await self.client.aio.models.generate_content(
            model=params.model,
            contents=contents,
            config=config,
        )
        return response.text or ""

    async def list_models(self) -> list[str]:
        models = []
        async for model in await self.client.aio.models.list():
            name = model.name or ""
            if "gemini" in name:
                models.append(name.split("/")[-1])
        return models

    async def _analyze_resume(self, resume: ResumeContent, params: GenerationParams) -> str:
        if isinstance(resume, InlineDocument):
            prompt = ANALYZE_RESUME_TEMPLATE.format(resume=ATTACHED_RESUME)
            return await self._generate(prompt, params, document=resume, json_mode=True)

        prompt = ANALYZE_RESUME_TEMPLATE.format(resume=f"Resume text:\n{resume}")
        return await self._generate(prompt, params, json_mode=True)

    async def _match_job_skills(
        self,
        request: MatchSkillsRequest,
        resume: ResumeContent | None,
        params: GenerationParams,
    ) -> str:
        document = resume if isinstance(resume, InlineDocument) else None
        if document is not None:
            resume_section = ATTACHED_RESUME
        elif resume:
            resume_section = f"Full resume document:\n{resume}"
        else:
            resume_section = f"Resume skills: {', '.join(request.resume_skills)}"

        prompt = MATCH_SKILLS_TEMPLATE.format(
            resume=resume_section,
            job_description=request.job_description,
        )
        return await self._generate(prompt, params, document=document, json_mode=True)

    async def _generate_cover_letter(
        self, request: CoverLetterRequest, params: GenerationParams
    ) -> str:
        prompt = COVER_LETTER_TEMPLATE.format(
            resume_text=request.resume_text,
            job_description=request.job_description,
            additional_info=request.additional_info,
        )
        return await self._generate(prompt, params)

    async def _chat(self, request: ChatRequest, params: GenerationParams) -> str:
        return await self._generate(build_chat_prompt(request), params)

    async def _suggest_improvements(
        self, request: ImprovementRequest, params: GenerationParams
    ) -> str:
        target = f" for a {request.target_job} position" if request.target_job else ""
        prompt = IMPROVEMENTS_TEMPLATE.format(target=target, resume_text=request.resume_text)
        return await self._generate(prompt, params, json_mode=True)

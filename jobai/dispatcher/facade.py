"""
Dispatch Facade - Single entry point for capability calls.

For every capability the facade reads the current provider from the
registry, injects that provider's current model into the request, and
forwards the call to the adapter registered for the provider. Adapter
errors are logged and re-raised unchanged: there is no retry, no fallback
to another provider, and no circuit breaking.
"""

import logging
import time
from typing import Awaitable, Callable, Mapping, TypeVar

from jobai.dispatcher.base import BackendAdapter, Capability, JobAIError
from jobai.metrics.store import CallMetric, MetricsStore
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

RequestT = TypeVar("RequestT", bound=TuningParams)
ResultT = TypeVar("ResultT")


class DispatchFacade:
    """
    Provider-agnostic access to the capabilities.

    Usage:
        registry = ProviderRegistry.from_settings(settings)
        facade = DispatchFacade(registry, {
            ProviderId.OPENAI: OpenAIAdapter(registry, api_key=...),
            ProviderId.GEMINI: GeminiAdapter(registry, api_key=...),
        })
        await facade.initialize_providers()
        result = await facade.analyze_resume("Senior engineer ...")
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        adapters: Mapping[ProviderId, BackendAdapter],
        metrics: MetricsStore | None = None,
    ) -> None:
        self._registry = registry
        self._adapters = dict(adapters)
        self._metrics = metrics or MetricsStore()

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def metrics(self) -> MetricsStore:
        return self._metrics

    def adapter_for(self, provider: ProviderId) -> BackendAdapter:
        """
        Raises:
            JobAIError: If no adapter is registered for the provider
        """
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise JobAIError(f"No adapter registered for provider: {provider.value}")
        return adapter

    async def initialize_providers(self) -> None:
        """
        Discover models for every available provider.

        Failures are logged per provider and leave the baseline model
        list in place.
        """
        for provider in self._registry.list_available():
            adapter = self._adapters.get(provider)
            if adapter is None:
                continue
            try:
                models = await adapter.list_models()
            except Exception as e:
                logger.error(f"Model discovery failed for {provider.value}: {e}")
                continue
            self._registry.update_models(provider, models)

        logger.info("LLM providers initialized")

    # -------------------------------------------------------------------------
    # Provider settings
    # -------------------------------------------------------------------------

    def get_providers_info(self) -> dict:
        return self._registry.snapshot()

    def set_provider(self, provider: ProviderId | str) -> bool:
        return self._registry.set_current(provider)

    def set_provider_model(self, provider: ProviderId | str, model: str) -> bool:
        return self._registry.set_model(provider, model)

    @property
    def skip_local_text_extraction(self) -> bool:
        return self._registry.skip_local_text_extraction

    def set_skip_local_text_extraction(self, enabled: bool) -> None:
        self._registry.skip_local_text_extraction = enabled
        logger.info(f"Local text extraction {'skipped' if enabled else 'enabled'}")

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    async def _dispatch(
        self,
        capability: Capability,
        request: RequestT,
        call: Callable[[BackendAdapter, RequestT], Awaitable[ResultT]],
    ) -> ResultT:
        provider = self._registry.get_current()
        adapter = self.adapter_for(provider)
        model = self._registry.get_model(provider)
        request = request.model_copy(update={"model_name": model})

        logger.info(f"Dispatching {capability.value} to {provider.value} ({model})")
        start_time = time.perf_counter()
        success = False
        try:
            result = await call(adapter, request)
            success = True
            return result
        except Exception as e:
            logger.error(f"Error in {provider.value} {capability.value}: {e}")
            raise
        finally:
            self._metrics.record(
                CallMetric(
                    timestamp=time.time(),
                    provider=provider.value,
                    model=model,
                    capability=capability.value,
                    latency_ms=(time.perf_counter() - start_time) * 1000,
                    success=success,
                )
            )

    async def analyze_resume(
        self, request: AnalyzeResumeRequest | str
    ) -> AnalyzeResumeResult:
        if isinstance(request, str):
            request = AnalyzeResumeRequest(resume_text=request)
        return await self._dispatch(
            Capability.ANALYZE_RESUME, request, lambda a, r: a.analyze_resume(r)
        )

    async def match_job_skills(self, request: MatchSkillsRequest) -> MatchSkillsResult:
        return await self._dispatch(
            Capability.MATCH_JOB_SKILLS, request, lambda a, r: a.match_job_skills(r)
        )

    async def generate_cover_letter(self, request: CoverLetterRequest) -> str:
        return await self._dispatch(
            Capability.COVER_LETTER, request, lambda a, r: a.generate_cover_letter(r)
        )

    async def chat_with_assistant(self, request: ChatRequest) -> str:
        return await self._dispatch(
            Capability.CHAT, request, lambda a, r: a.chat_with_assistant(r)
        )

    async def suggest_resume_improvements(self, request: ImprovementRequest) -> list[str]:
        return await self._dispatch(
            Capability.IMPROVEMENTS, request, lambda a, r: a.suggest_resume_improvements(r)
        )

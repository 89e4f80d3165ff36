"""
Provider Registry

This module holds the runtime configuration of the supported LLM backends:
- Which providers have credentials (fixed at startup)
- The known model list and selected model per provider
- The provider selected for all capability calls
- The runtime flag that controls local text extraction of uploaded files

The registry is constructed explicitly (see ProviderRegistry.from_settings)
and passed by reference to the dispatch facade and adapters. It holds no
lock: concurrent setters are last-write-wins, and the check-then-set in
set_model is not atomic across requests.

All mutators report failure through their return value and never raise.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from jobai.config import Settings

logger = logging.getLogger(__name__)


class ProviderId(str, Enum):
    """Supported LLM backends, in declaration order."""

    OPENAI = "openai"
    GEMINI = "gemini"


OPENAI_BASELINE_MODELS = ["gpt-4o", "gpt-3.5-turbo", "gpt-4-turbo"]
OPENAI_DEFAULT_MODEL = "gpt-4o"

GEMINI_BASELINE_MODELS = ["gemini-2.0-flash", "gemini-1.5-pro", "gemini-1.5-flash"]
GEMINI_DEFAULT_MODEL = "gemini-2.0-flash"

_BASELINES: dict[ProviderId, tuple[list[str], str]] = {
    ProviderId.OPENAI: (OPENAI_BASELINE_MODELS, OPENAI_DEFAULT_MODEL),
    ProviderId.GEMINI: (GEMINI_BASELINE_MODELS, GEMINI_DEFAULT_MODEL),
}


class ProviderConfig(BaseModel):
    """
    Configuration for a single provider.

    current_model is always a member of models.
    """

    available: bool = Field(
        ...,
        description="Whether a credential for this provider was present at startup",
    )

    models: list[str] = Field(
        default_factory=list,
        description="Known model identifiers, baseline first",
    )

    current_model: str = Field(
        ...,
        description="Model used for capability calls on this provider",
    )

    default_model: str = Field(
        ...,
        description="Fallback model when the current one disappears",
        frozen=True,
    )


def _coerce_provider(provider: ProviderId | str) -> ProviderId | None:
    """Map a provider name onto ProviderId, None when unknown."""
    if isinstance(provider, ProviderId):
        return provider
    try:
        return ProviderId(str(provider).lower())
    except ValueError:
        return None


class ProviderRegistry:
    """
    Runtime provider state.

    Attributes:
        default_provider: Provider chosen at startup from available credentials
        skip_local_text_extraction: When True, adapters send files inline
            to the vendor instead of extracting text locally
    """

    def __init__(
        self,
        available: Iterable[ProviderId | str] = (),
        skip_local_text_extraction: bool = False,
    ) -> None:
        enabled = {p for p in (_coerce_provider(a) for a in available) if p}

        self._providers: dict[ProviderId, ProviderConfig] = {}
        for provider_id in ProviderId:
            baseline, default = _BASELINES[provider_id]
            self._providers[provider_id] = ProviderConfig(
                available=provider_id in enabled,
                models=list(baseline),
                current_model=default,
                default_model=default,
            )

        self.default_provider = self._pick_default_provider()
        self._current = self.default_provider
        self.skip_local_text_extraction = skip_local_text_extraction

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProviderRegistry":
        """
        Build a registry from application settings.

        A provider is available iff its API key is set and non-empty.
        """
        available = []
        if settings.openai_configured:
            available.append(ProviderId.OPENAI)
        if settings.gemini_configured:
            available.append(ProviderId.GEMINI)

        return cls(
            available=available,
            skip_local_text_extraction=settings.skip_local_text_extraction,
        )

    def _pick_default_provider(self) -> ProviderId:
        """Prefer OpenAI, then Gemini; OpenAI by name when neither has a key."""
        for provider_id in ProviderId:
            if self._providers[provider_id].available:
                return provider_id
        return ProviderId.OPENAI

    def is_available(self, provider: ProviderId | str) -> bool:
        provider_id = _coerce_provider(provider)
        if provider_id is None:
            return False
        return self._providers[provider_id].available

    def list_available(self) -> list[ProviderId]:
        return [p for p in ProviderId if self._providers[p].available]

    def get_current(self) -> ProviderId:
        return self._current

    def get_model(self, provider: ProviderId | str) -> str:
        """
        Get the current model of a provider.

        Raises:
            KeyError: If the provider name is unknown
        """
        provider_id = _coerce_provider(provider)
        if provider_id is None:
            raise KeyError(f"Unknown provider: {provider}")
        return self._providers[provider_id].current_model

    def get_config(self, provider: ProviderId | str) -> ProviderConfig | None:
        """Return a copy of a provider's configuration, None if unknown."""
        provider_id = _coerce_provider(provider)
        if provider_id is None:
            return None
        return self._providers[provider_id].model_copy(deep=True)

    def set_current(self, provider: ProviderId | str) -> bool:
        """
        Select the provider used for capability calls.

        Returns:
            True if the provider is available and was selected
        """
        provider_id = _coerce_provider(provider)
        if provider_id is None or not self._providers[provider_id].available:
            logger.warning(f"Rejected provider change to unavailable provider: {provider}")
            return False

        self._current = provider_id
        logger.info(f"Current provider set to {provider_id.value}")
        return True

    def set_model(self, provider: ProviderId | str, model: str) -> bool:
        """
        Select the model for a provider.

        Returns:
            True if the provider is available and knows the model
        """
        provider_id = _coerce_provider(provider)
        if provider_id is None:
            return False

        config = self._providers[provider_id]
        if not config.available or model not in config.models:
            logger.warning(f"Rejected model '{model}' for provider {provider_id.value}")
            return False

        config.current_model = model
        logger.info(f"Model for {provider_id.value} set to {model}")
        return True

    def update_models(self, provider: ProviderId | str, discovered: Iterable[str]) -> None:
        """
        Merge discovered model ids into a provider's model list.

        The new list is the baseline followed by discovered ids, deduplicated
        in order. If the current model is no longer listed it falls back to
        the provider default. Empty discovery leaves everything unchanged.
        """
        provider_id = _coerce_provider(provider)
        discovered = [m for m in discovered if m]
        if provider_id is None or not discovered:
            return

        baseline, _ = _BASELINES[provider_id]
        merged = list(dict.fromkeys([*baseline, *discovered]))

        config = self._providers[provider_id]
        config.models = merged
        if config.current_model not in merged:
            logger.info(
                f"Model {config.current_model} no longer listed for {provider_id.value}, "
                f"resetting to {config.default_model}"
            )
            config.current_model = config.default_model

        logger.info(f"Updated {provider_id.value} models: {', '.join(merged)}")

    def snapshot(self) -> dict:
        """
        Provider information for display.

        Returns:
            {current, available, defaultProvider, providers: {id: {models, currentModel}}}
        """
        return {
            "current": self._current.value,
            "available": [p.value for p in self.list_available()],
            "defaultProvider": self.default_provider.value,
            "providers": {
                provider_id.value: {
                    "models": list(config.models),
                    "currentModel": config.current_model,
                }
                for provider_id, config in self._providers.items()
            },
        }

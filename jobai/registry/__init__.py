"""
Registry module: LLM provider availability and model selection.

Public API:
- ProviderId: Enum of supported providers
- ProviderConfig: Pydantic model for per-provider configuration
- ProviderRegistry: Runtime provider/model state
"""

from jobai.registry.providers import (
    GEMINI_BASELINE_MODELS,
    GEMINI_DEFAULT_MODEL,
    OPENAI_BASELINE_MODELS,
    OPENAI_DEFAULT_MODEL,
    ProviderConfig,
    ProviderId,
    ProviderRegistry,
)

__all__ = [
    "ProviderId",
    "ProviderConfig",
    "ProviderRegistry",
    "OPENAI_BASELINE_MODELS",
    "OPENAI_DEFAULT_MODEL",
    "GEMINI_BASELINE_MODELS",
    "GEMINI_DEFAULT_MODEL",
]

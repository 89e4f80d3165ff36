"""
Dispatcher module: Provider adapters and the dispatch facade.

This module provides a unified interface for running the job-search
capabilities against one of several LLM providers (OpenAI, Gemini).

Key exports:
- BackendAdapter: Shared capability algorithm, one subclass per provider
- OpenAIAdapter / GeminiAdapter: Provider implementations
- DispatchFacade: Entry point routing calls to the current provider
- Capability, CapabilityError, JobAIError: Capability names and errors
- extract_json_object / extract_json_array: Tolerant reply parsing
"""

from jobai.dispatcher.base import (
    ASSISTANT_SYSTEM_PROMPT,
    CAPABILITY_DEFAULTS,
    BackendAdapter,
    Capability,
    CapabilityError,
    GenerationParams,
    JobAIError,
    extract_json_array,
    extract_json_object,
    parse_analysis,
    parse_match,
    parse_suggestions,
)
from jobai.dispatcher.facade import DispatchFacade
from jobai.dispatcher.gemini_adapter import GeminiAdapter, build_chat_prompt
from jobai.dispatcher.openai_adapter import OpenAIAdapter

__all__ = [
    # Base
    "ASSISTANT_SYSTEM_PROMPT",
    "CAPABILITY_DEFAULTS",
    "BackendAdapter",
    "Capability",
    "CapabilityError",
    "GenerationParams",
    "JobAIError",
    # Parsing
    "extract_json_object",
    "extract_json_array",
    "parse_analysis",
    "parse_match",
    "parse_suggestions",
    # Providers
    "OpenAIAdapter",
    "GeminiAdapter",
    "build_chat_prompt",
    # Facade
    "DispatchFacade",
]

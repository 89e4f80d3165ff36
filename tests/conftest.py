"""
Pytest configuration and shared fixtures.

Provides registry factories, stub adapters, mock SDK clients, and a
TestClient for the JobAI test suite.

IMPORTANT: Environment variables must be set BEFORE importing app modules
that use pydantic-settings, as Settings validates on import.
"""

import os
import sys
from types import SimpleNamespace

# Set test environment variables before importing app modules
os.environ["OPENAI_API_KEY"] = "test-key-not-real"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"

# Now safe to import everything else
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from jobai.dispatcher.base import BackendAdapter
from jobai.dispatcher.facade import DispatchFacade
from jobai.metrics import MetricsStore
from jobai.registry import ProviderId, ProviderRegistry


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as requiring real API calls"
    )


class AsyncIter:
    """Re-iterable async iterable over fixed items, standing in for SDK pagers."""

    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._items:
            yield item


ANALYSIS_REPLY = (
    '{"skills": ["Python", "FastAPI"], "experience": ["Engineer at Acme"], '
    '"education": ["BSc Computer Science"], "summary": "Backend engineer"}'
)
MATCH_REPLY = (
    '{"matchPercentage": 75, "matchedSkills": ["Python"], "missingSkills": ["Kubernetes"]}'
)
SUGGESTIONS_REPLY = '["Add measurable achievements", "Use action verbs"]'


class StubAdapter(BackendAdapter):
    """
    Adapter returning canned replies and recording every provider call.

    Runs the real capability algorithm (model and parameter resolution,
    file handling, parsing, error wrapping) without touching the network.
    """

    inline_mime_types = frozenset({"application/pdf", "text/plain"})

    def __init__(self, registry, provider, replies=None, models=None, error=None):
        self.provider = provider
        super().__init__(registry)
        self.replies = {
            "analyze": ANALYSIS_REPLY,
            "match": MATCH_REPLY,
            "cover_letter": f"Dear Hiring Manager, from {provider.value}",
            "chat": f"Hello from {provider.value}",
            "improvements": SUGGESTIONS_REPLY,
        }
        self.replies.update(replies or {})
        self.models = list(models or [])
        self.error = error
        self.discovery_error = None
        self.calls = []
        self.last_resume = None

    async def list_models(self):
        if self.discovery_error:
            raise self.discovery_error
        return list(self.models)

    async def _reply(self, name, params):
        self.calls.append((name, params))
        if self.error:
            raise self.error
        return self.replies[name]

    async def _analyze_resume(self, resume, params):
        self.last_resume = resume
        return await self._reply("analyze", params)

    async def _match_job_skills(self, request, resume, params):
        self.last_resume = resume
        return await self._reply("match", params)

    async def _generate_cover_letter(self, request, params):
        return await self._reply("cover_letter", params)

    async def _chat(self, request, params):
        return await self._reply("chat", params)

    async def _suggest_improvements(self, request, params):
        return await self._reply("improvements", params)


@pytest.fixture
def make_registry():
    """
    Factory fixture for ProviderRegistry instances.

    Usage:
        registry = make_registry("gemini")
        registry = make_registry("openai", "gemini", skip=True)
    """

    def _create(*available, skip: bool = False):
        return ProviderRegistry(available=available, skip_local_text_extraction=skip)

    return _create


@pytest.fixture
def stub_adapter():
    """
    Factory fixture for StubAdapter instances.

    Usage:
        adapter = stub_adapter(registry, ProviderId.GEMINI, models=["gemini-2.5-pro"])
    """

    def _create(registry, provider, **kwargs):
        return StubAdapter(registry, provider, **kwargs)

    return _create


@pytest.fixture
def make_facade(make_registry, stub_adapter):
    """
    Factory fixture for a DispatchFacade with a stub adapter per provider.

    Usage:
        facade = make_facade("openai", "gemini")
        facade.adapter_for(ProviderId.OPENAI).replies["chat"] = "Hi"
    """

    def _create(*available, skip: bool = False):
        registry = make_registry(*available, skip=skip)
        adapters = {p: stub_adapter(registry, p) for p in ProviderId}
        return DispatchFacade(registry, adapters, metrics=MetricsStore())

    return _create


@pytest.fixture
def mock_openai_response():
    """Create a mock OpenAI chat completion response."""
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=ANALYSIS_REPLY))]
    return response


@pytest.fixture
def mock_openai_client(mock_openai_response):
    """Create a fully mocked AsyncOpenAI client."""
    mock = MagicMock()
    mock.chat.completions.create = AsyncMock(return_value=mock_openai_response)
    mock.models.list = MagicMock(
        return_value=AsyncIter(
            SimpleNamespace(id=model_id)
            for model_id in ["gpt-4o-mini", "text-embedding-3-small", "gpt-4o", "dall-e-3"]
        )
    )
    return mock


@pytest.fixture
def mock_gemini_client():
    """Create a fully mocked google-genai Client (async surface)."""
    mock = MagicMock()
    mock.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(text=ANALYSIS_REPLY)
    )
    mock.aio.models.list = AsyncMock(
        return_value=AsyncIter(
            SimpleNamespace(name=name)
            for name in [
                "models/gemini-2.5-pro",
                "models/text-embedding-004",
                "models/gemini-2.0-flash",
            ]
        )
    )
    return mock


@pytest.fixture
def api_facade(make_facade):
    """Facade served by test_client: both providers available, stub adapters."""
    return make_facade("openai", "gemini")


@pytest.fixture
def test_client(api_facade, tmp_path):
    """
    Create a FastAPI TestClient with the facade builder patched.

    build_facade is patched where it is called (jobai.main) so the lifespan
    wires stub adapters instead of real SDK clients. Uploads go to tmp_path.
    """
    # Clear cached app module to ensure fresh import with patches
    if "jobai.main" in sys.modules:
        del sys.modules["jobai.main"]

    with patch("jobai.main.build_facade", return_value=api_facade):
        from jobai.config import Settings, get_settings
        from jobai.main import app

        app.dependency_overrides[get_settings] = lambda: Settings(upload_dir=str(tmp_path))

        with TestClient(app) as client:
            yield client

        app.dependency_overrides.clear()

    # Clean up
    if "jobai.main" in sys.modules:
        del sys.modules["jobai.main"]


@pytest.fixture
def sample_resume():
    """Plain-text resume used across capability tests."""
    return (
        "Jane Doe\n"
        "Senior Backend Engineer\n"
        "Skills: Python, FastAPI, PostgreSQL\n"
        "Experience: Engineer at Acme (2019-2024)\n"
        "Education: BSc Computer Science"
    )

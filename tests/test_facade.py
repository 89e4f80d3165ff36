"""
Dispatch Facade Tests

Tests for provider-agnostic capability dispatch using stub adapters.

Test Categories:
1. TestDispatch - Routing to the current provider and model injection
2. TestEndToEnd - Canned-reply scenarios through the full algorithm
3. TestFailures - Error propagation without fallback
4. TestInitializeProviders - Model discovery at startup
5. TestProviderSettings - Delegation to the registry
"""

import pytest

from jobai.dispatcher import CapabilityError, DispatchFacade, JobAIError
from jobai.registry import ProviderId
from jobai.schemas import (
    AnalyzeResumeRequest,
    ChatMessage,
    ChatRequest,
    CoverLetterRequest,
    ImprovementRequest,
    MatchSkillsRequest,
)


def _adapter(facade, provider):
    return facade.adapter_for(ProviderId(provider))


class TestDispatch:
    """Tests for routing calls to the current provider."""

    @pytest.mark.asyncio
    async def test_calls_go_to_current_provider(self, make_facade):
        facade = make_facade("openai", "gemini")

        reply = await facade.chat_with_assistant(
            ChatRequest(messages=[ChatMessage(role="user", content="Hi")])
        )

        assert reply == "Hello from openai"
        assert _adapter(facade, "gemini").calls == []

    @pytest.mark.asyncio
    async def test_switching_provider_reroutes(self, make_facade):
        facade = make_facade("openai", "gemini")

        assert facade.set_provider("gemini") is True
        letter = await facade.generate_cover_letter(
            CoverLetterRequest(resume_text="Resume", job_description="Role")
        )

        assert letter == "Dear Hiring Manager, from gemini"
        assert _adapter(facade, "openai").calls == []

    @pytest.mark.asyncio
    async def test_current_model_injected(self, make_facade):
        facade = make_facade("openai", "gemini")
        facade.set_provider("gemini")
        facade.set_provider_model("gemini", "gemini-1.5-pro")

        await facade.suggest_resume_improvements(ImprovementRequest(resume_text="Resume"))

        (_, params), = _adapter(facade, "gemini").calls
        assert params.model == "gemini-1.5-pro"

    @pytest.mark.asyncio
    async def test_current_model_overrides_request_model(self, make_facade):
        facade = make_facade("openai")

        await facade.analyze_resume(
            AnalyzeResumeRequest(resume_text="Resume", model_name="gpt-3.5-turbo")
        )

        (_, params), = _adapter(facade, "openai").calls
        assert params.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_missing_adapter_raises(self, make_registry):
        facade = DispatchFacade(make_registry("openai"), {})

        with pytest.raises(JobAIError, match="No adapter registered"):
            await facade.analyze_resume("Resume")


class TestEndToEnd:
    """Canned-reply scenarios through registry, facade, and adapter."""

    @pytest.mark.asyncio
    async def test_analyze_returns_reply_verbatim(self, make_facade):
        facade = make_facade("openai", "gemini")
        _adapter(facade, "openai").replies["analyze"] = (
            '{"skills": ["Python", "Go"], "experience": [], "education": [], '
            '"summary": "Senior engineer"}'
        )

        result = await facade.analyze_resume("Senior engineer with Python and Go experience")

        (_, params), = _adapter(facade, "openai").calls
        assert result.model_dump() == {
            "skills": ["Python", "Go"],
            "experience": [],
            "education": [],
            "summary": "Senior engineer",
        }
        assert params.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_match_returns_reply_unchanged(self, make_facade):
        facade = make_facade("openai")
        _adapter(facade, "openai").replies["match"] = (
            '{"matchPercentage":50,"matchedSkills":["Python"],"missingSkills":["AWS"]}'
        )

        result = await facade.match_job_skills(
            MatchSkillsRequest(resume_skills=["Python"], job_description="Need Python and AWS")
        )

        assert result.model_dump(by_alias=True) == {
            "matchPercentage": 50,
            "matchedSkills": ["Python"],
            "missingSkills": ["AWS"],
        }

    @pytest.mark.asyncio
    async def test_network_error_names_capability(self, make_facade):
        facade = make_facade("openai")
        _adapter(facade, "openai").error = ConnectionError("network unreachable")

        with pytest.raises(CapabilityError) as exc_info:
            await facade.analyze_resume("Resume")

        assert str(exc_info.value) == "Failed to analyze resume: network unreachable"

    @pytest.mark.asyncio
    async def test_malformed_reply_defaults(self, make_facade):
        facade = make_facade("gemini")
        _adapter(facade, "gemini").replies["analyze"] = '{"skills": ["Python",'

        result = await facade.analyze_resume("Resume")

        assert result.model_dump() == {
            "skills": [],
            "experience": [],
            "education": [],
            "summary": "",
        }


class TestFailures:
    """Tests for error propagation."""

    @pytest.mark.asyncio
    async def test_no_fallback_to_other_provider(self, make_facade):
        facade = make_facade("openai", "gemini")
        _adapter(facade, "openai").error = RuntimeError("rate limited")

        with pytest.raises(CapabilityError):
            await facade.chat_with_assistant(
                ChatRequest(messages=[ChatMessage(role="user", content="Hi")])
            )

        assert len(_adapter(facade, "openai").calls) == 1
        assert _adapter(facade, "gemini").calls == []

    @pytest.mark.asyncio
    async def test_failures_recorded_in_metrics(self, make_facade):
        facade = make_facade("openai")
        _adapter(facade, "openai").error = RuntimeError("rate limited")

        with pytest.raises(CapabilityError):
            await facade.analyze_resume("Resume")

        report = facade.metrics.report()
        assert report.total_requests == 1
        assert report.total_errors == 1
        assert report.providers["openai"].error_count == 1

    @pytest.mark.asyncio
    async def test_successes_recorded_in_metrics(self, make_facade):
        facade = make_facade("openai", "gemini")

        await facade.analyze_resume("Resume")
        facade.set_provider("gemini")
        await facade.analyze_resume("Resume")

        report = facade.metrics.report()
        assert report.total_requests == 2
        assert report.total_errors == 0
        assert report.capabilities["analyze resume"].request_count == 2
        assert set(report.providers) == {"openai", "gemini"}
        (recent,) = facade.metrics.get_recent(1)
        assert recent.model == "gemini-2.0-flash"


class TestInitializeProviders:
    """Tests for startup model discovery."""

    @pytest.mark.asyncio
    async def test_discovered_models_merged(self, make_facade):
        facade = make_facade("openai", "gemini")
        _adapter(facade, "gemini").models = ["gemini-2.5-pro", "gemini-2.0-flash"]

        await facade.initialize_providers()

        info = facade.get_providers_info()
        assert info["providers"]["gemini"]["models"][-1] == "gemini-2.5-pro"
        assert info["providers"]["gemini"]["currentModel"] == "gemini-2.0-flash"

    @pytest.mark.asyncio
    async def test_discovery_failure_keeps_baseline(self, make_facade):
        facade = make_facade("openai", "gemini")
        _adapter(facade, "openai").discovery_error = RuntimeError("401 Unauthorized")
        _adapter(facade, "gemini").models = ["gemini-2.5-pro"]

        await facade.initialize_providers()

        info = facade.get_providers_info()
        assert info["providers"]["openai"]["models"] == ["gpt-4o", "gpt-3.5-turbo", "gpt-4-turbo"]
        assert "gemini-2.5-pro" in info["providers"]["gemini"]["models"]

    @pytest.mark.asyncio
    async def test_unavailable_providers_not_queried(self, make_facade):
        facade = make_facade("gemini")
        _adapter(facade, "openai").models = ["gpt-4o-mini"]

        await facade.initialize_providers()

        assert "gpt-4o-mini" not in facade.get_providers_info()["providers"]["openai"]["models"]


class TestProviderSettings:
    """Tests for settings delegated to the registry."""

    def test_unavailable_provider_rejected(self, make_facade):
        facade = make_facade("gemini")

        assert facade.set_provider("openai") is False
        assert facade.get_providers_info()["current"] == "gemini"

    def test_unknown_model_rejected(self, make_facade):
        facade = make_facade("openai")

        assert facade.set_provider_model("openai", "gpt-99") is False

    def test_text_extraction_flag(self, make_facade):
        facade = make_facade("openai")

        facade.set_skip_local_text_extraction(True)

        assert facade.skip_local_text_extraction is True
        assert facade.registry.skip_local_text_extraction is True

    @pytest.mark.asyncio
    async def test_flag_change_affects_next_call(self, make_facade, tmp_path):
        facade = make_facade("gemini")
        resume = tmp_path / "resume.txt"
        resume.write_text("Jane Doe")

        facade.set_skip_local_text_extraction(True)
        await facade.analyze_resume(AnalyzeResumeRequest(resume_file_path=str(resume)))

        inline = _adapter(facade, "gemini").last_resume
        assert inline.data == b"Jane Doe"
        assert inline.mime_type == "text/plain"

import asyncio

import pytest

from recruitment_hub.core.errors import LLMProviderError, ParsingError
from recruitment_hub.services.llm import LLMProvider
from recruitment_hub.services.resume_parser import RESUME_PROFILE_SCHEMA, parse_resume


class _StaticProvider(LLMProvider):
    def __init__(self, payload) -> None:
        self.payload = payload
        self.calls: list[dict] = []

    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        raise AssertionError("parser must use structured output")

    async def generate_json(self, prompt, *, schema, schema_name, model=None):
        self.calls.append({"prompt": prompt, "schema": schema, "schema_name": schema_name})
        return self.payload


class _FailingProvider(LLMProvider):
    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        raise LLMProviderError("simulated provider failure")

    async def generate_json(self, prompt, *, schema, schema_name, model=None):
        raise LLMProviderError("simulated provider failure")


def test_parse_resume_declares_schema_and_returns_profile():
    provider = _StaticProvider(
        {
            "name": "Grace Hopper",
            "email": "grace@example.com",
            "summary": "Compiler pioneer with distributed systems focus.",
            "skills": ["COBOL", " Go ", "", "Kafka"],
        }
    )

    profile = asyncio.run(parse_resume("Grace Hopper\ngrace@example.com", provider))

    assert profile.name == "Grace Hopper"
    assert profile.email == "grace@example.com"
    assert profile.skills == ["COBOL", "Go", "Kafka"]
    call = provider.calls[0]
    assert call["schema"] is RESUME_PROFILE_SCHEMA
    assert call["schema_name"] == "resume_profile"
    assert call["prompt"].endswith("Here is the resume:\n\nGrace Hopper\ngrace@example.com")


def test_parse_resume_accepts_partially_empty_profile():
    provider = _StaticProvider({"name": "Grace Hopper", "email": None})

    profile = asyncio.run(parse_resume("resume text", provider))

    assert profile.name == "Grace Hopper"
    assert profile.email == ""
    assert profile.summary == ""
    assert profile.skills == []


@pytest.mark.parametrize(
    "payload",
    [
        ["Grace Hopper"],
        "Grace Hopper",
        {"name": "Grace", "skills": "COBOL, Go"},
        {"name": 42},
    ],
)
def test_parse_resume_rejects_schema_violations(payload):
    with pytest.raises(ParsingError) as exc:
        asyncio.run(parse_resume("resume text", _StaticProvider(payload)))

    assert str(exc.value).startswith("Failed to parse resume with AI.")


def test_parse_resume_wraps_provider_failures():
    with pytest.raises(ParsingError) as exc:
        asyncio.run(parse_resume("resume text", _FailingProvider()))

    assert str(exc.value) == "Failed to parse resume with AI."
    assert isinstance(exc.value.__cause__, LLMProviderError)

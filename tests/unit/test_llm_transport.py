import asyncio
import json

import httpx
import pytest

from recruitment_hub.core.errors import LLMProviderError
from recruitment_hub.services import llm
from recruitment_hub.services.llm import (
    GeminiLLMProvider,
    MockLLMProvider,
    OpenAICompatibleLLMProvider,
    decode_json_response,
    to_gemini_schema,
)
from recruitment_hub.services.matching import MATCH_RESULT_SCHEMA, build_match_prompt
from recruitment_hub.services.resume_parser import RESUME_PROFILE_SCHEMA, build_resume_prompt
from recruitment_hub.core.models import ResumeProfile

_REAL_ASYNC_CLIENT = httpx.AsyncClient


def _patch_transport(monkeypatch, handler) -> list[httpx.Request]:
    seen: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    def client_factory(**kwargs):
        return _REAL_ASYNC_CLIENT(transport=httpx.MockTransport(recording_handler), **kwargs)

    monkeypatch.setattr(llm.httpx, "AsyncClient", client_factory)
    return seen


def _openai_provider() -> OpenAICompatibleLLMProvider:
    return OpenAICompatibleLLMProvider(
        api_key="test-key",
        model="gpt-4o-mini",
        base_url="https://llm.example.com/v1/",
        temperature=0.1,
        max_tokens=200,
        timeout_seconds=5,
    )


def _gemini_provider() -> GeminiLLMProvider:
    return GeminiLLMProvider(
        api_key="test-key",
        model="gemini-2.5-flash",
        base_url="https://gemini.example.com/v1beta",
        temperature=0.1,
        max_tokens=200,
        timeout_seconds=5,
    )


def test_decode_json_response_strips_markdown_fence():
    assert decode_json_response('```json\n{"score": 7}\n```') == {"score": 7}


def test_decode_json_response_rejects_prose():
    with pytest.raises(LLMProviderError):
        decode_json_response("I think the score is 7")


def test_to_gemini_schema_uppercases_types_and_drops_unsupported_keys():
    converted = to_gemini_schema(RESUME_PROFILE_SCHEMA)

    assert converted["type"] == "OBJECT"
    assert converted["properties"]["skills"] == {"type": "ARRAY", "items": {"type": "STRING"}}
    assert "additionalProperties" not in converted


def test_openai_provider_declares_json_schema(monkeypatch):
    def handler(request):
        body = {"choices": [{"message": {"content": '{"score": 81, "justification": "Strong Go"}'}}]}
        return httpx.Response(200, json=body)

    seen = _patch_transport(monkeypatch, handler)

    result = asyncio.run(
        _openai_provider().generate_json("Score this", schema=MATCH_RESULT_SCHEMA, schema_name="match_result")
    )

    assert result == {"score": 81, "justification": "Strong Go"}
    (request,) = seen
    assert str(request.url) == "https://llm.example.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    payload = json.loads(request.content)
    assert payload["response_format"]["type"] == "json_schema"
    assert payload["response_format"]["json_schema"]["name"] == "match_result"
    assert payload["response_format"]["json_schema"]["schema"] == MATCH_RESULT_SCHEMA


def test_openai_provider_wraps_http_errors(monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(429, text="slow down"))

    with pytest.raises(LLMProviderError) as exc:
        asyncio.run(_openai_provider().generate("Hello"))

    assert "429" in str(exc.value)


def test_openai_provider_wraps_transport_errors(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _patch_transport(monkeypatch, handler)

    with pytest.raises(LLMProviderError):
        asyncio.run(_openai_provider().generate("Hello"))


def test_gemini_provider_sends_response_schema(monkeypatch):
    def handler(request):
        body = {"candidates": [{"content": {"parts": [{"text": '{"name": "Ada", "email": "", "summary": "", "skills": []}'}]}}]}
        return httpx.Response(200, json=body)

    seen = _patch_transport(monkeypatch, handler)

    result = asyncio.run(
        _gemini_provider().generate_json("Parse", schema=RESUME_PROFILE_SCHEMA, schema_name="resume_profile")
    )

    assert result["name"] == "Ada"
    (request,) = seen
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.url.params["key"] == "test-key"
    config = json.loads(request.content)["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert config["responseSchema"]["type"] == "OBJECT"


def test_gemini_provider_uses_override_model_for_drafting(monkeypatch):
    def handler(request):
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Hi Ada,"}]}}]})

    seen = _patch_transport(monkeypatch, handler)

    text = asyncio.run(_gemini_provider().generate("Draft", model="gemini-2.5-pro"))

    assert text == "Hi Ada,"
    assert seen[0].url.path.endswith("gemini-2.5-pro:generateContent")


def test_mock_provider_answers_both_structured_requests():
    provider = MockLLMProvider()
    resume = "Ada Lovelace\nada@example.com\nDistributed systems engineer\nSkills: Go, Kafka, Raft"

    profile = asyncio.run(
        provider.generate_json(build_resume_prompt(resume), schema=RESUME_PROFILE_SCHEMA, schema_name="resume_profile")
    )
    match = asyncio.run(
        provider.generate_json(
            build_match_prompt(ResumeProfile(**profile), "Go engineer for distributed systems"),
            schema=MATCH_RESULT_SCHEMA,
            schema_name="match_result",
        )
    )

    assert profile["name"] == "Ada Lovelace"
    assert profile["email"] == "ada@example.com"
    assert profile["skills"] == ["Go", "Kafka", "Raft"]
    assert 0 <= match["score"] <= 100
    assert "go" in match["justification"]

import hashlib
import json
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from recruitment_hub.core.config import Settings
from recruitment_hub.core.errors import LLMProviderError
from recruitment_hub.core.logging import get_logger

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
WORD_RE = re.compile(r"[a-z][a-z0-9+#.]{1,}")

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
OPENAI_BASE_URL = "https://api.openai.com/v1"

SYSTEM_PROMPT = "You are a precise recruiting assistant. Follow the requested output format exactly."


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        raise NotImplementedError

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict[str, Any],
        schema_name: str,
        model: str | None = None,
    ) -> Any:
        raise NotImplementedError


def decode_json_response(text: str) -> Any:
    cleaned = (text or "").strip()
    # Some backends wrap JSON mode output in a markdown fence.
    fenced = re.match(r"^```(?:json)?\s*(.*?)\s*```$", cleaned, flags=re.DOTALL)
    if fenced:
        cleaned = fenced.group(1)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise LLMProviderError(f"LLM response is not valid JSON: {cleaned[:120]!r}") from exc


def _section(prompt: str, header: str, *stop_headers: str) -> str:
    start = prompt.find(header)
    if start < 0:
        return ""
    body = prompt[start + len(header):]
    for stop in stop_headers:
        idx = body.find(stop)
        if idx >= 0:
            body = body[:idx]
    return body.strip()


class MockLLMProvider(LLMProvider):
    """Offline provider with deterministic, prompt-derived answers."""

    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        prompt_lines = [line.strip() for line in prompt.splitlines() if line.strip()]
        seed = " ".join(prompt_lines[:5])
        return f"Generated draft (mock provider): {seed[:280]}"

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict[str, Any],
        schema_name: str,
        model: str | None = None,
    ) -> Any:
        if schema_name == "resume_profile":
            return self._mock_profile(_section(prompt, "Here is the resume:"))
        if schema_name == "match_result":
            job_text = _section(prompt, "Job Description:", "Candidate Skills and Summary:")
            candidate_text = _section(prompt, "Candidate Skills and Summary:", "Based on the job description")
            return self._mock_match(job_text, candidate_text)
        return {key: "" for key in schema.get("properties", {})}

    def _mock_profile(self, resume_text: str) -> dict[str, Any]:
        lines = [line.strip() for line in resume_text.splitlines() if line.strip()]
        email_match = EMAIL_RE.search(resume_text)
        name = lines[0] if lines else ""
        if email_match and email_match.group(0) in name:
            name = name.replace(email_match.group(0), "").strip(" |,-")
        summary = " ".join(lines[1:4])[:280]
        skills: list[str] = []
        for line in lines:
            if line.lower().startswith("skills"):
                raw = line.split(":", 1)[-1]
                skills = [item.strip() for item in re.split(r"[,;|]", raw) if item.strip()]
                break
        return {
            "name": name,
            "email": email_match.group(0) if email_match else "",
            "summary": summary,
            "skills": skills[:5],
        }

    def _mock_match(self, job_text: str, candidate_text: str) -> dict[str, Any]:
        job_terms = set(WORD_RE.findall(job_text.lower()))
        candidate_terms = set(WORD_RE.findall(candidate_text.lower()))
        if not job_terms:
            return {"score": 0, "justification": "Job description has no usable terms."}
        overlap = sorted(job_terms & candidate_terms)
        digest = hashlib.sha256(candidate_text.encode("utf-8")).digest()
        score = min(100, round(100 * len(overlap) / len(job_terms)) + digest[0] % 5)
        shown = ", ".join(overlap[:4]) or "none"
        return {
            "score": score,
            "justification": f"Overlapping terms with the job description: {shown}.",
        }


class OpenAICompatibleLLMProvider(LLMProvider):
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: int,
    ) -> None:
        if not api_key:
            raise ValueError("LLM_API_KEY is required when LLM_PROVIDER=openai")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def _chat(self, prompt: str, *, model: str | None, response_format: dict[str, Any] | None) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if response_format:
            payload["response_format"] = response_format

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise LLMProviderError(f"LLM request failed: {exc}") from exc

        if response.status_code >= 400:
            raise LLMProviderError(
                f"LLM request failed ({response.status_code}): {response.text[:300]}"
            )

        data = response.json()
        content = (
            data.get("choices", [{}])[0]
            .get("message", {})
            .get("content", "")
        )
        if not content:
            raise LLMProviderError("LLM response missing content")
        return str(content).strip()

    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        return await self._chat(prompt, model=model, response_format=None)

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict[str, Any],
        schema_name: str,
        model: str | None = None,
    ) -> Any:
        response_format = {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": schema, "strict": True},
        }
        content = await self._chat(prompt, model=model, response_format=response_format)
        return decode_json_response(content)


def to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "additionalProperties":
            continue
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {name: to_gemini_schema(prop) for name, prop in value.items()}
        elif key == "items" and isinstance(value, dict):
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


class GeminiLLMProvider(LLMProvider):
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: int,
    ) -> None:
        if not api_key:
            raise ValueError("LLM_API_KEY is required when LLM_PROVIDER=gemini")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def _generate_content(self, prompt: str, *, model: str | None, generation_config: dict[str, Any]) -> str:
        url = f"{self.base_url}/models/{model or self.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
                **generation_config,
            },
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as exc:
            raise LLMProviderError(f"Gemini request failed: {exc}") from exc

        if response.status_code >= 400:
            raise LLMProviderError(
                f"Gemini request failed ({response.status_code}): {response.text[:300]}"
            )

        data = response.json()
        candidates = data.get("candidates") or [{}]
        parts = candidates[0].get("content", {}).get("parts") or []
        content = "".join(str(part.get("text", "")) for part in parts)
        if not content.strip():
            raise LLMProviderError("Gemini response missing content")
        return content.strip()

    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        return await self._generate_content(prompt, model=model, generation_config={})

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict[str, Any],
        schema_name: str,
        model: str | None = None,
    ) -> Any:
        content = await self._generate_content(
            prompt,
            model=model,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(schema),
            },
        )
        return decode_json_response(content)


def build_llm_provider(settings: Settings) -> LLMProvider:
    raw_provider = (settings.llm_provider or "mock").strip()
    provider = raw_provider.lower()

    if provider.startswith("sk-") or provider.startswith("gsk_") or provider.startswith("aiza"):
        raise ValueError(
            "LLM_PROVIDER appears to contain an API key. Set LLM_PROVIDER to 'openai', 'groq' or "
            "'gemini' and move the key to LLM_API_KEY."
        )

    options = {
        "api_key": settings.llm_api_key,
        "model": settings.llm_model,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
        "timeout_seconds": settings.llm_timeout_seconds,
    }

    if provider == "mock":
        return MockLLMProvider()
    if provider in {"openai", "openai_compatible"}:
        return OpenAICompatibleLLMProvider(base_url=settings.llm_base_url, **options)
    if provider == "groq":
        base_url = settings.llm_base_url
        if not base_url or base_url == OPENAI_BASE_URL:
            base_url = GROQ_BASE_URL
        return OpenAICompatibleLLMProvider(base_url=base_url, **options)
    if provider == "gemini":
        base_url = settings.llm_base_url
        if not base_url or base_url == OPENAI_BASE_URL:
            base_url = GEMINI_BASE_URL
        return GeminiLLMProvider(base_url=base_url, **options)
    raise ValueError("Unsupported LLM_PROVIDER. Supported values: mock, openai, groq, gemini.")

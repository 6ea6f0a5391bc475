from typing import Any

from pydantic import ValidationError as SchemaValidationError

from recruitment_hub.core.errors import ParsingError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import ResumeProfile
from recruitment_hub.services.llm import LLMProvider

logger = get_logger(__name__)

PARSE_FAILURE_MESSAGE = "Failed to parse resume with AI."

RESUME_PROFILE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "email": {"type": "string"},
        "summary": {"type": "string"},
        "skills": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["name", "email", "summary", "skills"],
    "additionalProperties": False,
}


def build_resume_prompt(resume_text: str) -> str:
    return (
        "Parse the following resume and extract the candidate's name, email, a brief summary of "
        "their experience, and a list of their top 5 skills. Here is the resume:\n\n"
        f"{resume_text}"
    )


def profile_from_payload(payload: Any) -> ResumeProfile:
    if not isinstance(payload, dict):
        raise ParsingError(f"{PARSE_FAILURE_MESSAGE} Expected an object, got {type(payload).__name__}.")

    # Backends may send explicit nulls for fields they could not find.
    cleaned = {key: value for key, value in payload.items() if value is not None}
    try:
        profile = ResumeProfile.model_validate(cleaned)
    except SchemaValidationError as exc:
        raise ParsingError(f"{PARSE_FAILURE_MESSAGE} Response did not match the resume schema.") from exc

    profile.skills = [skill.strip() for skill in profile.skills if skill.strip()]
    return profile


async def parse_resume(resume_text: str, llm_provider: LLMProvider) -> ResumeProfile:
    try:
        payload = await llm_provider.generate_json(
            build_resume_prompt(resume_text),
            schema=RESUME_PROFILE_SCHEMA,
            schema_name="resume_profile",
        )
    except Exception as exc:
        logger.warning("Resume parsing request failed", extra={"extra": {"error": str(exc)}})
        raise ParsingError(PARSE_FAILURE_MESSAGE) from exc
    return profile_from_payload(payload)

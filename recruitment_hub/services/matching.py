from typing import Any

from recruitment_hub.core.errors import ScoringError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import MatchResult, ResumeProfile
from recruitment_hub.services.llm import LLMProvider

logger = get_logger(__name__)

SCORE_FAILURE_MESSAGE = "Failed to match candidate with AI."
MIN_SCORE = 0
MAX_SCORE = 100

MATCH_RESULT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "score": {"type": "integer"},
        "justification": {"type": "string"},
    },
    "required": ["score", "justification"],
    "additionalProperties": False,
}


def build_match_prompt(profile: ResumeProfile, job_description: str) -> str:
    return (
        f"Job Description:\n{job_description}\n\n"
        f"Candidate Skills and Summary:\n{profile.summary}\n"
        f"Skills: {', '.join(profile.skills)}\n\n"
        "Based on the job description, please provide a match score from 0 to 100 for this "
        "candidate and a brief (1-2 sentence) justification for your rating."
    )


def _coerce_score(raw: Any) -> int:
    # bool is an int subclass; a true/false "score" is never a real judgement.
    if isinstance(raw, bool) or raw is None:
        raise ScoringError(f"{SCORE_FAILURE_MESSAGE} Response did not include a usable score.")
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if not isinstance(raw, int):
        raise ScoringError(f"{SCORE_FAILURE_MESSAGE} Score {raw!r} is not an integer.")
    if not MIN_SCORE <= raw <= MAX_SCORE:
        raise ScoringError(f"{SCORE_FAILURE_MESSAGE} Score {raw} is outside {MIN_SCORE}-{MAX_SCORE}.")
    return raw


def match_from_payload(payload: Any) -> MatchResult:
    if not isinstance(payload, dict):
        raise ScoringError(f"{SCORE_FAILURE_MESSAGE} Expected an object, got {type(payload).__name__}.")

    score = _coerce_score(payload.get("score"))
    justification = payload.get("justification")
    if justification is None:
        justification = ""
    if not isinstance(justification, str):
        raise ScoringError(f"{SCORE_FAILURE_MESSAGE} Justification must be text.")
    return MatchResult(score=score, justification=justification.strip())


async def score_candidate(
    profile: ResumeProfile,
    job_description: str,
    llm_provider: LLMProvider,
) -> MatchResult:
    try:
        payload = await llm_provider.generate_json(
            build_match_prompt(profile, job_description),
            schema=MATCH_RESULT_SCHEMA,
            schema_name="match_result",
        )
    except Exception as exc:
        logger.warning("Match scoring request failed", extra={"extra": {"error": str(exc)}})
        raise ScoringError(SCORE_FAILURE_MESSAGE) from exc
    return match_from_payload(payload)

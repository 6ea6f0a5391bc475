import json
import re

from recruitment_hub.core.errors import DraftingError, OutreachNotAllowedError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import Candidate
from recruitment_hub.services.llm import LLMProvider

logger = get_logger(__name__)

DRAFT_FAILURE_MESSAGE = "Failed to generate email with AI."
CALENDAR_PLACEHOLDER = "[Recruiter's Calendly Link]"

_PREAMBLE_RE = re.compile(r"^(here is|here's|certainly|sure|of course)[^\n]*:\s*\n+", re.IGNORECASE)


def _candidate_payload(candidate: Candidate) -> str:
    info = candidate.model_dump(
        include={"name", "email", "summary", "skills", "score", "justification"},
    )
    return json.dumps(info, ensure_ascii=False)


def build_outreach_prompt(candidate: Candidate, job_description: str) -> str:
    return (
        f"Draft a friendly and professional outreach email to a candidate named {candidate.name} "
        "for a job. Mention that you were impressed with their experience, particularly their "
        "skills in [mention 1-2 key skills from their resume]. The email should include a "
        f"placeholder {CALENDAR_PLACEHOLDER} for them to schedule a meeting. "
        f"Here is the candidate's info: {_candidate_payload(candidate)}. "
        f"And the job description: {job_description}"
    )


def _clean_email(text: str) -> str:
    return _PREAMBLE_RE.sub("", text.strip(), count=1).strip()


async def draft_outreach_email(
    candidate: Candidate,
    job_description: str,
    llm_provider: LLMProvider,
    *,
    model: str | None = None,
) -> str:
    if candidate.is_error:
        raise OutreachNotAllowedError(
            f"Candidate {candidate.id} failed processing and is not eligible for outreach."
        )

    try:
        raw = await llm_provider.generate(build_outreach_prompt(candidate, job_description), model=model)
    except Exception as exc:
        logger.warning(
            "Outreach drafting failed",
            extra={"extra": {"candidate_id": candidate.id, "error": str(exc)}},
        )
        raise DraftingError(DRAFT_FAILURE_MESSAGE) from exc

    email = _clean_email(raw or "")
    if not email:
        raise DraftingError(f"{DRAFT_FAILURE_MESSAGE} The response was empty.")
    return email

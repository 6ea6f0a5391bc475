from fastapi import APIRouter, Depends, HTTPException, Request

from recruitment_hub.api.deps import get_controller, get_llm_provider, get_rate_limiter
from recruitment_hub.api.schemas import CandidateResponse, OutreachDraftResponse, StatusChangeResponse
from recruitment_hub.core.config import Settings, get_settings
from recruitment_hub.core.errors import (
    CandidateNotFoundError,
    DraftingError,
    InvalidStatusTransitionError,
    OutreachNotAllowedError,
)
from recruitment_hub.core.rate_limit import RateLimiter
from recruitment_hub.pipeline.state import ScreeningController
from recruitment_hub.services.llm import LLMProvider
from recruitment_hub.services.outreach import draft_outreach_email

router = APIRouter(prefix="/candidates", tags=["candidates"])


@router.get("/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(
    candidate_id: str,
    controller: ScreeningController = Depends(get_controller),
    settings: Settings = Depends(get_settings),
):
    try:
        candidate = controller.get_candidate(candidate_id)
    except CandidateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return CandidateResponse.from_candidate(candidate, skills_limit=settings.skills_display_limit)


@router.post("/{candidate_id}/outreach", response_model=OutreachDraftResponse)
async def draft_outreach(
    candidate_id: str,
    request: Request,
    controller: ScreeningController = Depends(get_controller),
    llm_provider: LLMProvider = Depends(get_llm_provider),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
):
    client = request.client.host if request.client else "unknown"
    allowed = rate_limiter.allow(
        f"draft:{client}",
        settings.drafting_rate_limit,
        settings.rate_limit_window_seconds,
    )
    if not allowed:
        raise HTTPException(status_code=429, detail="Drafting rate limit exceeded")

    try:
        candidate = controller.get_candidate(candidate_id)
    except CandidateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    try:
        email = await draft_outreach_email(
            candidate,
            controller.state.run_job_description,
            llm_provider,
            model=settings.llm_drafting_model or None,
        )
    except OutreachNotAllowedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except DraftingError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return OutreachDraftResponse(candidate_id=candidate_id, email=email)


@router.post("/{candidate_id}/contacted", response_model=StatusChangeResponse)
async def mark_contacted(
    candidate_id: str,
    controller: ScreeningController = Depends(get_controller),
):
    try:
        candidate = controller.mark_contacted(candidate_id)
    except CandidateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return StatusChangeResponse(candidate_id=candidate.id, status=candidate.status)

from typing import Any, TypedDict

from recruitment_hub.core.enums import CandidateStatus, PipelineStage
from recruitment_hub.core.models import MatchResult, ResumeProfile, UploadedDocument


class CandidatePipelineState(TypedDict, total=False):
    run_id: str
    upload_index: int
    document: UploadedDocument
    job_description: str

    resume_text: str
    profile: ResumeProfile
    match: MatchResult

    status: str
    failed_stage: str
    error: str


def mark_stage_failed(
    state: CandidatePipelineState,
    stage: PipelineStage,
    exc: Exception,
) -> CandidatePipelineState:
    state["status"] = CandidateStatus.ERROR.value
    state["failed_stage"] = stage.value
    state["error"] = str(exc) or exc.__class__.__name__
    return state


def has_failed(state: dict[str, Any]) -> bool:
    return state.get("status") == CandidateStatus.ERROR.value

from pydantic import BaseModel

from recruitment_hub.core.enums import CandidateStatus
from recruitment_hub.core.models import Candidate, PipelineProgress
from recruitment_hub.pipeline.state import PipelineState


class CandidateResponse(BaseModel):
    id: str
    filename: str
    name: str
    email: str
    summary: str
    skills: list[str]
    score: int
    justification: str
    status: CandidateStatus

    @classmethod
    def from_candidate(cls, candidate: Candidate, *, skills_limit: int) -> "CandidateResponse":
        return cls(
            id=candidate.id,
            filename=candidate.filename,
            name=candidate.name,
            email=candidate.email,
            summary=candidate.summary,
            skills=candidate.skills[:skills_limit],
            score=candidate.score,
            justification=candidate.justification,
            status=candidate.status,
        )


class RunStartedResponse(BaseModel):
    run_id: str
    total: int


class ScreeningStateResponse(BaseModel):
    running: bool
    run_id: str | None = None
    progress: PipelineProgress | None = None
    error: str | None = None
    candidates: list[CandidateResponse]

    @classmethod
    def from_state(cls, state: PipelineState, *, skills_limit: int) -> "ScreeningStateResponse":
        return cls(
            running=state.running,
            run_id=state.run_id,
            progress=state.progress,
            error=state.error,
            candidates=[
                CandidateResponse.from_candidate(candidate, skills_limit=skills_limit)
                for candidate in state.candidates
            ],
        )


class OutreachDraftResponse(BaseModel):
    candidate_id: str
    email: str


class StatusChangeResponse(BaseModel):
    candidate_id: str
    status: CandidateStatus

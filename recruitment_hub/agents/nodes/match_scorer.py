from typing import Awaitable, Callable

from recruitment_hub.agents.state import CandidatePipelineState, mark_stage_failed
from recruitment_hub.core.enums import CandidateStatus, PipelineStage
from recruitment_hub.core.errors import ScoringError
from recruitment_hub.services.llm import LLMProvider
from recruitment_hub.services.matching import score_candidate


def make_node(llm_provider: LLMProvider) -> Callable[[CandidatePipelineState], Awaitable[CandidatePipelineState]]:
    async def scorer_node(state: CandidatePipelineState) -> CandidatePipelineState:
        try:
            match = await score_candidate(state["profile"], state["job_description"], llm_provider)
        except ScoringError as exc:
            return mark_stage_failed(state, PipelineStage.SCORE, exc)

        state["match"] = match
        state["status"] = CandidateStatus.NEW.value
        return state

    return scorer_node

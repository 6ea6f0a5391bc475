from typing import Awaitable, Callable

from recruitment_hub.agents.state import CandidatePipelineState, mark_stage_failed
from recruitment_hub.core.enums import PipelineStage
from recruitment_hub.core.errors import ParsingError
from recruitment_hub.services.llm import LLMProvider
from recruitment_hub.services.resume_parser import parse_resume


def make_node(llm_provider: LLMProvider) -> Callable[[CandidatePipelineState], Awaitable[CandidatePipelineState]]:
    async def parser_node(state: CandidatePipelineState) -> CandidatePipelineState:
        try:
            profile = await parse_resume(state["resume_text"], llm_provider)
        except ParsingError as exc:
            return mark_stage_failed(state, PipelineStage.PARSE, exc)

        state["profile"] = profile
        return state

    return parser_node

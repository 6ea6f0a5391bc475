import asyncio
from typing import Awaitable, Callable

from recruitment_hub.agents.state import CandidatePipelineState, mark_stage_failed
from recruitment_hub.core.enums import PipelineStage
from recruitment_hub.core.errors import ExtractionError
from recruitment_hub.core.models import UploadedDocument


def make_node(
    extractor: Callable[[UploadedDocument], str],
) -> Callable[[CandidatePipelineState], Awaitable[CandidatePipelineState]]:
    async def extract_node(state: CandidatePipelineState) -> CandidatePipelineState:
        document = state["document"]
        try:
            # pypdf and python-docx are blocking; keep them off the event loop.
            text = await asyncio.to_thread(extractor, document)
        except ExtractionError as exc:
            return mark_stage_failed(state, PipelineStage.EXTRACT, exc)

        state["resume_text"] = text
        return state

    return extract_node

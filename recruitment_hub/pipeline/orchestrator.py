import asyncio
import re
import time
from typing import Callable

from recruitment_hub.agents.graph import build_candidate_graph
from recruitment_hub.agents.state import CandidatePipelineState, has_failed
from recruitment_hub.core.enums import CandidateStatus
from recruitment_hub.core.errors import RunLevelError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import Candidate, UploadedDocument
from recruitment_hub.pipeline.state import ScreeningController
from recruitment_hub.services.extraction import extract_text
from recruitment_hub.services.llm import LLMProvider

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 5
UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

IndexedDocument = tuple[int, UploadedDocument]


def partition(documents: list[UploadedDocument], batch_size: int) -> list[list[IndexedDocument]]:
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    indexed = list(enumerate(documents))
    return [indexed[start:start + batch_size] for start in range(0, len(indexed), batch_size)]


def candidate_id(filename: str, processed_at: float, upload_index: int) -> str:
    safe_name = UNSAFE_ID_CHARS.sub("_", filename) or "resume"
    return f"{safe_name}-{int(processed_at * 1000)}-{upload_index}"


def error_candidate(
    document: UploadedDocument,
    upload_index: int,
    message: str,
    *,
    processed_at: float,
) -> Candidate:
    return Candidate(
        id=candidate_id(document.filename, processed_at, upload_index),
        filename=document.filename,
        upload_index=upload_index,
        name=document.filename,
        score=0,
        justification=f"Error: {message}",
        skills=[],
        status=CandidateStatus.ERROR,
    )


def candidate_from_state(
    state: CandidatePipelineState,
    *,
    document: UploadedDocument,
    upload_index: int,
    processed_at: float,
) -> Candidate:
    if has_failed(state):
        return error_candidate(document, upload_index, state.get("error", ""), processed_at=processed_at)

    profile = state["profile"]
    match = state["match"]
    return Candidate(
        id=candidate_id(document.filename, processed_at, upload_index),
        filename=document.filename,
        upload_index=upload_index,
        name=profile.name or document.filename,
        email=profile.email,
        summary=profile.summary,
        skills=list(profile.skills),
        score=match.score,
        justification=match.justification,
        status=CandidateStatus.NEW,
    )


class BatchOrchestrator:
    def __init__(
        self,
        llm_provider: LLMProvider,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        extractor: Callable[[UploadedDocument], str] = extract_text,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_size = batch_size
        self._clock = clock
        self._graph = build_candidate_graph(llm_provider, extractor=extractor)

    async def process_document(
        self,
        document: UploadedDocument,
        *,
        upload_index: int,
        job_description: str,
        run_id: str,
    ) -> Candidate:
        initial_state: CandidatePipelineState = {
            "run_id": run_id,
            "upload_index": upload_index,
            "document": document,
            "job_description": job_description,
        }
        final_state = await self._graph.ainvoke(initial_state)
        if has_failed(final_state):
            logger.warning(
                "Resume processing failed",
                extra={
                    "extra": {
                        "run_id": run_id,
                        "filename": document.filename,
                        "stage": final_state.get("failed_stage"),
                        "error": final_state.get("error"),
                    }
                },
            )
        return candidate_from_state(
            final_state,
            document=document,
            upload_index=upload_index,
            processed_at=self._clock(),
        )

    async def process_batch(
        self,
        batch: list[IndexedDocument],
        *,
        job_description: str,
        run_id: str,
    ) -> list[Candidate]:
        outcomes = await asyncio.gather(
            *(
                self.process_document(
                    document,
                    upload_index=upload_index,
                    job_description=job_description,
                    run_id=run_id,
                )
                for upload_index, document in batch
            ),
            return_exceptions=True,
        )

        candidates: list[Candidate] = []
        for (upload_index, document), outcome in zip(batch, outcomes):
            if isinstance(outcome, Candidate):
                candidates.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(
                "Unexpected error while processing resume",
                extra={"extra": {"run_id": run_id, "filename": document.filename, "error": repr(outcome)}},
            )
            candidates.append(
                error_candidate(
                    document,
                    upload_index,
                    str(outcome) or outcome.__class__.__name__,
                    processed_at=self._clock(),
                )
            )
        return candidates

    async def execute(self, controller: ScreeningController, run_id: str) -> list[Candidate]:
        inputs = controller.run_inputs(run_id)
        job_description = inputs.job_description
        batches = partition(inputs.documents, self.batch_size)

        try:
            for batch_index, batch in enumerate(batches):
                candidates = await self.process_batch(batch, job_description=job_description, run_id=run_id)
                await controller.merge_batch(run_id, batch_index, candidates)
        except Exception as exc:
            error = RunLevelError(f"Screening run aborted: {exc}")
            controller.fail_run(run_id, str(error))
            raise error from exc

        controller.finish_run(run_id)
        return controller.state.candidates

    async def run(
        self,
        controller: ScreeningController,
        *,
        job_description: str | None = None,
        documents: list[UploadedDocument] | None = None,
    ) -> list[Candidate]:
        run_id = controller.start_run(job_description=job_description, documents=documents)
        return await self.execute(controller, run_id)

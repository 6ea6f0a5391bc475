import inspect
import uuid
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from recruitment_hub.core.errors import RunInProgressError, ValidationError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import Candidate, PipelineProgress, UploadedDocument
from recruitment_hub.pipeline.store import CandidateStore

logger = get_logger(__name__)

MISSING_INPUTS_MESSAGE = "Please provide a job description and at least one resume."


class BatchCompleted(BaseModel):
    run_id: str
    batch_index: int
    candidates: list[Candidate]
    progress: PipelineProgress


class RunInputs(BaseModel):
    run_id: str
    job_description: str
    documents: list[UploadedDocument]

    model_config = ConfigDict(frozen=True)


class PipelineState(BaseModel):
    job_description: str = ""
    # Job description the current candidates were scored against.
    run_job_description: str = ""
    documents: list[UploadedDocument] = Field(default_factory=list)
    candidates: list[Candidate] = Field(default_factory=list)
    progress: PipelineProgress | None = None
    error: str | None = None
    run_id: str | None = None

    @property
    def running(self) -> bool:
        return self.progress is not None


BatchListener = Callable[[BatchCompleted], Awaitable[None] | None]


class ScreeningController:
    """Single owner of the screening state.

    Every mutation goes through one of the transitions below; readers get
    immutable snapshots via ``state``.
    """

    def __init__(self) -> None:
        self._store = CandidateStore()
        self._job_description = ""
        self._documents: list[UploadedDocument] = []
        self._progress: PipelineProgress | None = None
        self._error: str | None = None
        self._run_id: str | None = None
        self._run_inputs: RunInputs | None = None
        self._listeners: list[BatchListener] = []

    @property
    def state(self) -> PipelineState:
        return PipelineState(
            job_description=self._job_description,
            run_job_description=self._run_inputs.job_description if self._run_inputs else "",
            documents=list(self._documents),
            candidates=self._store.snapshot(),
            progress=self._progress,
            error=self._error,
            run_id=self._run_id,
        )

    @property
    def is_running(self) -> bool:
        return self._progress is not None

    def subscribe(self, listener: BatchListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def select_inputs(
        self,
        *,
        job_description: str | None = None,
        documents: list[UploadedDocument] | None = None,
    ) -> None:
        if self.is_running:
            raise RunInProgressError("Cannot change inputs while a screening run is in progress.")
        if job_description is not None:
            self._job_description = job_description
        if documents is not None:
            self._documents = list(documents)

    def start_run(
        self,
        *,
        job_description: str | None = None,
        documents: list[UploadedDocument] | None = None,
    ) -> str:
        """Start a run over the given inputs, falling back to the current selection.

        Inputs are committed only when the run actually starts; a refused start
        leaves the selection and any previous results untouched.
        """
        if self.is_running:
            raise RunInProgressError("A screening run is already in progress.")
        job_description = self._job_description if job_description is None else job_description
        documents = list(self._documents if documents is None else documents)
        if not job_description.strip() or not documents:
            self._error = MISSING_INPUTS_MESSAGE
            raise ValidationError(MISSING_INPUTS_MESSAGE)

        self._job_description = job_description
        self._documents = documents
        self._store.clear()
        self._error = None
        self._run_id = str(uuid.uuid4())
        self._run_inputs = RunInputs(run_id=self._run_id, job_description=job_description, documents=documents)
        self._progress = PipelineProgress(processed=0, total=len(documents))
        logger.info(
            "Screening run started",
            extra={"extra": {"run_id": self._run_id, "total": len(self._documents)}},
        )
        return self._run_id

    def _require_active(self, run_id: str) -> PipelineProgress:
        if self._progress is None or run_id != self._run_id:
            raise RuntimeError(f"Run {run_id} is not the active screening run")
        return self._progress

    def run_inputs(self, run_id: str) -> RunInputs:
        self._require_active(run_id)
        return self._run_inputs

    async def merge_batch(self, run_id: str, batch_index: int, candidates: list[Candidate]) -> BatchCompleted:
        progress = self._require_active(run_id)
        self._store.merge(candidates)
        self._progress = PipelineProgress(
            processed=progress.processed + len(candidates),
            total=progress.total,
        )
        event = BatchCompleted(
            run_id=run_id,
            batch_index=batch_index,
            candidates=list(candidates),
            progress=self._progress,
        )
        logger.info(
            "Batch merged",
            extra={
                "extra": {
                    "run_id": run_id,
                    "batch_index": batch_index,
                    "processed": self._progress.processed,
                    "total": self._progress.total,
                }
            },
        )
        for listener in list(self._listeners):
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        return event

    def finish_run(self, run_id: str) -> None:
        progress = self._require_active(run_id)
        self._progress = None
        logger.info(
            "Screening run finished",
            extra={"extra": {"run_id": run_id, "processed": progress.processed, "total": progress.total}},
        )

    def fail_run(self, run_id: str, message: str) -> None:
        self._require_active(run_id)
        self._progress = None
        self._error = message
        logger.error("Screening run failed", extra={"extra": {"run_id": run_id, "error": message}})

    def get_candidate(self, candidate_id: str) -> Candidate:
        return self._store.get(candidate_id)

    def mark_contacted(self, candidate_id: str) -> Candidate:
        candidate = self._store.mark_contacted(candidate_id)
        logger.info("Candidate marked contacted", extra={"extra": {"candidate_id": candidate_id}})
        return candidate

    def reset(self) -> None:
        if self.is_running:
            raise RunInProgressError("Cannot reset while a screening run is in progress.")
        self._store.clear()
        self._job_description = ""
        self._documents = []
        self._error = None
        self._run_id = None
        self._run_inputs = None

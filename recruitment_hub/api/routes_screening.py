import mimetypes

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile

from recruitment_hub.api.deps import get_controller, get_orchestrator
from recruitment_hub.api.schemas import RunStartedResponse, ScreeningStateResponse
from recruitment_hub.core.config import Settings, get_settings
from recruitment_hub.core.errors import RunInProgressError, RunLevelError, ValidationError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import UploadedDocument
from recruitment_hub.pipeline.orchestrator import BatchOrchestrator
from recruitment_hub.pipeline.state import ScreeningController

logger = get_logger(__name__)

router = APIRouter(prefix="/screening", tags=["screening"])

GENERIC_MEDIA_TYPES = {"", "application/octet-stream"}


def _media_type(upload: UploadFile) -> str:
    declared = (upload.content_type or "").strip().lower()
    if declared in GENERIC_MEDIA_TYPES and upload.filename:
        guessed, _ = mimetypes.guess_type(upload.filename)
        return guessed or declared
    return declared


async def _execute_run(orchestrator: BatchOrchestrator, controller: ScreeningController, run_id: str) -> None:
    try:
        await orchestrator.execute(controller, run_id)
    except RunLevelError as exc:
        # Already recorded on the controller state for GET /screening/state.
        logger.info("Background screening run ended early", extra={"extra": {"run_id": run_id, "error": str(exc)}})


@router.post("/runs", response_model=RunStartedResponse, status_code=202)
async def start_run(
    background_tasks: BackgroundTasks,
    job_description: str = Form(default=""),
    files: list[UploadFile] | None = File(default=None),
    controller: ScreeningController = Depends(get_controller),
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    if controller.is_running:
        raise HTTPException(status_code=409, detail="A screening run is already in progress.")

    documents = [
        UploadedDocument(
            filename=upload.filename or f"resume-{idx + 1}",
            content=await upload.read(),
            media_type=_media_type(upload),
        )
        for idx, upload in enumerate(files or [])
    ]
    try:
        run_id = controller.start_run(job_description=job_description, documents=documents)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RunInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    background_tasks.add_task(_execute_run, orchestrator, controller, run_id)
    return RunStartedResponse(run_id=run_id, total=len(documents))


@router.get("/state", response_model=ScreeningStateResponse)
async def get_state(
    controller: ScreeningController = Depends(get_controller),
    settings: Settings = Depends(get_settings),
):
    return ScreeningStateResponse.from_state(controller.state, skills_limit=settings.skills_display_limit)


@router.delete("/state", status_code=204)
async def reset_state(controller: ScreeningController = Depends(get_controller)):
    try:
        controller.reset()
    except RunInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

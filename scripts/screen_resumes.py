import argparse
import asyncio
import mimetypes
from pathlib import Path

import yaml

from recruitment_hub.core.config import get_settings
from recruitment_hub.core.errors import RunLevelError, ValidationError
from recruitment_hub.core.logging import setup_logging
from recruitment_hub.core.models import UploadedDocument
from recruitment_hub.pipeline.orchestrator import BatchOrchestrator
from recruitment_hub.pipeline.state import BatchCompleted, ScreeningController
from recruitment_hub.services.llm import build_llm_provider


def _load_document(path: Path) -> UploadedDocument:
    media_type, _ = mimetypes.guess_type(path.name)
    return UploadedDocument(filename=path.name, content=path.read_bytes(), media_type=media_type or "")


def _print_progress(event: BatchCompleted) -> None:
    print(f"Batch {event.batch_index + 1}: {event.progress.processed}/{event.progress.total} resumes processed")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Screen resumes against a job description.")
    parser.add_argument("--job-description", required=True, type=Path, help="Text file with the job description")
    parser.add_argument("resumes", nargs="+", type=Path, help="Resume files (.txt, .pdf, .docx)")
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--output", type=Path, default=None, help="Write ranked candidates to this YAML file")
    return parser.parse_args()


async def screen(args: argparse.Namespace) -> int:
    settings = get_settings()
    orchestrator = BatchOrchestrator(
        build_llm_provider(settings),
        batch_size=args.batch_size or settings.batch_size,
    )
    controller = ScreeningController()
    controller.subscribe(_print_progress)

    try:
        candidates = await orchestrator.run(
            controller,
            job_description=args.job_description.read_text(encoding="utf-8"),
            documents=[_load_document(path) for path in args.resumes],
        )
    except ValidationError as exc:
        print(f"Cannot start screening: {exc}")
        return 2
    except RunLevelError as exc:
        print(f"Screening stopped early: {exc}")
        candidates = controller.state.candidates

    for rank, candidate in enumerate(candidates, start=1):
        score = "!" if candidate.is_error else str(candidate.score)
        print(f"{rank:>3}. [{score:>3}] {candidate.name} ({candidate.status.value}) - {candidate.justification}")

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        rows = [candidate.model_dump(mode="json") for candidate in candidates]
        args.output.write_text(yaml.safe_dump(rows, sort_keys=False), encoding="utf-8")
        print(f"Output candidates: {args.output}")
    return 1 if controller.state.error else 0


def main() -> None:
    setup_logging(get_settings().log_level)
    raise SystemExit(asyncio.run(screen(parse_args())))


if __name__ == "__main__":
    main()

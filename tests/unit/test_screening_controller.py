import asyncio

import pytest

from recruitment_hub.core.enums import CandidateStatus
from recruitment_hub.core.errors import RunInProgressError, ValidationError
from recruitment_hub.core.models import Candidate, UploadedDocument
from recruitment_hub.pipeline.state import ScreeningController


def _document(name: str) -> UploadedDocument:
    return UploadedDocument(filename=name, content=b"Name: Someone", media_type="text/plain")


def _candidate(index: int, score: int) -> Candidate:
    return Candidate(id=f"c{index}", filename=f"c{index}.txt", upload_index=index, name=f"C{index}", score=score)


def _started(count: int = 2) -> tuple[ScreeningController, str]:
    controller = ScreeningController()
    controller.select_inputs(
        job_description="Data engineer",
        documents=[_document(f"c{i}.txt") for i in range(count)],
    )
    return controller, controller.start_run()


def test_start_run_sets_zero_progress_distinct_from_idle():
    controller = ScreeningController()
    assert controller.state.progress is None

    controller, _ = _started(3)

    progress = controller.state.progress
    assert progress is not None
    assert (progress.processed, progress.total) == (0, 3)
    assert controller.is_running


def test_validation_failure_keeps_selection_and_records_error():
    controller = ScreeningController()
    documents = [_document("a.txt"), _document("b.txt")]
    controller.select_inputs(job_description="", documents=documents)

    with pytest.raises(ValidationError):
        controller.start_run()

    state = controller.state
    assert state.documents == documents
    assert state.error == "Please provide a job description and at least one resume."
    assert state.progress is None
    assert state.candidates == []


def test_merge_batch_notifies_sync_and_async_listeners():
    controller, run_id = _started(2)
    received = []

    async def async_listener(event):
        await asyncio.sleep(0)
        received.append(("async", event.progress.processed))

    controller.subscribe(lambda event: received.append(("sync", event.progress.processed)))
    controller.subscribe(async_listener)

    event = asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20), _candidate(1, 70)]))

    assert received == [("sync", 2), ("async", 2)]
    assert [c.score for c in event.candidates] == [20, 70]
    assert [c.score for c in controller.state.candidates] == [70, 20]


def test_unsubscribe_stops_notifications():
    controller, run_id = _started(1)
    received = []
    unsubscribe = controller.subscribe(received.append)
    unsubscribe()

    asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20)]))

    assert received == []


def test_finish_run_clears_progress_and_keeps_candidates():
    controller, run_id = _started(1)
    asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20)]))

    controller.finish_run(run_id)

    assert controller.state.progress is None
    assert len(controller.state.candidates) == 1


def test_merge_for_stale_run_is_rejected():
    controller, run_id = _started(1)
    controller.finish_run(run_id)

    with pytest.raises(RuntimeError):
        asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20)]))


def test_reset_refused_while_running_and_clears_after():
    controller, run_id = _started(1)
    with pytest.raises(RunInProgressError):
        controller.reset()

    asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20)]))
    controller.finish_run(run_id)
    controller.reset()

    state = controller.state
    assert state.candidates == []
    assert state.documents == []
    assert state.job_description == ""


def test_mark_contacted_through_controller():
    controller, run_id = _started(1)
    asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20)]))
    controller.finish_run(run_id)

    updated = controller.mark_contacted("c0")

    assert updated.status == CandidateStatus.CONTACTED
    assert controller.get_candidate("c0").status == CandidateStatus.CONTACTED


def test_inputs_are_frozen_while_running():
    controller, run_id = _started(2)

    with pytest.raises(RunInProgressError):
        controller.select_inputs(job_description="Chef", documents=[_document("z.txt")])
    with pytest.raises(RunInProgressError):
        controller.start_run(job_description="Chef", documents=[_document("z.txt")])

    state = controller.state
    assert state.job_description == "Data engineer"
    assert [d.filename for d in state.documents] == ["c0.txt", "c1.txt"]
    inputs = controller.run_inputs(run_id)
    assert inputs.job_description == "Data engineer"
    assert [d.filename for d in inputs.documents] == ["c0.txt", "c1.txt"]


def test_refused_start_keeps_previous_selection_and_results():
    controller, run_id = _started(1)
    asyncio.run(controller.merge_batch(run_id, 0, [_candidate(0, 20)]))
    controller.finish_run(run_id)

    with pytest.raises(ValidationError):
        controller.start_run(job_description="  ", documents=[_document("z.txt")])

    state = controller.state
    assert state.job_description == "Data engineer"
    assert state.run_job_description == "Data engineer"
    assert [d.filename for d in state.documents] == ["c0.txt"]
    assert [c.id for c in state.candidates] == ["c0"]
    assert state.run_id == run_id
    assert state.progress is None


def test_run_job_description_outlives_a_new_selection():
    controller, run_id = _started(1)
    controller.finish_run(run_id)

    controller.select_inputs(job_description="Chef")

    assert controller.state.job_description == "Chef"
    assert controller.state.run_job_description == "Data engineer"

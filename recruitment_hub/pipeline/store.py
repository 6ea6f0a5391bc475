from typing import Iterable

from recruitment_hub.core.enums import CandidateStatus
from recruitment_hub.core.errors import CandidateNotFoundError, InvalidStatusTransitionError
from recruitment_hub.core.models import Candidate

ALLOWED_TRANSITIONS: dict[CandidateStatus, set[CandidateStatus]] = {
    CandidateStatus.NEW: {CandidateStatus.CONTACTED},
    CandidateStatus.ERROR: set(),
    CandidateStatus.CONTACTED: set(),
}


def ranking_key(candidate: Candidate) -> tuple[int, bool, int]:
    """Descending score; scored before failed at equal score; then upload order."""
    return (-candidate.score, candidate.is_error, candidate.upload_index)


class CandidateStore:
    def __init__(self) -> None:
        self._candidates: list[Candidate] = []

    def __len__(self) -> int:
        return len(self._candidates)

    def snapshot(self) -> list[Candidate]:
        return list(self._candidates)

    def get(self, candidate_id: str) -> Candidate:
        for candidate in self._candidates:
            if candidate.id == candidate_id:
                return candidate
        raise CandidateNotFoundError(f"Candidate {candidate_id} not found")

    def merge(self, candidates: Iterable[Candidate]) -> list[Candidate]:
        incoming = list(candidates)
        known = {candidate.id for candidate in self._candidates}
        for candidate in incoming:
            if candidate.id in known:
                raise ValueError(f"Duplicate candidate id {candidate.id}")
            known.add(candidate.id)
        self._candidates = sorted([*self._candidates, *incoming], key=ranking_key)
        return self.snapshot()

    def transition(self, candidate_id: str, target: CandidateStatus) -> Candidate:
        current = self.get(candidate_id)
        if target not in ALLOWED_TRANSITIONS[current.status]:
            raise InvalidStatusTransitionError(
                f"Cannot move candidate {candidate_id} from {current.status.value} to {target.value}"
            )
        updated = current.model_copy(update={"status": target})
        self._candidates = [updated if item.id == candidate_id else item for item in self._candidates]
        return updated

    def mark_contacted(self, candidate_id: str) -> Candidate:
        return self.transition(candidate_id, CandidateStatus.CONTACTED)

    def clear(self) -> None:
        self._candidates = []

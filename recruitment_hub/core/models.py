from pydantic import BaseModel, ConfigDict, Field

from recruitment_hub.core.enums import CandidateStatus


class UploadedDocument(BaseModel):
    filename: str
    content: bytes
    media_type: str = ""

    model_config = ConfigDict(frozen=True)


class ResumeProfile(BaseModel):
    name: str = ""
    email: str = ""
    summary: str = ""
    skills: list[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    score: int = Field(ge=0, le=100)
    justification: str = ""


class Candidate(BaseModel):
    id: str
    filename: str
    upload_index: int
    name: str = ""
    email: str = ""
    summary: str = ""
    skills: list[str] = Field(default_factory=list)
    score: int = 0
    justification: str = ""
    status: CandidateStatus = CandidateStatus.NEW

    @property
    def is_error(self) -> bool:
        return self.status == CandidateStatus.ERROR


class PipelineProgress(BaseModel):
    processed: int = 0
    total: int

    model_config = ConfigDict(frozen=True)

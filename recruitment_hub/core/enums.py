from enum import Enum


class CandidateStatus(str, Enum):
    NEW = "New"
    ERROR = "Error"
    CONTACTED = "Contacted"


class PipelineStage(str, Enum):
    EXTRACT = "extract"
    PARSE = "parse"
    SCORE = "score"


class MediaType(str, Enum):
    PLAIN_TEXT = "text/plain"
    PDF = "application/pdf"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

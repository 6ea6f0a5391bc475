class ScreeningError(Exception):
    """Base class for every error raised by the screening pipeline."""


class ValidationError(ScreeningError):
    pass


class ExtractionError(ScreeningError):
    pass


class UnsupportedFormatError(ExtractionError):
    pass


class LLMProviderError(ScreeningError):
    pass


class ParsingError(ScreeningError):
    pass


class ScoringError(ScreeningError):
    pass


class DraftingError(ScreeningError):
    pass


class RunLevelError(ScreeningError):
    pass


class RunInProgressError(ScreeningError):
    pass


class CandidateNotFoundError(ScreeningError):
    pass


class InvalidStatusTransitionError(ScreeningError):
    pass


class OutreachNotAllowedError(ScreeningError):
    pass

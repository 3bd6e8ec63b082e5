"""Error taxonomy for the medical query pipeline.

Classification and synthesis failures are not represented here: those
stages absorb their errors into documented defaults and never raise.
"""


class MedicalQueryError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class ConfigurationError(MedicalQueryError):
    """A required capability (LLM or relational store) is not configured."""


class QuestionValidationError(MedicalQueryError):
    """The incoming question is missing, not a string, or blank."""

    message = "Question is required and must be a non-empty string"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class TranslationFailure(MedicalQueryError):
    """SQL could not be generated for the question."""


class ExecutionFailure(MedicalQueryError):
    """The relational store rejected or could not run the generated SQL."""

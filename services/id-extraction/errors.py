"""Error taxonomy for the extraction pipeline.

Every error is caught at the HTTP boundary and reported with the same failure
shape; ``stage`` only feeds the logs.
"""


class ReconciliationError(Exception):
    """Base class for all pipeline failures."""

    stage = "pipeline"


class MissingParameter(ReconciliationError):
    """Request is missing imageUrl, idType or userId."""

    stage = "validation"


class ServiceNotConfigured(ReconciliationError):
    """A required backend credential is not configured."""

    stage = "configuration"


class InferenceApiError(ReconciliationError):
    """Inference API returned a non-success status or could not be reached."""

    stage = "inference"

    def __init__(self, message: str, status_code: int | None = None, status_text: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class ExtractionParseError(ReconciliationError):
    """Model output could not be read as the target JSON object."""

    stage = "parse"


class PersistenceError(ReconciliationError):
    """A database read or write failed."""

    stage = "persistence"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code

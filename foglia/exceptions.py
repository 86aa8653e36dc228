"""Exception hierarchy for the evaluation pipeline.

Every failure the core can report to a caller derives from FogliaError, so
transports can catch a single type and map it through ``status_code``.
A model answer that does not match the verdict schema is *not* an error and
has no exception here: it degrades to an unstructured result.
"""

from typing import Optional


class FogliaError(Exception):
    """Base exception for all pipeline errors."""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            cause: Optional underlying exception that triggered this error.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        # Set by the orchestrator to the last stage the evaluation reached.
        self.stage: Optional[str] = None

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class InvalidInputError(FogliaError):
    """Raised for empty or oversized content and missing uploads."""

    status_code = 400
    error_code = "input_invalid"


class UnsupportedFormatError(FogliaError):
    """Raised when a document format cannot be determined or handled."""

    status_code = 415
    error_code = "unsupported_format"

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize the unsupported format error.

        Args:
            message: Human-readable error description.
            filename: Optional name of the offending upload.
            cause: Optional underlying exception.
        """
        super().__init__(message, cause)
        self.filename = filename

    def __str__(self) -> str:
        """Return string representation including the filename."""
        base_msg = super().__str__()
        if self.filename:
            return f"{base_msg} (file: {self.filename})"
        return base_msg


class DocumentUnreadableError(UnsupportedFormatError):
    """Raised when every extractor for a recognized format failed."""

    error_code = "document_unreadable"


class EmptyExtractionError(FogliaError):
    """Raised when a document yields no text once whitespace is removed."""

    status_code = 422
    error_code = "empty_extraction"


class ExtractionTimeoutError(FogliaError):
    """Raised when text extraction exceeds its time budget."""

    status_code = 504
    error_code = "extraction_timeout"


class GenerationError(FogliaError):
    """Base class for failures of the text generation capability."""

    status_code = 502
    error_code = "generation_error"


class GenerationUnavailableError(GenerationError):
    """Raised when the provider is unreachable or mis-configured."""

    status_code = 503
    error_code = "generation_unavailable"


class GenerationTimeoutError(GenerationError):
    """Raised when the provider does not answer within the timeout."""

    status_code = 504
    error_code = "generation_timeout"


class GenerationRejectedError(GenerationError):
    """Raised when the provider refuses the request (content or quota)."""

    status_code = 502
    error_code = "generation_rejected"

    def __init__(
        self,
        message: str,
        provider_status: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize the rejection error.

        Args:
            message: Human-readable error description.
            provider_status: HTTP status reported by the provider, if any.
            cause: Optional underlying exception.
        """
        super().__init__(message, cause)
        self.provider_status = provider_status


class EvaluationCancelledError(FogliaError):
    """Raised when the caller cancels an evaluation before it completes."""

    status_code = 499
    error_code = "cancelled"

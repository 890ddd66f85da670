"""
Error taxonomy for the transaction pipeline.

Every failure surfaces to the caller; the queue runtime decides whether the
message is redelivered. No error is recovered locally.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds a message can end in."""

    DESERIALIZATION = "deserialization"
    MALFORMED_INPUT = "malformed_input"
    STORAGE = "storage"


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    kind: ErrorKind

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DeserializationError(PipelineError):
    """Raised when an inbound payload is not valid JSON or has the wrong shape."""

    kind = ErrorKind.DESERIALIZATION


class MalformedInputError(PipelineError):
    """Raised when an event has an unusable transactionId or transactionDate."""

    kind = ErrorKind.MALFORMED_INPUT


class StorageError(PipelineError):
    """Raised when the object-store write fails."""

    kind = ErrorKind.STORAGE


class ProcessingError(PipelineError):
    """Raised by the message handler when enrichment or storage fails.

    Carries the cause's message unmodified and the cause's kind.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        details: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind

    @classmethod
    def wrap(
        cls,
        cause: Exception,
        default_kind: ErrorKind,
        details: dict[str, str] | None = None,
    ) -> "ProcessingError":
        """Build a ProcessingError that mirrors ``cause``.

        ``default_kind`` applies when the cause is not a PipelineError.
        """
        kind = cause.kind if isinstance(cause, PipelineError) else default_kind
        return cls(str(cause), kind=kind, details=details)

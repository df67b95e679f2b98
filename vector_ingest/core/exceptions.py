"""
Exception hierarchy for the embedding ingestion pipeline.

Every error carries a ``details`` dict so the orchestrator can attach the
failing document and batch before re-raising.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the pipeline
"""

from typing import Any


class VectorIngestException(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class StructuralError(VectorIngestException):
    """Raised when batcher input is malformed (non-positive capacity, non-text chunk)."""


class EmbeddingError(VectorIngestException):
    """Base exception for batch-level embedding failures."""

    def __init__(
        self,
        message: str,
        batch_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize embedding error.

        Args:
            message: Error message
            batch_index: Position of the failing batch within its document
            details: Additional context
        """
        details = details or {}
        if batch_index is not None:
            details["batch_index"] = batch_index
        super().__init__(message, details)

    @property
    def batch_index(self) -> int | None:
        return self.details.get("batch_index")


class ProviderRejection(EmbeddingError):
    """Raised when the embedding provider returns an error for a request."""

    def __init__(
        self,
        message: str,
        batch_index: int | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if error_code:
            details["error_code"] = error_code
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, batch_index, details)

    @property
    def error_code(self) -> str | None:
        return self.details.get("error_code")


class ProtocolViolation(EmbeddingError):
    """Raised when a provider response does not match the request shape."""

    def __init__(
        self,
        message: str,
        batch_index: int | None = None,
        expected: int | None = None,
        received: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if expected is not None:
            details["expected"] = expected
        if received is not None:
            details["received"] = received
        super().__init__(message, batch_index, details)


class CollaboratorFailure(VectorIngestException):
    """Base exception for chunk source, splitter and sink failures."""

    def __init__(
        self,
        message: str,
        collaborator: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize collaborator failure.

        Args:
            message: Error message
            collaborator: Failing collaborator (chunk_source, splitter, sink)
            details: Additional context
        """
        details = details or {}
        if collaborator:
            details["collaborator"] = collaborator
        super().__init__(message, details)


class PipelineCancelled(VectorIngestException):
    """Raised when a run is stopped through its cancellation event."""

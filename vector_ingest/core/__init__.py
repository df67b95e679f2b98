"""
Core business logic module.

Contains the batched embedding core, the document processing pipeline and
the exception hierarchy.
"""

from vector_ingest.core.exceptions import (
    CollaboratorFailure,
    EmbeddingError,
    PipelineCancelled,
    ProtocolViolation,
    ProviderRejection,
    StructuralError,
    VectorIngestException,
)

__all__ = [
    "VectorIngestException",
    "StructuralError",
    "EmbeddingError",
    "ProviderRejection",
    "ProtocolViolation",
    "CollaboratorFailure",
    "PipelineCancelled",
]

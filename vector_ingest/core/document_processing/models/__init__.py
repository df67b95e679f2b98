"""
Models for the document processing pipeline.

Exports: Document, DocumentResult, RunSummary, ObjectEvent
"""

from .document import Document
from .pipeline_result import DocumentResult, RunSummary
from .s3_event import ObjectEvent

__all__ = [
    "Document",
    "DocumentResult",
    "RunSummary",
    "ObjectEvent",
]

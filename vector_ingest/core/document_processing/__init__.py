"""
Document embedding pipeline.

Streams documents from an object store, splits them, embeds the chunks in
provider-sized batches and persists one embedding list per document.

Dependencies: boto3, langchain_text_splitters, pydantic, pydantic_settings
System role: Document ingestion pipeline entrypoint
"""

from .configs import (
    EmbeddingPipelineSettings,
    get_pipeline_settings,
)
from .entrypoint import EmbeddingPipeline
from .models import Document, DocumentResult, ObjectEvent, RunSummary

__all__ = [
    "EmbeddingPipeline",
    "EmbeddingPipelineSettings",
    "get_pipeline_settings",
    "Document",
    "DocumentResult",
    "ObjectEvent",
    "RunSummary",
]

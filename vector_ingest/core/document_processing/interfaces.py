"""
Collaborator interfaces consumed by the pipeline orchestrator.

Dependencies: typing
System role: Seams between the orchestrator and its I/O tasks
"""

from collections.abc import Iterator
from typing import Protocol

from vector_ingest.core.embedding.models import Embedding

from .models import Document


class ChunkSource(Protocol):
    """Finite, lazy, non-restartable stream of documents."""

    def iter_documents(self, prefix: str = "") -> Iterator[Document]: ...

    def read_text(self, document: Document) -> str: ...


class Splitter(Protocol):
    def split(self, text: str) -> list[str]: ...


class Sink(Protocol):
    """Called once per document with that document's full embedding list."""

    def persist(self, document: Document, embeddings: list[Embedding]) -> str: ...

"""
Local JSON persistence task for document embeddings.

Saves one JSON file per document for local development, in place of the
S3 Vectors sink.

Dependencies: json, pathlib, datetime
System role: Final stage of the ingestion pipeline (development sink)
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path

from vector_ingest.core.embedding.models import Embedding

from ..models import Document
from .vector_store_task import VectorStoreUploadError


class SavingTask:
    """Save document embeddings to local JSON files."""

    def __init__(self, output_directory: str, tenant_id: str = "default") -> None:
        """
        Initialize saving task with output directory.

        Args:
            output_directory: Directory path for JSON output
            tenant_id: Tenant recorded in every output file

        Creates directory if it does not exist.
        """
        self._output_dir = Path(output_directory)
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._tenant_id = tenant_id

    def output_path_for(self, document: Document) -> Path:
        """Output file of a document; key separators are flattened."""
        return self._output_dir / f"{document.key.replace('/', '__')}.json"

    def persist(self, document: Document, embeddings: list[Embedding]) -> str:
        """
        Save embeddings to a JSON file.

        The file is written under a temporary name and renamed, so a failed
        write never leaves a partial document behind.

        Args:
            document: Document the embeddings belong to
            embeddings: Embeddings in chunk order

        Returns:
            str: Path to saved JSON file

        Raises:
            VectorStoreUploadError: When file writing fails
        """
        output_path = self.output_path_for(document)
        tmp_path = output_path.with_suffix(".json.tmp")

        output_data = {
            "document_key": document.key,
            "tenant_id": self._tenant_id,
            "processed_at": datetime.now(timezone.utc).isoformat(),
            "chunk_count": len(embeddings),
            "chunks": [
                {"chunk_index": index, "text": embedding.text, "embedding": embedding.vector}
                for index, embedding in enumerate(embeddings)
            ],
        }

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(output_data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, output_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise VectorStoreUploadError(
                f"Failed to write embeddings file: {e}",
                details={"document_key": document.key, "path": str(output_path)},
            ) from e

        return str(output_path)

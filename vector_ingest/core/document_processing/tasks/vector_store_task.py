"""
S3 Vectors sink.

Writes a document's embeddings to an Amazon S3 Vectors index with the
metadata used for tenant-isolated similarity search.

Dependencies: boto3
System role: Final stage of the ingestion pipeline (production sink)
"""

import hashlib
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from vector_ingest.core.embedding.models import Embedding
from vector_ingest.core.exceptions import CollaboratorFailure

from ..models import Document

logger = logging.getLogger(__name__)

# PutVectors accepts at most 500 vectors per call
PUT_VECTORS_MAX_BATCH = 500


class VectorStoreUploadError(CollaboratorFailure):
    """Raised when vector store upload fails."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message, collaborator="sink", details=details)


class VectorStoreTask:
    """Persist embeddings to S3 Vectors."""

    def __init__(
        self,
        vectors_bucket: str,
        index_name: str = "documents",
        tenant_id: str = "default",
        region: str = "ap-southeast-2",
        client: Any | None = None,
    ) -> None:
        """
        Initialize vector store task.

        Args:
            vectors_bucket: S3 Vectors bucket name
            index_name: Index name within the bucket
            tenant_id: Isolation key written into every vector's metadata
            region: AWS region for S3 Vectors
            client: Pre-built s3vectors client (created when None)

        Raises:
            ValueError: When vectors_bucket or index_name is empty
        """
        if not vectors_bucket:
            raise ValueError("vectors_bucket cannot be empty")
        if not index_name:
            raise ValueError("index_name cannot be empty")

        self.vectors_bucket = vectors_bucket
        self.index_name = index_name
        self.tenant_id = tenant_id
        self._client = client or boto3.client("s3vectors", region_name=region)

    @staticmethod
    def generate_vector_key(document_key: str, chunk_index: int, content: str) -> str:
        """
        Generate deterministic vector key from document, position and content.

        Returns:
            str: SHA-256 hash prefix (32 chars)
        """
        hash_input = f"{document_key}:{chunk_index}:{content}"
        return hashlib.sha256(hash_input.encode()).hexdigest()[:32]

    def _to_vector(self, document: Document, chunk_index: int, embedding: Embedding) -> dict:
        return {
            "key": self.generate_vector_key(document.key, chunk_index, embedding.text),
            "data": {"float32": embedding.vector},
            "metadata": {
                "tenant_id": self.tenant_id,
                "document_key": document.key,
                "chunk_index": chunk_index,
                "text_content": embedding.text,
            },
        }

    def persist(self, document: Document, embeddings: list[Embedding]) -> str:
        """
        Write all embeddings of one document.

        Args:
            document: Document the embeddings belong to
            embeddings: Embeddings in chunk order

        Returns:
            str: s3vectors:// location of the document's vectors

        Raises:
            VectorStoreUploadError: When a PutVectors call fails
        """
        location = f"s3vectors://{self.vectors_bucket}/{self.index_name}/{document.key}"
        if not embeddings:
            return location

        vectors = [
            self._to_vector(document, chunk_index, embedding)
            for chunk_index, embedding in enumerate(embeddings)
        ]
        written: list[str] = []
        try:
            for start in range(0, len(vectors), PUT_VECTORS_MAX_BATCH):
                group = vectors[start : start + PUT_VECTORS_MAX_BATCH]
                self._client.put_vectors(
                    vectorBucketName=self.vectors_bucket,
                    indexName=self.index_name,
                    vectors=group,
                )
                written.extend(vector["key"] for vector in group)
        except (ClientError, BotoCoreError) as e:
            self._rollback(document, written)
            logger.exception(
                "%s:persist - Failed to upload vectors to S3 Vectors",
                __name__,
                extra={"document_key": document.key, "error": str(e)},
            )
            raise VectorStoreUploadError(
                f"Failed to upload to S3 Vectors: {e}",
                details={
                    "document_key": document.key,
                    "vector_count": len(vectors),
                    "bucket": self.vectors_bucket,
                    "index": self.index_name,
                },
            ) from e

        logger.info(
            "%s:persist - Uploaded vectors to S3 Vectors",
            __name__,
            extra={
                "vector_count": len(vectors),
                "document_key": document.key,
                "tenant_id": self.tenant_id,
                "bucket": self.vectors_bucket,
                "index": self.index_name,
            },
        )
        return location

    def _rollback(self, document: Document, keys: list[str]) -> None:
        """Delete the groups already written for a document whose upload failed."""
        if not keys:
            return
        try:
            for start in range(0, len(keys), PUT_VECTORS_MAX_BATCH):
                self._client.delete_vectors(
                    vectorBucketName=self.vectors_bucket,
                    indexName=self.index_name,
                    keys=keys[start : start + PUT_VECTORS_MAX_BATCH],
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "%s:_rollback - Failed to remove partial upload: %s",
                __name__,
                e,
                extra={"document_key": document.key, "vector_count": len(keys)},
            )

"""
Object store document source.

Lists documents under a bucket prefix and reads their text bodies.
Works against AWS S3 and S3-compatible stores through ``endpoint_url``.

Dependencies: boto3
System role: First stage of the ingestion pipeline (chunk source)
"""

import logging
from collections.abc import Iterator
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from vector_ingest.core.exceptions import CollaboratorFailure

from ..models import Document

logger = logging.getLogger(__name__)


class ObjectStoreError(CollaboratorFailure):
    """Raised when listing or reading from the object store fails."""

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message, collaborator="chunk_source", details={"key": key} if key else None)


class ObjectStoreSource:
    """Stream documents from an object store bucket."""

    def __init__(
        self,
        bucket: str,
        region: str = "ap-southeast-2",
        endpoint_url: str | None = None,
        encoding: str = "utf-8",
        client: Any | None = None,
    ) -> None:
        """
        Initialize object store source.

        Args:
            bucket: Bucket holding the documents
            region: Bucket region
            endpoint_url: Endpoint of an S3-compatible store (None = AWS S3)
            encoding: Text encoding of the objects
            client: Pre-built S3 client (created when None)

        Raises:
            ValueError: When bucket is empty
        """
        if not bucket:
            raise ValueError("bucket cannot be empty")

        self._bucket = bucket
        self._encoding = encoding
        self._s3_client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url or None,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def iter_documents(self, prefix: str = "") -> Iterator[Document]:
        """
        Lazily list documents under a prefix, in key order.

        Folder placeholder keys (ending in "/") are skipped. The listing is
        paged, so pages are fetched only as the consumer advances.

        Args:
            prefix: Key prefix or a single object name

        Yields:
            Document: One reference per object

        Raises:
            ObjectStoreError: When listing fails
        """
        paginator = self._s3_client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    key = item["Key"]
                    if key.endswith("/"):
                        continue
                    yield Document(
                        key=key,
                        bucket=self._bucket,
                        size_bytes=item.get("Size", 0),
                        etag=item.get("ETag"),
                    )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Failed to list objects under '{prefix}': {e}", prefix) from e

    def read_text(self, document: Document) -> str:
        """
        Read and decode a document body.

        Args:
            document: Document reference

        Returns:
            str: Decoded body

        Raises:
            ObjectStoreError: When the object is missing, unreadable or not decodable
        """
        try:
            response = self._s3_client.get_object(
                Bucket=document.bucket or self._bucket,
                Key=document.key,
            )
            body = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise ObjectStoreError(f"Object not found: {document.key}", document.key) from e
            raise ObjectStoreError(f"Failed to read object: {e}", document.key) from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"Failed to read object: {e}", document.key) from e

        try:
            return body.decode(self._encoding)
        except UnicodeDecodeError as e:
            raise ObjectStoreError(
                f"Object is not valid {self._encoding} text: {document.key}",
                document.key,
            ) from e

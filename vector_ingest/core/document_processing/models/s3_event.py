"""
S3 event notification schema.

S3 publishes ObjectCreated notifications to SQS; each SQS record body holds a
JSON document with a ``Records`` array of S3 events.

Dependencies: pydantic
System role: Data validation for the Lambda entry point
"""

from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field

from .document import Document


class ObjectEvent(BaseModel):
    """One object referenced by an S3 event notification."""

    bucket: str = Field(..., description="Bucket the object was written to")
    key: str = Field(..., description="URL-decoded object key")
    size_bytes: int = Field(default=0, description="Object size")
    etag: str | None = Field(default=None)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "bucket": "vector-ingest-dev-documents",
                "key": "manuals/pump-maintenance.txt",
                "size_bytes": 20480,
            }
        }
    )

    @classmethod
    def from_s3_record(cls, record: dict) -> "ObjectEvent":
        """
        Build from a single S3 event record.

        Raises:
            ValueError: Not an S3 event or the object key is missing
        """
        if record.get("eventSource") != "aws:s3":
            raise ValueError(f"Invalid event source: {record.get('eventSource')}")

        s3_info = record.get("s3", {})
        object_info = s3_info.get("object", {})
        key = unquote_plus(object_info.get("key", ""))
        if not key:
            raise ValueError("Missing S3 object key")

        return cls(
            bucket=s3_info.get("bucket", {}).get("name", ""),
            key=key,
            size_bytes=object_info.get("size", 0),
            etag=object_info.get("eTag"),
        )

    @property
    def is_folder(self) -> bool:
        return self.key.endswith("/")

    def to_document(self) -> Document:
        return Document(
            key=self.key,
            bucket=self.bucket,
            size_bytes=self.size_bytes,
            etag=self.etag,
        )

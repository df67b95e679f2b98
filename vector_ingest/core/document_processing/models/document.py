"""
Document model for the ingestion pipeline.

A reference to one object in the documents bucket. The body is read lazily by
the chunk source when the orchestrator reaches the document.

Dependencies: pydantic
System role: Unit of work flowing through the document stream
"""

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """Object store document reference."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, description="Object key within the bucket")
    bucket: str = Field(default="", description="Bucket name (empty when the source has a single bucket)")
    size_bytes: int = Field(default=0, ge=0, description="Object size reported by the store")
    etag: str | None = Field(default=None, description="Object ETag, when listed")

    @property
    def uri(self) -> str:
        if self.bucket:
            return f"s3://{self.bucket}/{self.key}"
        return self.key

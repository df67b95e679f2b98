"""
Configuration settings for the embedding ingestion pipeline.

Provides environment-based configuration for the object store source,
chunking, embedding and vector persistence.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vector_ingest.core.embedding.models import (
    PROVIDER_MAX_BATCH_SIZE,
    ServingMode,
    ServingTarget,
    TruncationPolicy,
)


class EmbeddingPipelineSettings(BaseSettings):
    """Settings for the document embedding pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="EMBED_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Object store source
    documents_bucket: str = Field(
        default="vector-ingest-dev-documents",
        description="Bucket holding the source documents",
    )
    documents_prefix: str = Field(
        default="",
        description="Object key prefix (or a single object name) to ingest",
    )
    object_store_region: str = Field(
        default="ap-southeast-2",
        description="Region of the documents bucket",
    )
    object_store_endpoint_url: str | None = Field(
        default=None,
        description="Endpoint for S3-compatible object stores (None = AWS S3)",
    )
    document_encoding: str = Field(
        default="utf-8",
        description="Text encoding of the source objects",
    )

    # Chunking
    chunk_size: int = Field(default=1000, gt=0, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(default=200, ge=0, description="Overlap between consecutive chunks")

    # Embedding
    bedrock_region: str = Field(default="us-east-1", description="Region hosting the embedding model")
    serving_mode: ServingMode = Field(
        default=ServingMode.ON_DEMAND,
        description="ON_DEMAND (shared model) or DEDICATED (provisioned endpoint)",
    )
    model_id: str = Field(
        default="cohere.embed-english-v3",
        description="Model identifier used in ON_DEMAND mode",
    )
    endpoint_id: str = Field(
        default="",
        description="Dedicated endpoint (provisioned throughput ARN) used in DEDICATED mode",
    )
    tenant_id: str = Field(
        default="default",
        description="Compartment / tenant the embeddings belong to",
    )
    truncation_policy: TruncationPolicy = Field(
        default=TruncationPolicy.NONE,
        description="NONE rejects inputs over 512 tokens; START/END truncate",
    )
    input_type: str = Field(default="search_document", description="Provider input type hint")
    max_batch_size: int = Field(
        default=PROVIDER_MAX_BATCH_SIZE,
        ge=1,
        le=PROVIDER_MAX_BATCH_SIZE,
        description="Texts per provider request (provider ceiling is 96)",
    )
    expected_dimension: int | None = Field(
        default=None,
        description="Vector length the sink index expects (None = not enforced)",
    )
    max_concurrency: int = Field(
        default=1,
        ge=1,
        description="Parallel provider calls within one document",
    )

    # Sink
    sink_type: Literal["s3vectors", "json"] = Field(
        default="s3vectors",
        description="Vector sink: 's3vectors' for production, 'json' for local development",
    )
    vectors_bucket: str = Field(default="vector-ingest-dev-vectors", description="S3 Vectors bucket name")
    vectors_index: str = Field(default="documents", description="S3 Vectors index name within the bucket")
    vectors_region: str = Field(default="ap-southeast-2", description="Region of the S3 Vectors bucket")
    output_directory: str = Field(default="./data/embeddings", description="Directory for the JSON sink")

    # Run policy
    on_error: Literal["abort", "skip"] = Field(
        default="abort",
        description="abort: stop the run on the first failed document; skip: record it and continue",
    )
    persist_empty_documents: bool = Field(
        default=True,
        description="Hand an empty embedding list to the sink for documents without chunks",
    )

    log_level: str = Field(default="INFO", description="Logging level")

    @model_validator(mode="after")
    def _check_serving_target(self) -> "EmbeddingPipelineSettings":
        if self.serving_mode is ServingMode.DEDICATED and not self.endpoint_id:
            raise ValueError("endpoint_id is required when serving_mode is DEDICATED")
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    @property
    def serving_target(self) -> ServingTarget:
        """Serving target selector built from serving_mode / model_id / endpoint_id."""
        if self.serving_mode is ServingMode.DEDICATED:
            return ServingTarget.dedicated(self.endpoint_id)
        return ServingTarget.on_demand(self.model_id)


@lru_cache
def get_pipeline_settings() -> EmbeddingPipelineSettings:
    """
    Get cached pipeline settings instance.

    Returns:
        EmbeddingPipelineSettings: Singleton settings loaded from environment
    """
    return EmbeddingPipelineSettings()

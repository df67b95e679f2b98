"""
Pipeline result models.

Per-document outcome of the orchestrator and the totals of a run.

Dependencies: pydantic
System role: Return types for EmbeddingPipeline.process_document() and run()
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class DocumentResult(BaseModel):
    """Outcome of processing one document."""

    document_key: str = Field(description="Object key of the document")
    status: Literal["success", "failed"] = Field(default="success")
    chunk_count: int = Field(default=0, description="Number of chunks embedded")
    batch_count: int = Field(default=0, description="Number of provider calls issued")
    output_path: str | None = Field(default=None, description="Location reported by the sink")
    processing_time_ms: float = Field(default=0.0, description="Wall time for the document")
    error: str | None = Field(default=None, description="Error type for failed documents")
    details: dict[str, Any] = Field(default_factory=dict, description="Error context")


class RunSummary(BaseModel):
    """Totals for one pipeline run."""

    results: list[DocumentResult] = Field(default_factory=list)
    cancelled: bool = Field(default=False, description="Run stopped by its cancellation event")

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.status == "success")

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if result.status == "failed")

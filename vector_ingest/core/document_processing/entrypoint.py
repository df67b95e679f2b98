"""
Embedding pipeline orchestrator.

Coordinates the object store source, chunking, batched embedding and the
vector sink. Each document is processed to completion (all of its batches
joined) before the next one starts, and a document's embeddings reach the
sink in a single hand-off or not at all.

Dependencies: All task modules, core.embedding, configs
System role: Pipeline orchestration (coordinates only)
"""

import json
import logging
import math
import signal
import threading
import time
from collections.abc import Iterable, Sequence

from vector_ingest.core.embedding import (
    BedrockEmbeddingProvider,
    Embedding,
    EmbeddingInvoker,
    EmbeddingModel,
)
from vector_ingest.core.exceptions import (
    PipelineCancelled,
    ProtocolViolation,
    VectorIngestException,
)
from vector_ingest.observability import (
    configure_logging,
    log_exception_with_context,
    log_with_context,
)

from .configs import EmbeddingPipelineSettings, get_pipeline_settings
from .interfaces import ChunkSource, Sink, Splitter
from .models import Document, DocumentResult, RunSummary
from .tasks import ChunkingTask, ObjectStoreSource, SavingTask, VectorStoreTask

logger = logging.getLogger(__name__)


class EmbeddingPipeline:
    """Orchestrate ingestion: object store -> split -> embed in batches -> sink."""

    def __init__(
        self,
        settings: EmbeddingPipelineSettings | None = None,
        source: ChunkSource | None = None,
        splitter: Splitter | None = None,
        embedding_model: EmbeddingModel | None = None,
        sink: Sink | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration.

        Collaborators not passed in are built from settings.

        Args:
            settings: Pipeline settings (uses environment defaults if None)
            source: Document source
            splitter: Text splitter
            embedding_model: Batched embedding model
            sink: Embedding persistence
        """
        self._settings = settings or get_pipeline_settings()

        self._source = source or ObjectStoreSource(
            bucket=self._settings.documents_bucket,
            region=self._settings.object_store_region,
            endpoint_url=self._settings.object_store_endpoint_url,
            encoding=self._settings.document_encoding,
        )
        self._splitter = splitter or ChunkingTask(
            chunk_size=self._settings.chunk_size,
            chunk_overlap=self._settings.chunk_overlap,
        )
        self._embedding_model = embedding_model or self._build_embedding_model()
        self._sink = sink or self._build_sink()
        self._dimension: int | None = None

    def _build_embedding_model(self) -> EmbeddingModel:
        invoker = EmbeddingInvoker(
            provider=BedrockEmbeddingProvider(region=self._settings.bedrock_region),
            serving_target=self._settings.serving_target,
            tenant_id=self._settings.tenant_id,
            truncation=self._settings.truncation_policy,
            input_type=self._settings.input_type,
            expected_dimension=self._settings.expected_dimension,
        )
        return EmbeddingModel(
            invoker,
            max_batch_size=self._settings.max_batch_size,
            max_concurrency=self._settings.max_concurrency,
        )

    def _build_sink(self) -> Sink:
        if self._settings.sink_type == "json":
            return SavingTask(
                output_directory=self._settings.output_directory,
                tenant_id=self._settings.tenant_id,
            )
        return VectorStoreTask(
            vectors_bucket=self._settings.vectors_bucket,
            index_name=self._settings.vectors_index,
            tenant_id=self._settings.tenant_id,
            region=self._settings.vectors_region,
        )

    def run(
        self,
        documents: Iterable[Document] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RunSummary:
        """
        Process every document of the stream, in stream order.

        Args:
            documents: Document stream (defaults to the configured bucket prefix)
            cancel_event: Checked between documents and before every batch

        Returns:
            RunSummary: Per-document outcomes

        Raises:
            VectorIngestException: First failure when on_error is "abort",
                with document_key (and batch_index) in its details
        """
        stream = documents
        if stream is None:
            stream = self._source.iter_documents(self._settings.documents_prefix)

        summary = RunSummary()
        for document in stream:
            if cancel_event is not None and cancel_event.is_set():
                summary.cancelled = True
                break

            try:
                result = self.process_document(document, cancel_event)
            except PipelineCancelled:
                logger.warning(
                    "%s:run - Run cancelled mid-document, nothing persisted for it",
                    __name__,
                    extra={"document_key": document.key},
                )
                summary.cancelled = True
                break
            except Exception as e:
                if isinstance(e, VectorIngestException):
                    e.details.setdefault("document_key", document.key)
                log_exception_with_context(
                    logger,
                    f"{__name__}:run - Document failed",
                    e,
                    document_key=document.key,
                    on_error=self._settings.on_error,
                )
                if self._settings.on_error == "abort":
                    raise
                summary.results.append(self._failed_result(document, e))
                continue

            summary.results.append(result)

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:run - Run complete",
            processed=summary.processed,
            failed_count=summary.failed,
            failed_keys=[r.document_key for r in summary.results if r.status == "failed"],
            cancelled=summary.cancelled,
        )
        return summary

    def process_document(
        self,
        document: Document,
        cancel_event: threading.Event | None = None,
    ) -> DocumentResult:
        """
        Read, split, embed and persist one document.

        Args:
            document: Document reference
            cancel_event: Checked before every batch

        Returns:
            DocumentResult: Outcome with chunk and batch counts

        Raises:
            ObjectStoreError: Source read failed
            ChunkingError: Splitting failed
            ProviderRejection / ProtocolViolation: A batch failed
            VectorStoreUploadError: Sink failed
            PipelineCancelled: cancel_event was set mid-document
        """
        start_time = time.perf_counter()
        text = self._source.read_text(document)
        chunks = self._splitter.split(text)
        return self.process_texts(document, chunks, cancel_event, start_time)

    def process_texts(
        self,
        document: Document,
        chunks: Sequence[str],
        cancel_event: threading.Event | None = None,
        start_time: float | None = None,
    ) -> DocumentResult:
        """
        Embed already-split chunks of a document and hand them to the sink.

        Args:
            document: Document the chunks belong to
            chunks: Chunk texts in document order
            cancel_event: Checked before every batch
            start_time: perf_counter() value the document started at

        Returns:
            DocumentResult: Outcome with chunk and batch counts
        """
        start_time = start_time if start_time is not None else time.perf_counter()

        embeddings = self._embedding_model.embed_all(chunks, cancel_event)
        self._check_dimension(embeddings)

        output_path = None
        if embeddings or self._settings.persist_empty_documents:
            output_path = self._sink.persist(document, embeddings)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        result = DocumentResult(
            document_key=document.key,
            chunk_count=len(embeddings),
            batch_count=math.ceil(len(chunks) / self._embedding_model.max_batch_size),
            output_path=output_path,
            processing_time_ms=elapsed_ms,
        )
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:process_texts - Document embedded",
            document_key=document.key,
            embeddings=embeddings,
            batch_count=result.batch_count,
            output_path=output_path,
            processing_time_ms=round(elapsed_ms, 1),
        )
        return result

    def _check_dimension(self, embeddings: list[Embedding]) -> None:
        """Keep vector length constant across the documents of a pipeline."""
        if not embeddings:
            return
        dimension = embeddings[0].dimension
        if self._dimension is None:
            self._dimension = dimension
        elif dimension != self._dimension:
            raise ProtocolViolation(
                "Vector dimension changed between documents",
                expected=self._dimension,
                received=dimension,
            )

    @staticmethod
    def _failed_result(document: Document, exc: Exception) -> DocumentResult:
        details = dict(exc.details) if isinstance(exc, VectorIngestException) else {}
        return DocumentResult(
            document_key=document.key,
            status="failed",
            error=type(exc).__name__,
            details={**details, "message": str(exc)},
        )

    def close(self) -> None:
        """Release the embedding worker pool."""
        self._embedding_model.close()

    def __enter__(self) -> "EmbeddingPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def main() -> RunSummary:
    """Run the pipeline over the configured bucket prefix until done or signalled."""
    settings = get_pipeline_settings()
    configure_logging(settings.log_level)

    cancel_event = threading.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, lambda *_: cancel_event.set())

    with EmbeddingPipeline(settings) as pipeline:
        summary = pipeline.run(cancel_event=cancel_event)

    print(json.dumps(summary.model_dump(), indent=2))
    return summary


if __name__ == "__main__":
    main()

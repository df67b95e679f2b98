"""
Embedding model facade.

Runs a chunk list through the batcher and the invoker and returns the
flattened embeddings in chunk order. Batches of one chunk list may be issued
concurrently on a bounded thread pool; results are always re-assembled in
batch order and every batch is joined before returning.

Dependencies: concurrent.futures, threading
System role: embed_all / embed entry points of the batched embedding core
"""

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from vector_ingest.core.embedding.batcher import to_batches
from vector_ingest.core.embedding.invoker import EmbeddingInvoker
from vector_ingest.core.embedding.models import PROVIDER_MAX_BATCH_SIZE, Batch, Embedding
from vector_ingest.core.exceptions import PipelineCancelled

logger = logging.getLogger(__name__)


class EmbeddingModel:
    """Batch, invoke and reassemble embeddings for ordered chunk lists."""

    def __init__(
        self,
        invoker: EmbeddingInvoker,
        max_batch_size: int = PROVIDER_MAX_BATCH_SIZE,
        max_concurrency: int = 1,
    ) -> None:
        """
        Initialize embedding model.

        Args:
            invoker: Shared, read-only batch invoker
            max_batch_size: Batch capacity (provider ceiling is 96)
            max_concurrency: Parallel provider calls per chunk list (1 = sequential)

        Raises:
            ValueError: When max_concurrency is below 1
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.invoker = invoker
        self.max_batch_size = max_batch_size
        self.max_concurrency = max_concurrency
        self._executor: ThreadPoolExecutor | None = None

    def embed(self, chunk: str) -> Embedding:
        """Embed a single chunk."""
        return self.embed_all([chunk])[0]

    def embed_all(
        self,
        chunks: Sequence[str],
        cancel_event: threading.Event | None = None,
    ) -> list[Embedding]:
        """
        Embed every chunk, preserving order.

        Args:
            chunks: Ordered chunk texts of one document
            cancel_event: Checked before each batch is issued. In parallel mode
                it is checked at submission and again when a worker starts the
                batch; calls already in flight run to completion and their
                results are discarded

        Returns:
            list[Embedding]: One embedding per chunk, in chunk order

        Raises:
            StructuralError: Invalid batch capacity
            ProviderRejection: A batch was refused; no embeddings are returned
            ProtocolViolation: A batch response did not match its request
            PipelineCancelled: cancel_event was set before all batches were issued
        """
        batches = to_batches(chunks, self.max_batch_size)
        if not batches:
            return []

        if self.max_concurrency == 1 or len(batches) == 1:
            results = self._invoke_sequential(batches, cancel_event)
        else:
            results = self._invoke_parallel(batches, cancel_event)

        embeddings: list[Embedding] = []
        for batch_embeddings in results:
            embeddings.extend(batch_embeddings)
        return embeddings

    def _invoke_sequential(
        self,
        batches: list[Batch],
        cancel_event: threading.Event | None,
    ) -> list[list[Embedding]]:
        results = []
        for batch in batches:
            _raise_if_cancelled(cancel_event, batch)
            results.append(self.invoker.invoke(batch))
        return results

    def _invoke_parallel(
        self,
        batches: list[Batch],
        cancel_event: threading.Event | None,
    ) -> list[list[Embedding]]:
        executor = self._get_executor()
        futures: list[Future] = []
        try:
            for batch in batches:
                _raise_if_cancelled(cancel_event, batch)
                futures.append(executor.submit(self._invoke_unless_cancelled, batch, cancel_event))
            # Collected in submission order, so the first failing batch wins
            return [future.result() for future in futures]
        finally:
            for future in futures:
                future.cancel()
            # Barrier: nothing of this chunk list is still running after return
            for future in futures:
                if not future.cancelled():
                    future.exception()

    def _invoke_unless_cancelled(
        self,
        batch: Batch,
        cancel_event: threading.Event | None,
    ) -> list[Embedding]:
        # Queued batches re-check the event when a worker picks them up
        _raise_if_cancelled(cancel_event, batch)
        return self.invoker.invoke(batch)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_concurrency,
                thread_name_prefix="embed-batch",
            )
        return self._executor

    def close(self) -> None:
        """Shut down the batch worker pool, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def _raise_if_cancelled(cancel_event: threading.Event | None, batch: Batch) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelled(
            "Embedding cancelled before batch was issued",
            details={"batch_index": batch.index},
        )

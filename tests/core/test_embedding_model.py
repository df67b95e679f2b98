"""Tests for EmbeddingModel (embed_all / embed).

Tests:
- One provider call per batch and ordered flattening
- Parallel batches reassembled in chunk order
- All-or-nothing results on batch failure
- Cancellation between batches
"""

import threading
import time

import pytest

from vector_ingest.core.embedding import EmbeddingInvoker, EmbeddingModel, EmbedResponse
from vector_ingest.core.exceptions import PipelineCancelled, ProviderRejection


class TestEmbedAll:
    """Test sequential embed_all."""

    def test_250_chunks_use_three_calls(self, embedding_model, fake_provider) -> None:
        """Should call the provider with 96, 96 and 58 inputs."""
        chunks = [f"chunk {i}" for i in range(250)]

        embeddings = embedding_model.embed_all(chunks)

        assert fake_provider.call_count == 3
        assert [len(r.inputs) for r in fake_provider.requests] == [96, 96, 58]
        assert len(embeddings) == 250

    def test_output_order_matches_input(self, embedding_model) -> None:
        """Should return embedding i for chunk i across batch boundaries."""
        chunks = [f"chunk {i}" for i in range(200)]

        embeddings = embedding_model.embed_all(chunks)

        assert [e.text for e in embeddings] == chunks

    def test_empty_input_makes_no_calls(self, embedding_model, fake_provider) -> None:
        """Should return [] without calling the provider."""
        assert embedding_model.embed_all([]) == []
        assert fake_provider.call_count == 0

    def test_embed_single_chunk(self, embedding_model, fake_provider) -> None:
        """Should embed one chunk with one call."""
        embedding = embedding_model.embed("hello")

        assert embedding.text == "hello"
        assert embedding.vector == fake_provider.vector_for("hello")
        assert fake_provider.call_count == 1

    def test_failure_returns_nothing(self, serving_target, provider_factory) -> None:
        """Should raise for the failing batch and stop issuing later ones."""

        def responder(request):
            if request.inputs[0] == "chunk 10":
                raise ProviderRejection("bad input", error_code="ValidationException", status_code=400)
            return EmbedResponse(vectors=[[1.0, 2.0] for _ in request.inputs])

        provider = provider_factory(responder=responder)
        model = EmbeddingModel(
            EmbeddingInvoker(provider, serving_target, tenant_id="tenant-a"),
            max_batch_size=10,
        )

        with pytest.raises(ProviderRejection) as exc_info:
            model.embed_all([f"chunk {i}" for i in range(40)])

        assert exc_info.value.batch_index == 1
        assert provider.call_count == 2

    def test_invalid_concurrency(self, invoker) -> None:
        """Should reject max_concurrency below 1."""
        with pytest.raises(ValueError):
            EmbeddingModel(invoker, max_concurrency=0)


class TestParallelEmbedAll:
    """Test concurrent batch issue within one chunk list."""

    def test_parallel_results_keep_chunk_order(self, serving_target, provider_factory) -> None:
        """Should reassemble in batch order even when later batches finish first."""

        def responder(request):
            # Earlier batches finish last
            number = int(request.inputs[0].split()[-1])
            time.sleep(0.02 if number < 20 else 0)
            return EmbedResponse(vectors=[[float(len(text)), 1.0] for text in request.inputs])

        provider = provider_factory(responder=responder)
        model = EmbeddingModel(
            EmbeddingInvoker(provider, serving_target, tenant_id="tenant-a"),
            max_batch_size=10,
            max_concurrency=4,
        )
        chunks = [f"chunk {i}" for i in range(45)]

        try:
            embeddings = model.embed_all(chunks)
        finally:
            model.close()

        assert [e.text for e in embeddings] == chunks
        assert provider.call_count == 5

    def test_parallel_failure_raises_first_failed_batch(self, serving_target, provider_factory) -> None:
        """Should surface the lowest failing batch and return no embeddings."""

        def responder(request):
            if request.inputs[0] in ("chunk 10", "chunk 30"):
                raise ProviderRejection("rejected", error_code="ValidationException")
            return EmbedResponse(vectors=[[1.0] for _ in request.inputs])

        model = EmbeddingModel(
            EmbeddingInvoker(provider_factory(responder=responder), serving_target, "tenant-a"),
            max_batch_size=10,
            max_concurrency=3,
        )

        try:
            with pytest.raises(ProviderRejection) as exc_info:
                model.embed_all([f"chunk {i}" for i in range(40)])
        finally:
            model.close()

        assert exc_info.value.batch_index == 1

    def test_close_is_idempotent(self, invoker) -> None:
        """Should allow close() without a started pool and twice in a row."""
        model = EmbeddingModel(invoker, max_concurrency=2)

        model.close()
        model.close()


class TestCancellation:
    """Test cancel_event handling."""

    def test_cancelled_before_start(self, embedding_model, fake_provider) -> None:
        """Should issue no call when the event is already set."""
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(PipelineCancelled) as exc_info:
            embedding_model.embed_all(["a", "b"], cancel_event)

        assert exc_info.value.details["batch_index"] == 0
        assert fake_provider.call_count == 0

    def test_cancelled_between_batches(self, serving_target, provider_factory) -> None:
        """Should stop before the next batch once the event is set."""
        cancel_event = threading.Event()

        def responder(request):
            cancel_event.set()
            return EmbedResponse(vectors=[[1.0] for _ in request.inputs])

        provider = provider_factory(responder=responder)
        model = EmbeddingModel(
            EmbeddingInvoker(provider, serving_target, tenant_id="tenant-a"),
            max_batch_size=2,
        )

        with pytest.raises(PipelineCancelled) as exc_info:
            model.embed_all(["a", "b", "c", "d"], cancel_event)

        assert exc_info.value.details["batch_index"] == 1
        assert provider.call_count == 1


class TestPositionalPairing:
    """Test the provider's answer is matched to chunks by position."""

    def test_three_chunks_with_scalar_vectors(self, serving_target, provider_factory) -> None:
        """Should pair [0.1], [0.2], [0.3] with a, b, c in order."""
        provider = provider_factory(
            responder=lambda request: EmbedResponse(vectors=[[0.1], [0.2], [0.3]])
        )
        model = EmbeddingModel(EmbeddingInvoker(provider, serving_target, tenant_id="tenant-a"))

        embeddings = model.embed_all(["a", "b", "c"])

        assert [(e.text, e.vector) for e in embeddings] == [("a", [0.1]), ("b", [0.2]), ("c", [0.3])]
        assert provider.call_count == 1

    def test_queued_parallel_batches_skip_after_cancel(self, serving_target, provider_factory) -> None:
        """Should not call the provider for batches a worker picks up after cancellation."""
        cancel_event = threading.Event()

        def responder(request):
            cancel_event.set()
            return EmbedResponse(vectors=[[1.0] for _ in request.inputs])

        provider = provider_factory(responder=responder)
        model = EmbeddingModel(
            EmbeddingInvoker(provider, serving_target, tenant_id="tenant-a"),
            max_batch_size=1,
            max_concurrency=2,
        )

        try:
            with pytest.raises(PipelineCancelled):
                model.embed_all([f"chunk {i}" for i in range(8)], cancel_event)
        finally:
            model.close()

        assert provider.call_count <= 2

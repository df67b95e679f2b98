"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory embedding provider, document source and sink fakes,
pipeline settings without AWS access.
Dependencies: pytest
System role: Test infrastructure and fixture management
"""

import threading
from collections.abc import Callable, Iterator

import pytest

from vector_ingest.core.document_processing.configs import EmbeddingPipelineSettings
from vector_ingest.core.document_processing.models import Document
from vector_ingest.core.embedding import (
    EmbeddingInvoker,
    EmbeddingModel,
    EmbedRequest,
    EmbedResponse,
    Embedding,
    ServingTarget,
    TruncationPolicy,
)
from vector_ingest.core.exceptions import ProviderRejection


class FakeEmbeddingProvider:
    """
    In-memory embedding provider.

    Vectors are derived from the input text unless ``responder`` overrides
    the response. Emulates the Cohere 512-token limit with a word count when
    truncation is NONE.
    """

    def __init__(
        self,
        dimension: int = 4,
        max_input_words: int | None = None,
        responder: Callable[[EmbedRequest], EmbedResponse] | None = None,
    ) -> None:
        self.dimension = dimension
        self.max_input_words = max_input_words
        self.responder = responder
        self.requests: list[EmbedRequest] = []
        self._lock = threading.Lock()

    @staticmethod
    def vector_for(text: str, dimension: int = 4) -> list[float]:
        base = sum(ord(char) for char in text) % 997
        return [(base + i) / 997.0 for i in range(dimension)]

    def embed(self, request: EmbedRequest) -> EmbedResponse:
        with self._lock:
            self.requests.append(request)

        if self.max_input_words is not None and request.truncation is TruncationPolicy.NONE:
            for text in request.inputs:
                if len(text.split()) > self.max_input_words:
                    raise ProviderRejection(
                        "invalid request: too many tokens",
                        error_code="ValidationException",
                        status_code=400,
                    )

        if self.responder is not None:
            return self.responder(request)
        return EmbedResponse(vectors=[self.vector_for(text, self.dimension) for text in request.inputs])

    @property
    def call_count(self) -> int:
        return len(self.requests)


class FakeDocumentSource:
    """Document source backed by a dict of key -> body."""

    def __init__(self, bodies: dict[str, str], failing_keys: set[str] | None = None) -> None:
        self.bodies = bodies
        self.failing_keys = failing_keys or set()
        self.reads: list[str] = []

    def iter_documents(self, prefix: str = "") -> Iterator[Document]:
        for key in self.bodies:
            if key.startswith(prefix):
                yield Document(key=key, bucket="test-bucket")

    def read_text(self, document: Document) -> str:
        from vector_ingest.core.document_processing.tasks import ObjectStoreError

        self.reads.append(document.key)
        if document.key in self.failing_keys:
            raise ObjectStoreError(f"Object not found: {document.key}", document.key)
        return self.bodies[document.key]


class LineSplitter:
    """One chunk per non-blank line."""

    def split(self, text: str) -> list[str]:
        return [line for line in text.splitlines() if line.strip()]


class RecordingSink:
    """Sink that keeps every hand-off in memory."""

    def __init__(self) -> None:
        self.persisted: list[tuple[str, list[Embedding]]] = []

    def persist(self, document: Document, embeddings: list[Embedding]) -> str:
        self.persisted.append((document.key, list(embeddings)))
        return f"memory://{document.key}"

    @property
    def keys(self) -> list[str]:
        return [key for key, _ in self.persisted]


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    """Provide an in-memory embedding provider."""
    return FakeEmbeddingProvider()


@pytest.fixture
def serving_target() -> ServingTarget:
    """Provide an on-demand serving target."""
    return ServingTarget.on_demand("cohere.embed-english-v3")


@pytest.fixture
def invoker(fake_provider: FakeEmbeddingProvider, serving_target: ServingTarget) -> EmbeddingInvoker:
    """Provide an invoker bound to the fake provider."""
    return EmbeddingInvoker(
        provider=fake_provider,
        serving_target=serving_target,
        tenant_id="tenant-a",
    )


@pytest.fixture
def embedding_model(invoker: EmbeddingInvoker) -> Iterator[EmbeddingModel]:
    """Provide a sequential embedding model with the provider's 96 batch ceiling."""
    model = EmbeddingModel(invoker, max_batch_size=96)
    yield model
    model.close()


@pytest.fixture
def pipeline_settings(tmp_path) -> EmbeddingPipelineSettings:
    """Provide pipeline settings that never touch the environment's AWS config."""
    return EmbeddingPipelineSettings(
        documents_bucket="test-bucket",
        vectors_bucket="test-vectors",
        tenant_id="tenant-a",
        sink_type="json",
        output_directory=str(tmp_path / "embeddings"),
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Provide an in-memory sink."""
    return RecordingSink()


@pytest.fixture
def provider_factory() -> type[FakeEmbeddingProvider]:
    """Provide the fake provider class for tests needing custom behaviour."""
    return FakeEmbeddingProvider


@pytest.fixture
def source_factory() -> type[FakeDocumentSource]:
    """Provide the fake document source class."""
    return FakeDocumentSource


@pytest.fixture
def line_splitter() -> LineSplitter:
    """Provide a splitter yielding one chunk per line."""
    return LineSplitter()

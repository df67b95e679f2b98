"""
Embedding invoker.

Turns one Batch into one provider request and maps the response back to
per-chunk Embeddings by position. Holds only read-only configuration, so a
single invoker is shared by every worker thread.

Dependencies: vector_ingest.core.embedding
System role: Second stage of the batched embedding core
"""

import logging
import math

from vector_ingest.core.embedding.models import (
    Batch,
    EmbedRequest,
    EmbedResponse,
    Embedding,
    ServingTarget,
    TruncationPolicy,
)
from vector_ingest.core.embedding.provider import EmbeddingProvider
from vector_ingest.core.exceptions import EmbeddingError, ProtocolViolation

logger = logging.getLogger(__name__)


class EmbeddingInvoker:
    """Execute one provider call per batch and re-pair vectors with their chunks."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        serving_target: ServingTarget,
        tenant_id: str,
        truncation: TruncationPolicy = TruncationPolicy.NONE,
        input_type: str = "search_document",
        expected_dimension: int | None = None,
    ) -> None:
        """
        Initialize invoker.

        Args:
            provider: Embedding capability (Bedrock client or a fake)
            serving_target: On-demand model or dedicated endpoint
            tenant_id: Compartment / tenant identifier sent with every request
            truncation: Policy for inputs over the provider token limit
            input_type: Provider input type hint
            expected_dimension: Reject vectors of any other length when set

        Raises:
            ValueError: When tenant_id is empty
        """
        if not tenant_id:
            raise ValueError("tenant_id cannot be empty")

        self.provider = provider
        self.serving_target = serving_target
        self.tenant_id = tenant_id
        self.truncation = truncation
        self.input_type = input_type
        self.expected_dimension = expected_dimension

    def build_request(self, batch: Batch) -> EmbedRequest:
        """Build the single provider request for a batch."""
        return EmbedRequest(
            serving_target=self.serving_target,
            tenant_id=self.tenant_id,
            inputs=batch.texts,
            truncation=self.truncation,
            input_type=self.input_type,
        )

    def invoke(self, batch: Batch) -> list[Embedding]:
        """
        Embed one batch.

        Args:
            batch: Owned slice of chunk texts

        Returns:
            list[Embedding]: Same length and order as the batch

        Raises:
            ProviderRejection: Provider refused the request
            ProtocolViolation: Response shape does not match the request
        """
        request = self.build_request(batch)
        try:
            response = self.provider.embed(request)
        except EmbeddingError as e:
            e.details.setdefault("batch_index", batch.index)
            raise

        embeddings = self.to_embeddings(response, batch)
        logger.debug(
            "%s:invoke - Embedded batch",
            __name__,
            extra={"batch_index": batch.index, "batch_size": len(batch)},
        )
        return embeddings

    def to_embeddings(self, response: EmbedResponse, batch: Batch) -> list[Embedding]:
        """
        Pair response vector ``i`` with batch text ``i``.

        Nothing is returned unless every vector validates.
        """
        vectors = response.vectors
        if len(vectors) != len(batch):
            raise ProtocolViolation(
                "Provider returned a different number of vectors than inputs",
                batch_index=batch.index,
                expected=len(batch),
                received=len(vectors),
            )

        embeddings: list[Embedding] = []
        dimension = self.expected_dimension
        for position, (text, raw_vector) in enumerate(zip(batch.texts, vectors)):
            vector = self._convert(raw_vector, batch.index, position)
            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                raise ProtocolViolation(
                    "Provider returned a vector of unexpected dimension",
                    batch_index=batch.index,
                    expected=dimension,
                    received=len(vector),
                    details={"position": position},
                )
            embeddings.append(Embedding(text=text, vector=vector))
        return embeddings

    @staticmethod
    def _convert(raw_vector: list[float], batch_index: int, position: int) -> list[float]:
        try:
            vector = [float(component) for component in raw_vector]
        except (TypeError, ValueError) as e:
            raise ProtocolViolation(
                "Provider returned a non-numeric vector component",
                batch_index=batch_index,
                details={"position": position},
            ) from e
        if not vector or not all(math.isfinite(component) for component in vector):
            raise ProtocolViolation(
                "Provider returned an empty or non-finite vector",
                batch_index=batch_index,
                details={"position": position},
            )
        return vector

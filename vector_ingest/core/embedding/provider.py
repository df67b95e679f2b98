"""
Embedding provider capability.

The core only depends on this one-method interface, so any client (Bedrock,
an HTTP service, an in-memory fake in tests) can be substituted.

Dependencies: typing
System role: Boundary between the embedding core and the remote inference service
"""

from typing import Protocol, runtime_checkable

from vector_ingest.core.embedding.models import EmbedRequest, EmbedResponse


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Synchronous embedding capability: one request in, one response out."""

    def embed(self, request: EmbedRequest) -> EmbedResponse:
        """
        Embed every input of the request.

        Implementations block until the remote call completes and raise
        ProviderRejection when the service refuses the request.
        """
        ...

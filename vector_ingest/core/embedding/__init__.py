"""
Batched embedding core.

Exports: batcher functions, EmbeddingInvoker, EmbeddingModel, provider
capability and the request/response models.
"""

from .batcher import iter_batches, to_batches
from .bedrock_provider import BedrockEmbeddingProvider
from .embedding_model import EmbeddingModel
from .invoker import EmbeddingInvoker
from .models import (
    PROVIDER_MAX_BATCH_SIZE,
    Batch,
    EmbedRequest,
    EmbedResponse,
    Embedding,
    ServingMode,
    ServingTarget,
    TruncationPolicy,
)
from .provider import EmbeddingProvider

__all__ = [
    "PROVIDER_MAX_BATCH_SIZE",
    "Batch",
    "BedrockEmbeddingProvider",
    "EmbedRequest",
    "EmbedResponse",
    "Embedding",
    "EmbeddingInvoker",
    "EmbeddingModel",
    "EmbeddingProvider",
    "ServingMode",
    "ServingTarget",
    "TruncationPolicy",
    "iter_batches",
    "to_batches",
]

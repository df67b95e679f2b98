"""
Embedding batcher.

Greedy left-to-right partition of an ordered chunk sequence into batches of
at most ``max_batch_size`` texts. Batch ``i`` covers ``[i*B, min((i+1)*B, N))``.
Each batch owns a tuple copy of its texts.

Dependencies: itertools
System role: First stage of the batched embedding core
"""

from collections.abc import Iterable, Iterator
from itertools import islice

from vector_ingest.core.embedding.models import PROVIDER_MAX_BATCH_SIZE, Batch
from vector_ingest.core.exceptions import StructuralError


def _check_capacity(max_batch_size: int) -> None:
    if isinstance(max_batch_size, bool) or not isinstance(max_batch_size, int):
        raise StructuralError(
            "max_batch_size must be an integer",
            details={"max_batch_size": repr(max_batch_size)},
        )
    if max_batch_size <= 0:
        raise StructuralError(
            "max_batch_size must be positive",
            details={"max_batch_size": max_batch_size},
        )


def iter_batches(
    chunks: Iterable[str],
    max_batch_size: int = PROVIDER_MAX_BATCH_SIZE,
) -> Iterator[Batch]:
    """
    Lazily partition chunks into order-preserving batches.

    Pulls at most ``max_batch_size`` chunks ahead of the consumer, so an
    unbounded generator can be batched.

    Args:
        chunks: Ordered chunk texts
        max_batch_size: Batch capacity (> 0)

    Yields:
        Batch: Contiguous batches in source order

    Raises:
        StructuralError: Non-positive capacity or a non-string chunk
    """
    _check_capacity(max_batch_size)

    iterator = iter(chunks)
    index = 0
    offset = 0
    while True:
        texts = tuple(islice(iterator, max_batch_size))
        if not texts:
            return
        for position, text in enumerate(texts, start=offset):
            if not isinstance(text, str):
                raise StructuralError(
                    "Chunks must be strings",
                    details={"position": position, "type": type(text).__name__},
                )
        yield Batch(index=index, offset=offset, texts=texts)
        index += 1
        offset += len(texts)


def to_batches(
    chunks: Iterable[str],
    max_batch_size: int = PROVIDER_MAX_BATCH_SIZE,
) -> list[Batch]:
    """Materialise ``iter_batches`` into a list; ``[]`` for no chunks."""
    return list(iter_batches(chunks, max_batch_size))

"""
Task modules for the document processing pipeline.

Exports: ObjectStoreSource, ChunkingTask, VectorStoreTask, SavingTask and their errors
"""

from .chunking_task import ChunkingError, ChunkingTask
from .object_store_task import ObjectStoreError, ObjectStoreSource
from .saving_task import SavingTask
from .vector_store_task import VectorStoreTask, VectorStoreUploadError

__all__ = [
    "ObjectStoreSource",
    "ObjectStoreError",
    "ChunkingTask",
    "ChunkingError",
    "VectorStoreTask",
    "VectorStoreUploadError",
    "SavingTask",
]

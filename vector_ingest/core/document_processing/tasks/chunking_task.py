"""
Text chunking task using RecursiveCharacterTextSplitter.

Splits a document body into ordered text chunks.

Dependencies: langchain_text_splitters
System role: Second stage of the ingestion pipeline (splitter)
"""

from langchain_text_splitters import RecursiveCharacterTextSplitter

from vector_ingest.core.exceptions import CollaboratorFailure


class ChunkingError(CollaboratorFailure):
    """Raised when a document body cannot be split."""

    def __init__(self, message: str) -> None:
        super().__init__(message, collaborator="splitter")


class ChunkingTask:
    """Split text into chunks using RecursiveCharacterTextSplitter."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks
        """
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
        )

    def split(self, text: str) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Document body

        Returns:
            list[str]: Chunks in document order; empty for blank text

        Raises:
            ChunkingError: When the splitter fails
        """
        if not text.strip():
            return []

        try:
            return self._splitter.split_text(text)
        except Exception as e:
            raise ChunkingError(f"Failed to split text: {e}") from e

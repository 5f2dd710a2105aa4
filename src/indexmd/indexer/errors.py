"""
Errors raised by the directory indexer.

Every error carries the path where the traversal stopped so the caller
can report it. None of them is retried at this layer.
"""

from pathlib import Path


class IndexerError(Exception):
    """Base error for indexing operations."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class NotFoundError(IndexerError):
    """A path does not exist or cannot be read."""

    pass


class SummarizationError(IndexerError):
    """A summarizer failed for a file or for a child index document."""

    pass


class WriteError(IndexerError):
    """An index document could not be persisted."""

    pass

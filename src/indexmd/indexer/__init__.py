"""
Indexer module: recursive index documents for a directory tree.

TreeIndexer is the core; summarizers are injected through the
protocols defined here.
"""

from .document import IndexDocument, IndexEntry
from .errors import IndexerError, NotFoundError, SummarizationError, WriteError
from .filesystem import FileSystem
from .protocols import ContentSummarizer, IndexSummarizer
from .tree import DEFAULT_INDEX_FILE_NAME, IndexStats, TreeIndexer

__all__ = [
    "ContentSummarizer",
    "DEFAULT_INDEX_FILE_NAME",
    "FileSystem",
    "IndexDocument",
    "IndexEntry",
    "IndexStats",
    "IndexSummarizer",
    "IndexerError",
    "NotFoundError",
    "SummarizationError",
    "TreeIndexer",
    "WriteError",
]

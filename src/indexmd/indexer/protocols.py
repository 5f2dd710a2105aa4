"""
Interfaces of the collaborators consumed by TreeIndexer.

The indexer only depends on these protocols. The LLM-backed
implementations live in indexmd.summarizer; tests use plain fakes.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentSummarizer(Protocol):
    """Turns the raw text of one source file into a short entry."""

    supported_extensions: frozenset[str]

    def summarize_file(self, file_name: str, raw_text: str) -> str:
        ...


@runtime_checkable
class IndexSummarizer(Protocol):
    """Collapses a child directory's full index document into one entry."""

    def summarize_index(self, document_text: str) -> str:
        ...

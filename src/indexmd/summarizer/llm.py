"""
LLM-backed summarizers for the directory indexer.

LLMContentSummarizer turns one source file into an index entry headed by
the file name. LLMIndexSummarizer collapses a child folder's whole index
document into one paragraph. Both make one LLMAdapter.summarize() call
per entry; retries and empty-reply errors are handled there.
"""

import structlog

from ..llm.adapter import LLMAdapter
from .extensions import SUPPORTED_EXTENSIONS
from .prompts import (
    FILE_SUMMARY_PROMPT,
    FILE_USER_TEMPLATE,
    INDEX_SUMMARY_PROMPT,
    INDEX_USER_TEMPLATE,
    TRUNCATION_MARKER,
)

logger = structlog.get_logger()

# Default limit of characters sent to the model per call
MAX_INPUT_CHARS_DEFAULT = 20_000

# Heading of a file entry in the index document
FILE_HEADING_FORMAT = "### {name}"

EMPTY_FILE_TEXT = "(empty file)"


def _truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


class LLMContentSummarizer:
    """Summarizes source files with an LLM.

    Empty files are described without calling the model.
    """

    def __init__(
        self,
        adapter: LLMAdapter,
        supported_extensions: frozenset[str] | list[str] | None = None,
        max_input_chars: int = MAX_INPUT_CHARS_DEFAULT,
        system_prompt: str | None = None,
    ) -> None:
        self.adapter = adapter
        self.supported_extensions = (
            frozenset(supported_extensions)
            if supported_extensions is not None
            else SUPPORTED_EXTENSIONS
        )
        self.max_input_chars = max_input_chars
        self.system_prompt = system_prompt or FILE_SUMMARY_PROMPT
        self.log = logger.bind(component="content_summarizer")

    def summarize_file(self, file_name: str, raw_text: str) -> str:
        """Return the index entry for one file: heading plus summary."""
        heading = FILE_HEADING_FORMAT.format(name=file_name)
        if not raw_text.strip():
            return f"{heading}\n\n{EMPTY_FILE_TEXT}"

        content = _truncate(raw_text, self.max_input_chars)
        user_content = FILE_USER_TEMPLATE.format(file_name=file_name, content=content)
        self.log.debug(
            "summarizer.file",
            file=file_name,
            chars=len(raw_text),
            truncated=len(content) != len(raw_text),
        )
        summary = self.adapter.summarize(self.system_prompt, user_content, file_name)
        return f"{heading}\n\n{summary}"


class LLMIndexSummarizer:
    """Summarizes a child folder's index document with an LLM."""

    def __init__(
        self,
        adapter: LLMAdapter,
        max_input_chars: int = MAX_INPUT_CHARS_DEFAULT,
        system_prompt: str | None = None,
    ) -> None:
        self.adapter = adapter
        self.max_input_chars = max_input_chars
        self.system_prompt = system_prompt or INDEX_SUMMARY_PROMPT
        self.log = logger.bind(component="index_summarizer")

    def summarize_index(self, document_text: str) -> str:
        content = _truncate(document_text, self.max_input_chars)
        self.log.debug("summarizer.index", chars=len(document_text))
        return self.adapter.summarize(
            self.system_prompt,
            INDEX_USER_TEMPLATE.format(content=content),
            "folder index",
        )

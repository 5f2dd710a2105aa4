"""
Summarizer module - LLM implementations of the indexer collaborators.
"""

from .extensions import SUPPORTED_EXTENSIONS
from .llm import LLMContentSummarizer, LLMIndexSummarizer

__all__ = [
    "LLMContentSummarizer",
    "LLMIndexSummarizer",
    "SUPPORTED_EXTENSIONS",
]

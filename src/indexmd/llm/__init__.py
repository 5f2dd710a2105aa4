"""
LLM module - Adapter for LiteLLM and LLM call management.

Exports the LLMAdapter, the response model, and the local cache.
"""

from .adapter import LLMAdapter, LLMResponse
from .cache import LocalLLMCache

__all__ = [
    "LLMAdapter",
    "LLMResponse",
    "LocalLLMCache",
]

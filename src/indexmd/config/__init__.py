"""
Configuration module for indexmd.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import (
    AppConfig,
    IndexerConfig,
    LLMCacheConfig,
    LLMConfig,
    LoggingConfig,
    SummarizerConfig,
)

__all__ = [
    "load_config",
    "AppConfig",
    "IndexerConfig",
    "LLMCacheConfig",
    "LLMConfig",
    "LoggingConfig",
    "SummarizerConfig",
]

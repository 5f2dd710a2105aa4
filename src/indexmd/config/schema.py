"""
Pydantic models for indexmd configuration.

Defines all configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LLMConfig(BaseModel):
    """Model used for summaries and how to reach it."""

    model: str = "gpt-4o-mini"
    api_base: str | None = None
    api_key_env: str | None = Field(
        default=None,
        description=(
            "Environment variable holding the API key. None lets LiteLLM "
            "read the provider's own variable (OPENAI_API_KEY, ...)."
        ),
    )
    timeout: int = Field(default=60, ge=1)
    retries: int = Field(default=2, ge=0, description="Retries on transient provider errors")
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Sampling temperature. 0 keeps re-runs on an unchanged tree stable.",
    )

    model_config = {"extra": "forbid"}


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class IndexerConfig(BaseModel):
    """Directory indexer configuration.

    The indexer writes one index document per directory, listing the
    summaries of its source files and of its subdirectories.
    """

    index_file_name: str = Field(
        default=".Index.md",
        description="Name of the index document written in each directory.",
    )

    listing_order: Literal["sorted", "filesystem"] = Field(
        default="sorted",
        description=(
            "'sorted' orders children by name so documents are reproducible; "
            "'filesystem' keeps the order returned by the OS."
        ),
    )

    supported_extensions: list[str] | None = Field(
        default=None,
        description=(
            "File extensions (with leading dot) to summarize. "
            "None uses the summarizer defaults."
        ),
    )

    exclude_dirs: list[str] = Field(
        default_factory=list,
        description=(
            "Additional directories to exclude (besides defaults: "
            ".git, node_modules, __pycache__, .venv, etc.)"
        ),
    )

    exclude_patterns: list[str] = Field(
        default_factory=list,
        description=(
            "Additional file patterns to exclude (besides defaults: "
            "*.pyc, *.min.js, *.map, etc.)"
        ),
    )

    max_file_size: int | None = Field(
        default=None,
        ge=1,
        description=(
            "Bytes read from each source file. Larger files are summarized "
            "from their head. None reads whole files."
        ),
    )

    follow_symlinks: bool = Field(
        default=False,
        description=(
            "If True, descends into symlinked directories, skipping targets "
            "already visited in the same run."
        ),
    )

    @field_validator("index_file_name")
    @classmethod
    def _plain_file_name(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"index_file_name must be a plain file name, got '{v}'")
        return v

    @field_validator("supported_extensions")
    @classmethod
    def _dotted_extensions(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    model_config = {"extra": "forbid"}


class SummarizerConfig(BaseModel):
    """Configuration of the LLM summarizers."""

    max_input_chars: int = Field(
        default=20_000,
        ge=100,
        description="Content sent to the model is truncated to this many characters.",
    )

    file_prompt: str | None = Field(
        default=None,
        description="System prompt override for file summaries.",
    )

    index_prompt: str | None = Field(
        default=None,
        description="System prompt override for folder summaries.",
    )

    model_config = {"extra": "forbid"}


class LLMCacheConfig(BaseModel):
    """Local LLM response cache configuration.

    The local cache is deterministic: it stores complete responses on disk
    to avoid repeated LLM calls when re-indexing an unchanged tree.
    Useful in development to save tokens.
    """

    enabled: bool = Field(
        default=False,
        description="If True, enables the local LLM response cache.",
    )

    dir: Path = Field(
        default=Path("~/.indexmd/cache"),
        description="Directory to store cache entries.",
    )

    ttl_hours: int = Field(
        default=24,
        ge=1,
        le=8760,  # 1 year
        description="Hours of validity for each cache entry.",
    )

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete application configuration.

    This is the root of the configuration tree. It combines all sections
    and is the entry point for validation.
    """

    llm: LLMConfig = Field(default_factory=LLMConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    indexer: IndexerConfig = Field(default_factory=IndexerConfig)
    summarizer: SummarizerConfig = Field(default_factory=SummarizerConfig)
    llm_cache: LLMCacheConfig = Field(default_factory=LLMCacheConfig)

    model_config = {"extra": "forbid"}

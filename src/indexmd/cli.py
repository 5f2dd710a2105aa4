"""
Command line interface.

`indexmd index ROOT` walks ROOT depth-first and writes one index
document per directory. Configuration comes from defaults, an optional
YAML file, INDEXMD_* environment variables and the command options.

Exit codes: 0 success, 1 indexing failed, 3 configuration error,
4 provider authentication error, 5 provider timeout, 130 interrupted.
"""

import json
import sys
from pathlib import Path

import click
import litellm
from pydantic import ValidationError

from . import __version__
from .config.loader import load_config
from .config.schema import AppConfig
from .indexer import IndexerError, TreeIndexer
from .llm import LLMAdapter, LocalLLMCache
from .logging import configure_logging
from .summarizer import LLMContentSummarizer, LLMIndexSummarizer

EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3
EXIT_AUTH_ERROR = 4
EXIT_TIMEOUT = 5
EXIT_INTERRUPTED = 130

# Provider errors anywhere in the __cause__ chain
_EXIT_BY_ERROR_TYPE = (
    (litellm.AuthenticationError, EXIT_AUTH_ERROR),
    (litellm.Timeout, EXIT_TIMEOUT),
)

# Fallback when the provider error was flattened into a message
_EXIT_BY_MESSAGE = (
    (("authenticationerror", "api key", "unauthorized", "401"), EXIT_AUTH_ERROR),
    (("timeout", "timed out"), EXIT_TIMEOUT),
)

config_option = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the YAML configuration file",
)


def build_indexer(config: AppConfig) -> TreeIndexer:
    """Wire the LLM adapter, the summarizers and the indexer from config."""
    local_cache = None
    if config.llm_cache.enabled:
        local_cache = LocalLLMCache(config.llm_cache.dir, ttl_hours=config.llm_cache.ttl_hours)

    adapter = LLMAdapter(config.llm, local_cache=local_cache)
    summarizer = config.summarizer
    return TreeIndexer(
        LLMContentSummarizer(
            adapter,
            supported_extensions=config.indexer.supported_extensions,
            max_input_chars=summarizer.max_input_chars,
            system_prompt=summarizer.file_prompt,
        ),
        LLMIndexSummarizer(
            adapter,
            max_input_chars=summarizer.max_input_chars,
            system_prompt=summarizer.index_prompt,
        ),
        index_file_name=config.indexer.index_file_name,
        listing_order=config.indexer.listing_order,
        exclude_dirs=config.indexer.exclude_dirs,
        exclude_patterns=config.indexer.exclude_patterns,
        max_file_size=config.indexer.max_file_size,
        follow_symlinks=config.indexer.follow_symlinks,
    )


def _error_exit_code(error: BaseException) -> int:
    """Exit code for a failed run, from the provider error behind it if any."""
    current: BaseException | None = error
    while current is not None:
        for error_type, code in _EXIT_BY_ERROR_TYPE:
            if isinstance(current, error_type):
                return code
        current = current.__cause__

    message = str(error).lower()
    for keywords, code in _EXIT_BY_MESSAGE:
        if any(kw in message for kw in keywords):
            return code
    return EXIT_FAILED


@click.group()
@click.version_option(version=__version__, prog_name="indexmd")
def main() -> None:
    """indexmd - Recursive index documents for directory trees.

    Every directory gets an index file listing a short summary of each
    source file and a rolled-up summary of each subdirectory.
    """


@main.command()
@click.argument("root", type=click.Path(file_okay=False, path_type=Path))
@config_option
@click.option("--model", help="LLM model to use (e.g.: gpt-4o-mini, claude-3-5-haiku)")
@click.option("--api-base", help="Base URL of the LLM API or proxy")
@click.option("--index-file", help="Name of the index file (default: .Index.md)")
@click.option(
    "--listing-order",
    type=click.Choice(["sorted", "filesystem"]),
    help="Order of entries: sorted by name (default) or as listed by the OS",
)
@click.option("--exclude", multiple=True, help="Extra directory name or glob to skip (repeatable)")
@click.option("--follow-symlinks", is_flag=True, help="Descend into symlinked directories")
@click.option("--cache/--no-cache", default=None, help="Use the local LLM response cache")
@click.option("-v", "--verbose", count=True, help="Technical output (-v info, -vv debug)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "human", "warn", "error"]),
    help="Logging level",
)
@click.option("--log-file", type=click.Path(path_type=Path), help="Write JSON logs to this file")
@click.option("--quiet", is_flag=True, help="Silence progress output")
@click.option("--json", "json_output", is_flag=True, help="Print run statistics as JSON on stdout")
def index(root: Path, **kwargs) -> None:  # type: ignore
    """Index ROOT recursively, writing one index document per directory."""
    try:
        config = load_config(config_path=kwargs.get("config"), cli_args=kwargs)
    except (FileNotFoundError, ValidationError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    silent = kwargs["quiet"] or kwargs["json_output"]
    configure_logging(config.logging, json_output=kwargs["json_output"], quiet=kwargs["quiet"])

    if not root.is_dir():
        click.echo(f"Error: directory not found: {root}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    if not silent:
        click.echo(f"indexmd {__version__} · {root} · {config.llm.model}\n", err=True)

    try:
        indexer = build_indexer(config)
        indexer.index_directory(root)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except IndexerError as e:
        click.echo(f"Indexing failed ({type(e).__name__}): {e}", err=True)
        sys.exit(_error_exit_code(e))
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        if kwargs["verbose"] > 1:
            import traceback
            traceback.print_exc()
        sys.exit(_error_exit_code(e))

    if kwargs["json_output"]:
        click.echo(json.dumps(indexer.stats.to_dict(), indent=2))
    sys.exit(EXIT_SUCCESS)


@main.command()
@config_option
def validate_config(config: Path | None) -> None:
    """Validate a YAML configuration file."""
    try:
        app_config = load_config(config_path=config)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except Exception as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_FAILED)

    click.echo("Valid configuration")
    click.echo(f"  Model: {app_config.llm.model}")
    click.echo(f"  Index file: {app_config.indexer.index_file_name}")
    click.echo(f"  Listing order: {app_config.indexer.listing_order}")
    click.echo(f"  LLM cache: {'on' if app_config.llm_cache.enabled else 'off'}")


@main.group()
def cache() -> None:
    """Manage the local LLM response cache."""


def _open_cache(config_path: Path | None) -> LocalLLMCache:
    try:
        settings = load_config(config_path=config_path).llm_cache
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    return LocalLLMCache(settings.dir, ttl_hours=settings.ttl_hours)


@cache.command("stats")
@config_option
def cache_stats(config: Path | None) -> None:
    """Show entries and size of the LLM cache."""
    stats = _open_cache(config).stats()
    click.echo(f"Cache directory: {stats['dir']}")
    click.echo(f"  Entries: {stats['entries']} ({stats['expired']} expired)")
    click.echo(f"  Size: {stats['total_size_bytes']} bytes")


@cache.command("clear")
@config_option
def cache_clear(config: Path | None) -> None:
    """Delete every entry of the LLM cache."""
    deleted = _open_cache(config).clear()
    click.echo(f"Deleted {deleted} cache entries")

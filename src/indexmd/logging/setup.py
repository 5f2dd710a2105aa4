"""
Logging setup for an indexing run.

structlog renders through stdlib logging handlers attached to the root
logger:

- JSON file: every record (DEBUG and up) when logging.file is set.
- Progress on stderr: HUMAN records only, one readable line each.
- Technical console on stderr: everything except HUMAN, at WARNING by
  default, INFO with -v and DEBUG with -vv.

--quiet and --json leave only the file. Records that come from plain
stdlib loggers (HumanLog writes through one) keep their ``extra`` fields
in the JSON file.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import LoggingConfig
from .human import HumanLogHandler
from .levels import HUMAN

# Console floor when no -v is given, by configured level
_LEVEL_FLOORS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _json_file_handler(path: Path, chain: list) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=chain,
        )
    )
    return handler


def _progress_handler() -> logging.Handler:
    handler = HumanLogHandler(stream=sys.stderr)
    handler.setLevel(HUMAN)
    handler.addFilter(lambda record: record.levelno == HUMAN)
    return handler


def _console_handler(level: int, chain: list, formatted: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(lambda record: record.levelno != HUMAN)
    if formatted:
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
                foreign_pre_chain=chain,
            )
        )
    return handler


def configure_logging(
    config: LoggingConfig,
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Install the handlers for one run, replacing any earlier setup.

    Args:
        config: Logging configuration (level, file, verbose)
        json_output: Stats go to stdout as JSON, so stderr stays silent
        quiet: Silence stderr entirely
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()
    logging.root.setLevel(logging.DEBUG)

    chain = _shared_processors()
    to_stderr = not (quiet or json_output)

    if config.file:
        logging.root.addHandler(_json_file_handler(Path(config.file), chain))
    if to_stderr and config.level in ("debug", "info", "human"):
        logging.root.addHandler(_progress_handler())
    if to_stderr:
        level = _verbose_to_level(config.verbose, config.level)
        logging.root.addHandler(_console_handler(level, chain, formatted=bool(config.file)))

    # With a file every handler formats the event dict itself; otherwise
    # structlog renders the console line directly.
    renderer = (
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter
        if config.file
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=chain + [structlog.processors.format_exc_info, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _verbose_to_level(verbose: int, level: str = "human") -> int:
    """Console level for a -v count.

    No flag shows warnings only, unless the configured level says
    otherwise; -v adds INFO and -vv (or more) adds DEBUG.
    """
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return _LEVEL_FLOORS.get(level, logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)

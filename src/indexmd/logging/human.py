"""
Human Log — Formatter and helper for indexing progress logs.

Produces readable output with a clear structure so the user can follow
the traversal step by step, without technical noise.

Example output:
    → src
      summarized src/main.py
      → src/utils
        summarized src/utils/io.py
      wrote src/utils/.Index.md (1 entries)
      folded src/utils
    wrote src/.Index.md (3 entries)

    ✓ Indexed 2 directories (2 files summarized)
"""

import logging
import sys
from pathlib import Path

from .levels import HUMAN


class HumanFormatter:
    """Formatter for indexing progress events.

    Converts structured events to readable text. Each event type has its
    own format; unknown events are not printed.
    """

    def format_event(self, event: str, **kw) -> str | None:
        """Format an event as readable text.

        Args:
            event: Event name (e.g. "indexer.directory.start")
            **kw: Event parameters

        Returns:
            Formatted text or None if the event has no format
        """
        match event:

            # ── TRAVERSAL ────────────────────────────────────────────────
            case "indexer.directory.start":
                return f"{_indent(kw)}→ {kw.get('path', '?')}"

            case "indexer.file.summarized":
                return f"{_indent(kw)}  summarized {kw.get('path', '?')}"

            case "indexer.folder.folded":
                return f"{_indent(kw)}  folded {kw.get('path', '?')}"

            case "indexer.directory.written":
                entries = kw.get("entries", "?")
                return f"{_indent(kw)}wrote {kw.get('path', '?')} ({entries} entries)"

            # ── RESULT ───────────────────────────────────────────────────
            case "indexer.complete":
                directories = kw.get("directories", "?")
                files = kw.get("files", "?")
                return f"\n✓ Indexed {directories} directories ({files} files summarized)"

            case "indexer.failed":
                path = kw.get("path", "?")
                error = kw.get("error", "unknown")
                return f"\n✗ Indexing stopped at {path}: {error}"

            case _:
                return None


def _indent(kw: dict) -> str:
    depth = kw.get("depth", 0)
    return "  " * depth if isinstance(depth, int) else ""


class HumanLogHandler(logging.Handler):
    """Logging handler that filters HUMAN events and formats them.

    Only processes records at HUMAN level (25). Ignores the rest.
    Writes to stderr so stdout stays clean for --json output.
    """

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            # structlog records carry "event"; plain stdlib records use the message
            event = getattr(record, "event", None) or record.getMessage()
            kw = {
                k: v for k, v in record.__dict__.items()
                if not k.startswith("_") and k not in (
                    "msg", "args", "levelname", "levelno", "pathname",
                    "filename", "module", "exc_info", "exc_text", "stack_info",
                    "lineno", "funcName", "created", "msecs", "relativeCreated",
                    "thread", "threadName", "processName", "process", "message",
                    "taskName", "name", "event",
                )
            }

            formatted = self.formatter_inst.format_event(event, **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


class HumanLog:
    """Typed helper to emit HUMAN-level events from the indexer.

    Instead of calling log.log(HUMAN, "event", ...) directly, use methods
    with clear semantic names. Nesting depth is derived from the path of
    the directory being processed, relative to the first one seen.

    Usage:
        hlog = HumanLog(logging.getLogger("indexmd.indexer"))
        hlog.directory_start("src")
        hlog.file_summarized("src/main.py")
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._log = logger
        self._root_depth: int | None = None

    def directory_start(self, path: str) -> None:
        if self._root_depth is None:
            self._root_depth = len(Path(path).parts)
        self._emit("indexer.directory.start", path=path, depth=self._depth(path))

    def file_summarized(self, path: str) -> None:
        self._emit("indexer.file.summarized", path=path, depth=self._depth(path) - 1)

    def folder_folded(self, path: str) -> None:
        self._emit("indexer.folder.folded", path=path, depth=self._depth(path) - 1)

    def directory_written(self, path: str, entries: int) -> None:
        self._emit(
            "indexer.directory.written",
            path=path,
            entries=entries,
            depth=self._depth(path) - 1,
        )

    def complete(self, directories: int, files: int) -> None:
        self._root_depth = None
        self._emit("indexer.complete", directories=directories, files=files)

    def failed(self, path: str, error: str) -> None:
        self._root_depth = None
        self._emit("indexer.failed", path=path, error=error)

    def _depth(self, path: str) -> int:
        if self._root_depth is None:
            return 0
        return max(0, len(Path(path).parts) - self._root_depth)

    def _emit(self, event: str, **kw) -> None:
        self._log.log(HUMAN, event, extra=kw)

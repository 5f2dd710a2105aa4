"""
Directory tree indexer: one index document per directory.

Walks a directory depth-first. For each directory it builds the ordered
list of entries of its immediate children: one entry per supported source
file (via the ContentSummarizer) and, for each subdirectory, a folder
header emitted before descending plus a summary of the subdirectory's own
finished document (via the IndexSummarizer) once the descent returns.
The rendered list is written as the directory's index document, so
children are always written before their parent.

The traversal is sequential. Any failure aborts the run: the directory
being processed and all its ancestors are left unwritten, siblings that
already finished keep their documents.
"""

import fnmatch
import logging
import stat
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import structlog

from ..logging.human import HumanLog
from .document import IndexDocument
from .errors import IndexerError, NotFoundError, SummarizationError
from .filesystem import FileSystem
from .protocols import ContentSummarizer, IndexSummarizer

logger = structlog.get_logger()

# Name of the index document written in every directory
DEFAULT_INDEX_FILE_NAME = ".Index.md"

# Directories never descended into
DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset({
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".idea",
    ".vscode",
})

# File patterns never summarized
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "*.min.js",
    "*.min.css",
    "*.map",
    "*.pyc",
    "*.lock",
)

ListingOrder = Literal["sorted", "filesystem"]


@dataclass(frozen=True)
class ChildStat:
    """Mode and size of a listed child, resolved through symlinks."""

    mode: int
    size: int
    is_link: bool


@dataclass
class IndexStats:
    """Counters of one indexing run."""

    directories_written: int = 0
    files_summarized: int = 0
    folders_folded: int = 0
    files_skipped: int = 0
    directories_skipped: int = 0
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, int | float]:
        return {
            "directories_written": self.directories_written,
            "files_summarized": self.files_summarized,
            "folders_folded": self.folders_folded,
            "files_skipped": self.files_skipped,
            "directories_skipped": self.directories_skipped,
            "elapsed_ms": self.elapsed_ms,
        }


class TreeIndexer:
    """Builds index documents bottom-up for a directory tree.

    Both summarizers are injected, as is the filesystem, so the whole
    traversal can run against deterministic fakes.
    """

    def __init__(
        self,
        content_summarizer: ContentSummarizer,
        index_summarizer: IndexSummarizer,
        fs: FileSystem | None = None,
        index_file_name: str = DEFAULT_INDEX_FILE_NAME,
        listing_order: ListingOrder = "sorted",
        exclude_dirs: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
        max_file_size: int | None = None,
        follow_symlinks: bool = False,
    ) -> None:
        """Initialize the indexer.

        Args:
            content_summarizer: Summarizes one source file. Its
                supported_extensions decide which files are indexed.
            index_summarizer: Summarizes a finished child document
            fs: Filesystem primitives (defaults to the local filesystem)
            index_file_name: Name of the document written in each directory
            listing_order: "sorted" sorts children by name, "filesystem"
                keeps the order returned by the OS
            exclude_dirs: Directory names (or globs) skipped besides the defaults
            exclude_patterns: File globs skipped besides the defaults
            max_file_size: Read at most this many bytes of each file.
                Larger files are still summarized from their first
                max_file_size bytes. None reads whole files.
            follow_symlinks: Descend into symlinked directories. Real paths
                already visited in the run are skipped to avoid cycles.
        """
        self.content_summarizer = content_summarizer
        self.index_summarizer = index_summarizer
        self.fs = fs or FileSystem()
        self.index_file_name = index_file_name
        self.listing_order = listing_order
        self.ignore_dirs = DEFAULT_IGNORE_DIRS | frozenset(exclude_dirs or [])
        self.ignore_patterns = DEFAULT_IGNORE_PATTERNS + tuple(exclude_patterns or [])
        self.max_file_size = max_file_size
        self.follow_symlinks = follow_symlinks
        self.supported_extensions = frozenset(
            ext.lower() for ext in content_summarizer.supported_extensions
        )

        self.stats = IndexStats()
        self._visited: set[Path] = set()
        self.log = logger.bind(component="tree_indexer")
        self.hlog = HumanLog(logging.getLogger("indexmd.indexer"))

    def index_directory(self, path: Path | str) -> None:
        """Index the tree rooted at path, writing one document per directory.

        Raises:
            NotFoundError: If path (or a path found during traversal) does
                not exist or cannot be read
            SummarizationError: If a summarizer fails
            WriteError: If a document cannot be written
        """
        root = Path(path)
        self.stats = IndexStats()
        self._visited = set()
        self.hlog = HumanLog(logging.getLogger("indexmd.indexer"))
        start_ms = time.monotonic() * 1000

        self.log.info("indexer.start", root=str(root), listing_order=self.listing_order)
        try:
            self._index(root)
        except IndexerError as e:
            self.log.error(
                "indexer.failed",
                path=str(e.path) if e.path else None,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.hlog.failed(str(e.path or root), str(e))
            raise

        self.stats.elapsed_ms = round(time.monotonic() * 1000 - start_ms, 1)
        self.log.info("indexer.complete", **self.stats.to_dict())
        self.hlog.complete(
            directories=self.stats.directories_written,
            files=self.stats.files_summarized,
        )

    def index_path_for(self, directory: Path) -> Path:
        return directory / self.index_file_name

    def is_source_file(self, file_name: str) -> bool:
        """True if the file extension is one the content summarizer supports."""
        if file_name == self.index_file_name:
            return False
        return Path(file_name).suffix.lower() in self.supported_extensions

    # --- Traversal ---

    def _index(self, directory: Path) -> None:
        if not stat.S_ISDIR(self.fs.stat(directory).st_mode):
            raise NotFoundError(f"Not a directory: {directory}", directory)

        self._visited.add(self.fs.real_path(directory))
        self.hlog.directory_start(str(directory))

        document = IndexDocument()
        for name in self._list_children(directory):
            child = directory / name
            info = self._stat_child(child)
            if info is None:
                self.stats.files_skipped += 1
            elif stat.S_ISDIR(info.mode):
                if self._should_descend(child, info):
                    document.add_folder_header(name)
                    self._index(child)
                    self._fold_child(document, child)
            elif stat.S_ISREG(info.mode) and self._should_summarize(child):
                document.add_file(name, self._summarize_file(child, info.size))
                self.stats.files_summarized += 1
            else:
                self.stats.files_skipped += 1

        self._write(directory, document)

    def _list_children(self, directory: Path) -> list[str]:
        names = self.fs.list_dir(directory)
        if self.listing_order == "sorted":
            return sorted(names)
        return list(names)

    def _stat_child(self, child: Path) -> ChildStat | None:
        """Stat a listed child; None for a dangling symlink.

        A child that vanished after listing raises NotFoundError.
        """
        entry = self.fs.lstat(child)
        if not stat.S_ISLNK(entry.st_mode):
            return ChildStat(entry.st_mode, entry.st_size, is_link=False)
        try:
            target = self.fs.stat(child)
        except NotFoundError:
            self.log.debug("indexer.dangling_symlink", path=str(child))
            return None
        return ChildStat(target.st_mode, target.st_size, is_link=True)

    def _should_descend(self, child: Path, info: ChildStat) -> bool:
        name = child.name
        if name in self.ignore_dirs or any(fnmatch.fnmatch(name, p) for p in self.ignore_dirs):
            self.stats.directories_skipped += 1
            return False

        if info.is_link:
            if not self.follow_symlinks:
                self.log.debug("indexer.symlink_skipped", path=str(child))
                self.stats.directories_skipped += 1
                return False
            target = self.fs.real_path(child)
            if target in self._visited:
                self.log.warning("indexer.cycle_skipped", path=str(child), target=str(target))
                self.stats.directories_skipped += 1
                return False

        return True

    def _should_summarize(self, child: Path) -> bool:
        name = child.name
        if not self.is_source_file(name):
            return False
        return not any(fnmatch.fnmatch(name, p) for p in self.ignore_patterns)

    # --- Collaborator calls ---

    def _summarize_file(self, path: Path, size: int) -> str:
        limit = self.max_file_size
        if limit is not None and size > limit:
            self.log.info("indexer.file_truncated", path=str(path), size_bytes=size, read_bytes=limit)
        else:
            limit = None
        raw_text = self.fs.read_text(path, limit=limit)
        try:
            text = self.content_summarizer.summarize_file(path.name, raw_text)
        except IndexerError as e:
            if e.path is None:
                e.path = path
            raise
        except Exception as e:
            raise SummarizationError(f"Failed to summarize {path}: {e}", path) from e

        self.log.debug("indexer.file_summarized", path=str(path), chars=len(raw_text))
        self.hlog.file_summarized(str(path))
        return text

    def _fold_child(self, document: IndexDocument, child: Path) -> None:
        """Append the summary of the child's finished document, if it has one.

        A missing or blank document leaves only the folder header.
        """
        index_path = self.index_path_for(child)
        if not self.fs.exists(index_path):
            return

        child_text = self.fs.read_text(index_path)
        if not child_text.strip():
            self.log.debug("indexer.empty_child_index", path=str(index_path))
            return

        try:
            summary = self.index_summarizer.summarize_index(child_text)
        except IndexerError as e:
            if e.path is None:
                e.path = index_path
            raise
        except Exception as e:
            raise SummarizationError(
                f"Failed to summarize index of {child}: {e}", index_path
            ) from e

        document.add_folder_summary(child.name, summary)
        self.stats.folders_folded += 1
        self.hlog.folder_folded(str(child))

    def _write(self, directory: Path, document: IndexDocument) -> None:
        index_path = self.index_path_for(directory)
        self.fs.write_text(index_path, document.render())
        self.stats.directories_written += 1
        self.log.debug("indexer.directory_written", path=str(index_path), entries=len(document))
        self.hlog.directory_written(str(index_path), entries=len(document))

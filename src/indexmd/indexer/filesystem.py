"""
Filesystem primitives used by the indexer.

Thin wrapper over os/pathlib that turns OS errors into indexer errors:
failures to list, stat or read become NotFoundError and failures to
write become WriteError. A child that disappears between listing and
stat therefore surfaces as NotFoundError instead of looking like an
unsupported entry. Tests can substitute their own implementation
(e.g. to record the order of writes).
"""

import os
from pathlib import Path

from .errors import NotFoundError, WriteError


class FileSystem:
    """Local filesystem access with indexer error mapping."""

    encoding = "utf-8"

    def list_dir(self, path: Path) -> list[str]:
        """Names of the immediate children of a directory, in OS order."""
        try:
            return os.listdir(path)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(f"Directory does not exist: {path}", path) from e
        except OSError as e:
            raise NotFoundError(f"Cannot list directory {path}: {e}", path) from e

    def stat(self, path: Path) -> os.stat_result:
        """Stat following symlinks. A dangling link raises NotFoundError."""
        try:
            return os.stat(path)
        except FileNotFoundError as e:
            raise NotFoundError(f"Path does not exist: {path}", path) from e
        except OSError as e:
            raise NotFoundError(f"Cannot stat {path}: {e}", path) from e

    def lstat(self, path: Path) -> os.stat_result:
        """Stat the entry itself, without following a symlink."""
        try:
            return os.lstat(path)
        except FileNotFoundError as e:
            raise NotFoundError(f"Path does not exist: {path}", path) from e
        except OSError as e:
            raise NotFoundError(f"Cannot stat {path}: {e}", path) from e

    def exists(self, path: Path) -> bool:
        return path.exists()

    def real_path(self, path: Path) -> Path:
        return path.resolve()

    def read_text(self, path: Path, limit: int | None = None) -> str:
        """Read the file as UTF-8. Undecodable bytes are replaced.

        With a limit, only the first *limit* bytes are read.
        """
        try:
            with open(path, "rb") as f:
                data = f.read() if limit is None else f.read(limit)
        except FileNotFoundError as e:
            raise NotFoundError(f"File does not exist: {path}", path) from e
        except OSError as e:
            raise NotFoundError(f"Cannot read {path}: {e}", path) from e
        return data.decode(self.encoding, errors="replace")

    def write_text(self, path: Path, content: str) -> None:
        """Write the whole file, replacing any previous content."""
        try:
            path.write_text(content, encoding=self.encoding)
        except OSError as e:
            raise WriteError(f"Cannot write {path}: {e}", path) from e

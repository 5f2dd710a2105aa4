"""
Index document model: the ordered entries of one directory.

A document is a list of text blocks. Rendering joins them with exactly
one blank line; an empty document renders as the empty string.
"""

from dataclasses import dataclass, field
from typing import Literal

# Separator between entries (one blank line)
ENTRY_SEPARATOR = "\n\n"

# Marker emitted for every subdirectory before descending into it
FOLDER_HEADER_FORMAT = "## folder : {name}"

EntryKind = Literal["file", "folder_header", "folder_summary"]


@dataclass(frozen=True)
class IndexEntry:
    """One block of an index document."""

    kind: EntryKind
    name: str    # File or subdirectory name the entry comes from
    text: str


@dataclass
class IndexDocument:
    """Ordered entries of a directory, in listing order.

    Entries are only appended, never modified or reordered.
    """

    entries: list[IndexEntry] = field(default_factory=list)

    def add_file(self, name: str, text: str) -> IndexEntry:
        return self._append(IndexEntry(kind="file", name=name, text=text))

    def add_folder_header(self, name: str) -> IndexEntry:
        text = FOLDER_HEADER_FORMAT.format(name=name)
        return self._append(IndexEntry(kind="folder_header", name=name, text=text))

    def add_folder_summary(self, name: str, text: str) -> IndexEntry:
        return self._append(IndexEntry(kind="folder_summary", name=name, text=text))

    def render(self) -> str:
        """Join all entries separated by one blank line."""
        return ENTRY_SEPARATOR.join(entry.text for entry in self.entries)

    def names(self, kind: EntryKind | None = None) -> list[str]:
        """Names of the entries, optionally filtered by kind."""
        return [e.name for e in self.entries if kind is None or e.kind == kind]

    def __len__(self) -> int:
        return len(self.entries)

    def _append(self, entry: IndexEntry) -> IndexEntry:
        self.entries.append(entry)
        return entry

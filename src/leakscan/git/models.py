"""Data models for diff parsing and the content units fed to the rule engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Protocol, Tuple


class LineType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single added line from a unified diff."""

    file: str
    line_no: int
    content: str
    line_type: LineType


@dataclass(frozen=True)
class DiffFile:
    """Metadata about a file appearing in a diff."""

    path: str
    old_path: Optional[str] = None  # set on renames
    status: FileStatus = FileStatus.MODIFIED


@dataclass(frozen=True)
class FileSkipped:
    """Record of a file that was skipped during parsing."""

    path: str
    reason: str  # 'binary', 'mode_only', 'deleted'


@dataclass(frozen=True)
class CommitInfo:
    hash: str
    author: str = ""
    email: str = ""
    date: str = ""  # ISO-8601
    message: str = ""


class FileLike(Protocol):
    """Anything the path-based checks can look at."""

    @property
    def name(self) -> str: ...

    @property
    def path(self) -> str: ...


@dataclass(frozen=True)
class ContentUnit:
    """One piece of content to inspect: a file, a file's diff or a single line.

    Lines are numbered from ``start_line`` unless ``line_numbers`` gives an
    explicit number per line (the added lines of a diff are not contiguous).
    ``commit`` is None for working-tree content.
    """

    text: str
    path: str
    commit: Optional[CommitInfo] = None
    repo: str = ""
    start_line: int = 1
    line_numbers: Tuple[int, ...] = ()

    @property
    def name(self) -> str:
        return Path(self.path).name

    @property
    def commit_hash(self) -> Optional[str]:
        return self.commit.hash if self.commit else None

    def lines(self) -> Iterator[Tuple[int, str]]:
        """Yield ``(line_number, line)`` pairs."""
        if not self.text:
            return
        for offset, line in enumerate(self.text.split("\n")):
            if offset < len(self.line_numbers):
                line_no = self.line_numbers[offset]
            else:
                line_no = self.start_line + offset
            yield line_no, line.rstrip("\r")

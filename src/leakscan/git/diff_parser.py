"""Unified diff parser and diff → content unit conversion.

``DiffParser`` yields ``DiffFile`` / ``DiffLine`` / ``FileSkipped`` items for
the added side of a patch. ``iter_file_units`` groups those items into one
``ContentUnit`` per file, keeping the new-side line number of every line.
"""

from __future__ import annotations

import re
from typing import Dict, Generator, Iterator, List, Optional, Tuple

from leakscan.git.models import (
    CommitInfo,
    ContentUnit,
    DiffFile,
    DiffLine,
    FileSkipped,
    FileStatus,
    LineType,
)

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_BINARY_RE = re.compile(r"^Binary files .* and .* differ$")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")
_SUBPROJECT_RE = re.compile(r"^[+-]?Subproject commit [0-9a-f]+$")
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")
_FILE_HEADER_RE = re.compile(r"^(?:--- (?:a/|/dev/null)|\+\+\+ (?:b/|/dev/null))")
_NEW_PATH_RE = re.compile(r"^\+\+\+ b/(.+)$")
_SKIPPABLE_SUBHEADERS = (
    re.compile(r"^index [0-9a-f]+\.\.[0-9a-f]+"),
    re.compile(r"^similarity index \d+%$"),
    re.compile(r"^dissimilarity index \d+%$"),
    re.compile(r"^new mode \d+$"),
    re.compile(r"^new file mode \d+$"),
    re.compile(r"^copy (?:from|to) .+$"),
)
_OLD_MODE_RE = re.compile(r"^old mode \d+$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode \d+$")
_FILE_SPLIT_RE = re.compile(r"(?m)^(?=diff --git )")


def _hunk_count(value: Optional[str]) -> int:
    # an omitted count in "@@ -a +b @@" means one line
    return 1 if value is None else int(value)


class DiffParser:
    """Parse unified diff text and yield DiffFile / DiffLine / FileSkipped items.

    *default_file* names the file for patches that start directly at a hunk
    header, as hosting APIs return them.
    """

    def __init__(self, diff_text: str, default_file: Optional[str] = None) -> None:
        self._lines = diff_text.splitlines()
        self._default_file = default_file

    def parse(self) -> Generator[DiffLine | FileSkipped | DiffFile, None, None]:
        idx = 0
        total = len(self._lines)
        current_file: Optional[str] = self._default_file
        line_no = 0
        # lines still owed to the current hunk, from its @@ header counts
        old_left = new_left = 0
        in_deleted_file = False

        while idx < total:
            raw_line = self._lines[idx]

            m = _DIFF_HEADER_RE.match(raw_line)
            if m:
                old_file, current_file = m.group(1), m.group(2)
                old_left = new_left = 0
                is_rename = is_mode_change = is_binary = False
                in_deleted_file = False
                idx += 1

                while idx < total:
                    sub = self._lines[idx]
                    if any(p.match(sub) for p in _SKIPPABLE_SUBHEADERS):
                        pass
                    elif _OLD_MODE_RE.match(sub):
                        is_mode_change = True
                    elif _DELETED_FILE_RE.match(sub):
                        in_deleted_file = True
                    elif (rm := _RENAME_FROM_RE.match(sub)):
                        old_file, is_rename = rm.group(1), True
                    elif (rt := _RENAME_TO_RE.match(sub)):
                        current_file = rt.group(1)
                    elif _BINARY_RE.match(sub):
                        is_binary = True
                    else:
                        break
                    idx += 1

                if in_deleted_file:
                    yield FileSkipped(path=current_file, reason="deleted")
                elif is_binary:
                    yield FileSkipped(path=current_file, reason="binary")
                elif is_mode_change and not is_rename and not self._has_hunks_ahead(idx):
                    yield FileSkipped(path=current_file, reason="mode_only")
                else:
                    yield DiffFile(
                        path=current_file,
                        old_path=old_file if is_rename else None,
                        status=FileStatus.RENAMED if is_rename else FileStatus.MODIFIED,
                    )
                continue

            in_hunk = old_left > 0 or new_left > 0
            if not in_hunk and _FILE_HEADER_RE.match(raw_line):
                if (nm := _NEW_PATH_RE.match(raw_line)):
                    current_file = nm.group(1)
                idx += 1
                continue

            hm = _HUNK_HEADER_RE.match(raw_line)
            if hm:
                line_no = int(hm.group(3))
                old_left = _hunk_count(hm.group(2))
                new_left = _hunk_count(hm.group(4))
                idx += 1
                continue

            if _NO_NEWLINE_RE.match(raw_line):
                idx += 1
                continue

            if in_hunk:
                if raw_line.startswith("+"):
                    new_left -= 1
                elif raw_line.startswith("-"):
                    old_left -= 1
                else:
                    old_left -= 1
                    new_left -= 1

            if _SUBPROJECT_RE.match(raw_line):
                idx += 1
                continue

            if current_file is not None and not in_deleted_file:
                if raw_line.startswith("+"):
                    yield DiffLine(
                        file=current_file,
                        line_no=line_no,
                        content=raw_line[1:].lstrip("\ufeff"),
                        line_type=LineType.ADDED,
                    )
                    line_no += 1
                elif raw_line.startswith(" "):
                    line_no += 1
                # removed lines do not advance the new-side counter

            idx += 1

    def _has_hunks_ahead(self, idx: int) -> bool:
        while idx < len(self._lines):
            line = self._lines[idx]
            if _DIFF_HEADER_RE.match(line):
                return False
            if _HUNK_HEADER_RE.match(line):
                return True
            idx += 1
        return False


def split_patch(patch: str) -> List[Tuple[str, str]]:
    """Split a multi-file patch into ``(diff_text, new_path)`` pairs."""
    pairs: List[Tuple[str, str]] = []
    for chunk in _FILE_SPLIT_RE.split(patch):
        first_line = chunk.split("\n", 1)[0]
        m = _DIFF_HEADER_RE.match(first_line)
        if m:
            pairs.append((chunk, m.group(2)))
    return pairs


def iter_file_units(
    diff_text: str,
    *,
    commit: Optional[CommitInfo] = None,
    repo: str = "",
    default_file: Optional[str] = None,
) -> Iterator[ContentUnit]:
    """Yield one ContentUnit per changed file, holding its added lines.

    Binary files yield a unit with empty text so path rules still see them;
    deleted files and mode-only changes yield nothing.
    """
    order: List[str] = []
    lines: Dict[str, List[DiffLine]] = {}

    def _touch(path: str) -> None:
        if path not in lines:
            order.append(path)
            lines[path] = []

    # header-less patches (hosting APIs) always belong to default_file
    if default_file and not _DIFF_HEADER_RE.match(diff_text.split("\n", 1)[0]):
        _touch(default_file)

    for item in DiffParser(diff_text, default_file=default_file).parse():
        if isinstance(item, DiffFile):
            _touch(item.path)
        elif isinstance(item, DiffLine):
            _touch(item.file)
            lines[item.file].append(item)
        elif item.reason == "binary":
            _touch(item.path)

    for path in order:
        added = lines[path]
        yield ContentUnit(
            text="\n".join(dl.content for dl in added),
            path=path,
            commit=commit,
            repo=repo,
            line_numbers=tuple(dl.line_no for dl in added),
        )

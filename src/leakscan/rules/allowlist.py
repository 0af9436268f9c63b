"""Allowlists — suppression predicates over content, paths, files and commits.

The same type is used for the global allowlist (checked once per content unit
before any rule runs) and for the allowlist attached to each rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

Patterns = Tuple["re.Pattern[str]", ...]
ALLOWLIST_KEYS = frozenset({"description", "regexes", "paths", "files", "commits"})


def compile_patterns(patterns: Optional[Iterable[str]]) -> Patterns:
    """Compile *patterns*; ``None`` or an empty list gives an empty tuple.

    Raises ``TypeError`` unless *patterns* is a list of strings.
    """
    if not patterns:
        return ()
    if not isinstance(patterns, (list, tuple)) or not all(isinstance(p, str) for p in patterns):
        raise TypeError(f"expected a list of patterns, got {patterns!r}")
    return tuple(re.compile(p) for p in patterns)


def any_match(text: str, patterns: Patterns) -> bool:
    return any(p.search(text) for p in patterns)


@dataclass(frozen=True)
class Allowlist:
    """Compiled allowlist. An empty list matches nothing."""

    description: str = ""
    regexes: Patterns = ()
    paths: Patterns = ()
    files: Patterns = ()
    commits: Tuple[str, ...] = ()
    _commit_patterns: Patterns = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_commit_patterns", compile_patterns(self.commits))

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Allowlist":
        """Build from a config mapping (``regexes``, ``paths``, ``files``, ``commits``).

        Raises ``re.error`` for an invalid pattern and ``TypeError`` or
        ``ValueError`` for a malformed mapping; the config loader turns those
        into a ``ConfigError``.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise TypeError(f"allowlist must be a mapping, got {data!r}")
        unknown = set(data) - ALLOWLIST_KEYS
        if unknown:
            raise ValueError(f"unknown allowlist keys: {', '.join(sorted(unknown))}")
        commits = data.get("commits") or ()
        if not isinstance(commits, (list, tuple)):
            raise TypeError(f"allowlist commits must be a list, got {commits!r}")
        return cls(
            description=str(data.get("description", "")),
            regexes=compile_patterns(data.get("regexes")),
            paths=compile_patterns(data.get("paths")),
            files=compile_patterns(data.get("files")),
            commits=tuple(str(c) for c in commits),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.regexes or self.paths or self.files or self.commits)

    def regex_allowed(self, content: str) -> bool:
        return any_match(content, self.regexes)

    def path_allowed(self, path: str) -> bool:
        return any_match(path, self.paths)

    def file_allowed(self, name: str) -> bool:
        return any_match(name, self.files)

    def commit_allowed(self, commit_id: Optional[str]) -> bool:
        """True if *commit_id* equals an allowlisted commit or fully matches one as a pattern."""
        if not commit_id:
            return False
        if commit_id in self.commits:
            return True
        return any(p.fullmatch(commit_id) for p in self._commit_patterns)

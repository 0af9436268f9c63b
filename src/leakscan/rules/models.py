"""Rule data model — patterns stored as strings, compiled when the rule is built.

A rule is immutable once constructed so one instance can be shared by every
concurrent scan task.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from leakscan.rules.allowlist import Allowlist
from leakscan.scanner.entropy import entropy_report, shannon_entropy

NO_FINDING: Tuple[str, str] = ("", "")
RULE_KEYS = frozenset(
    {"id", "description", "regex", "file", "path", "report_group", "entropies", "allowlist", "tags"}
)


@dataclass(frozen=True)
class EntropyRange:
    """Inclusive entropy bounds for one capture group (0 = whole match)."""

    group: int
    min: float
    max: float

    def __post_init__(self) -> None:
        if self.group < 0:
            raise ValueError(f"entropy group must be >= 0, got {self.group}")
        if self.min > self.max:
            raise ValueError(
                f"entropy min {self.min} is greater than max {self.max} (group {self.group})"
            )

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class Rule:
    """A single detection rule.

    ``regex`` may be empty, in which case the rule only looks at file names
    (``file``) and paths (``path``). ``report_group`` selects the capture
    group reported as the offender; 0 or an out-of-range index reports the
    whole match.
    """

    id: str
    description: str = ""
    regex: str = ""
    file: Optional[str] = None
    path: Optional[str] = None
    report_group: int = 0
    entropies: Tuple[EntropyRange, ...] = ()
    allowlist: Allowlist = field(default_factory=Allowlist)
    tags: Tuple[str, ...] = ()

    # --- compiled objects (not compared) ---
    _compiled_regex: Optional[re.Pattern[str]] = field(
        default=None, init=False, repr=False, compare=False
    )
    _compiled_file: Optional[re.Pattern[str]] = field(
        default=None, init=False, repr=False, compare=False
    )
    _compiled_path: Optional[re.Pattern[str]] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        # Compile eagerly: a bad pattern must fail at load time, not mid-scan.
        object.__setattr__(self, "_compiled_regex", re.compile(self.regex) if self.regex else None)
        object.__setattr__(self, "_compiled_file", re.compile(self.file) if self.file else None)
        object.__setattr__(self, "_compiled_path", re.compile(self.path) if self.path else None)

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> "Rule":
        """Build a rule from a YAML/TOML mapping.

        Unknown keys and wrongly typed values raise ``ValueError`` or
        ``TypeError`` so a typo cannot silently disable a rule.
        """
        unknown = set(entry) - RULE_KEYS
        if unknown:
            raise ValueError(f"unknown keys: {', '.join(sorted(unknown))}")
        raw_entropies = entry.get("entropies") or ()
        if not isinstance(raw_entropies, (list, tuple)) or not all(
            isinstance(e, dict) for e in raw_entropies
        ):
            raise TypeError("entropies must be a list of {group, min, max} tables")
        tags = entry.get("tags") or ()
        if not isinstance(tags, (list, tuple)):
            raise TypeError(f"tags must be a list, got {tags!r}")
        for key in ("regex", "file", "path"):
            if entry.get(key) is not None and not isinstance(entry[key], str):
                raise TypeError(f"{key} must be a string")
        entropies = tuple(
            EntropyRange(group=int(e.get("group", 0)), min=float(e["min"]), max=float(e["max"]))
            for e in raw_entropies
        )
        return cls(
            id=entry["id"],
            description=entry.get("description", entry["id"]),
            regex=entry.get("regex") or "",
            file=entry.get("file"),
            path=entry.get("path"),
            report_group=int(entry.get("report_group", 0)),
            entropies=entropies,
            allowlist=Allowlist.from_dict(entry.get("allowlist")),
            tags=tuple(str(t) for t in tags),
        )

    # ---- properties ----

    @property
    def compiled_regex(self) -> Optional[re.Pattern[str]]:
        return self._compiled_regex

    @property
    def is_file_rule(self) -> bool:
        """True if this rule detects by file name / path rather than content."""
        return self._compiled_regex is None and not self.entropies

    @property
    def has_path_scope(self) -> bool:
        return self._compiled_file is not None or self._compiled_path is not None

    # ---- content inspection ----

    def inspect(self, line: str) -> Tuple[str, str]:
        """Check one line of content.

        Returns ``(offender, entropy_report)``; an empty offender means no
        finding.
        """
        if self._compiled_regex is None:
            return NO_FINDING
        m = self._compiled_regex.search(line)
        if m is None or not m.group(0):
            return NO_FINDING

        if self.allowlist.regex_allowed(m.group(0)):
            return NO_FINDING

        # groups come from the matched substring alone; context-dependent
        # patterns (lookbehind, anchors) may not re-match, keep the line match then
        sub = self._compiled_regex.search(m.group(0)) or m
        # group 0 is the whole match; unmatched optional groups count as ""
        groups: List[str] = [m.group(0), *(g or "" for g in sub.groups())]
        if self.entropies and not self.check_entropies(groups):
            return NO_FINDING

        report = entropy_report(groups)

        offender = groups[0]
        if 0 < self.report_group < len(groups):
            offender = groups[self.report_group]
        return offender, report

    def check_entropies(self, groups: Sequence[str]) -> bool:
        """True if ANY entropy range is satisfied by its capture group."""
        for e in self.entropies:
            if e.group < len(groups) and e.contains(shannon_entropy(groups[e.group])):
                return True
        return False

    # ---- file / path matching ----

    def has_file_leak(self, name: str) -> bool:
        return self._compiled_file is not None and self._compiled_file.search(name) is not None

    def has_path_leak(self, path: str) -> bool:
        return self._compiled_path is not None and self._compiled_path.search(path) is not None

    def has_file_or_path_leak_only(self, path: str) -> bool:
        """True if this is a file/path-only rule and *path* trips it."""
        if not self.is_file_rule:
            return False
        name = Path(path).name
        if self.allowlist.file_allowed(name) or self.allowlist.path_allowed(path):
            return False
        return self.has_file_leak(name) or self.has_path_leak(path)

    def applies_to(self, name: str, path: str) -> bool:
        """Content rules with a file/path regex only run on matching files."""
        if self._compiled_file is not None and not self.has_file_leak(name):
            return False
        if self._compiled_path is not None and not self.has_path_leak(path):
            return False
        return True

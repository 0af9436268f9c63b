"""Leak and scan result models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Tuple

from leakscan.git.models import ContentUnit
from leakscan.rules.models import Rule


@dataclass(frozen=True)
class Leak:
    """A single rule match. Immutable once created."""

    rule: str  # rule id
    rule_description: str
    offender: str
    entropy: str  # per-group entropies, "4.12, 3.98"
    file: str
    line: str = ""
    line_number: int = 0  # 0 = whole-file (path) match
    repo: str = ""
    commit: str = ""
    author: str = ""
    email: str = ""
    date: str = ""
    message: str = ""
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_unit(
        cls,
        rule: Rule,
        unit: ContentUnit,
        *,
        offender: str,
        entropy: str = "",
        line: str = "",
        line_number: int = 0,
    ) -> "Leak":
        c = unit.commit
        return cls(
            rule=rule.id,
            rule_description=rule.description,
            offender=offender,
            entropy=entropy,
            file=unit.path,
            line=line,
            line_number=line_number,
            repo=unit.repo,
            commit=c.hash if c else "",
            author=c.author if c else "",
            email=c.email if c else "",
            date=c.date if c else "",
            message=c.message if c else "",
            tags=rule.tags,
        )

    def with_changes(self, **changes) -> "Leak":
        return replace(self, **changes)


@dataclass
class ScanResult:
    """Complete result of a scan run."""

    leaks: List[Leak] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)  # per-repository / per-page failures
    units_scanned: int = 0
    repos_scanned: int = 0
    scan_duration_ms: float = 0.0

    @property
    def total_leaks(self) -> int:
        return len(self.leaks)

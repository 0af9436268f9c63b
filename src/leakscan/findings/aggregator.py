"""Leak aggregation — the one shared, mutable collection during a scan."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Iterator, List, Tuple

from leakscan.findings.models import Leak


class LeakAggregator:
    """Lock-guarded, append-only leak collection.

    Leaks appended by one call stay contiguous and in order; leaks from
    different tasks interleave in arrival order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._leaks: List[Leak] = []
        self._warnings: List[str] = []

    def add(self, leak: Leak) -> None:
        with self._lock:
            self._leaks.append(leak)

    def extend(self, leaks: Iterable[Leak]) -> None:
        batch = list(leaks)
        with self._lock:
            self._leaks.extend(batch)

    def warn(self, message: str) -> None:
        with self._lock:
            self._warnings.append(message)

    @property
    def leaks(self) -> Tuple[Leak, ...]:
        with self._lock:
            return tuple(self._leaks)

    @property
    def warnings(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._warnings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._leaks)

    def __iter__(self) -> Iterator[Leak]:
        return iter(self.leaks)


def count_by_rule(leaks: Iterable[Leak]) -> Dict[str, int]:
    """Leak count per rule id, in first-seen order."""
    counts: Dict[str, int] = {}
    for leak in leaks:
        counts[leak.rule] = counts.get(leak.rule, 0) + 1
    return counts

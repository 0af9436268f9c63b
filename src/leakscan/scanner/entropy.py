"""Shannon entropy of strings and regex capture groups."""

from __future__ import annotations

import math
from collections import Counter
from typing import Sequence


def shannon_entropy(s: str) -> float:
    """Compute Shannon entropy (bits per character) of string *s*.

    H = -Σ p(c) · log₂(p(c))  over unique code points c.
    """
    if not s:
        return 0.0
    total = len(s)
    h = 0.0
    for count in Counter(s).values():
        p = count / total
        h -= p * math.log2(p)
    return h


def entropy_report(groups: Sequence[str]) -> str:
    """Format the entropy of every group as ``"3.52, 4.00"`` (group 0 first)."""
    return ", ".join(f"{shannon_entropy(g):.2f}" for g in groups)

"""CSV reporter — one row per leak."""

from __future__ import annotations

import csv
import io

from leakscan.findings.models import ScanResult

COLUMNS = [
    "repo",
    "file",
    "line_number",
    "rule",
    "description",
    "offender",
    "entropy",
    "commit",
    "author",
    "email",
    "date",
    "tags",
]


def render(result: ScanResult) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(COLUMNS)
    for leak in result.leaks:
        writer.writerow([
            leak.repo,
            leak.file,
            leak.line_number,
            leak.rule,
            leak.rule_description,
            leak.offender,
            leak.entropy,
            leak.commit,
            leak.author,
            leak.email,
            leak.date,
            " ".join(leak.tags),
        ])
    return buf.getvalue()

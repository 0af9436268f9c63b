"""JSON reporter."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from leakscan import __version__
from leakscan.findings.models import Leak, ScanResult


def leak_to_dict(leak: Leak) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "rule": leak.rule,
        "description": leak.rule_description,
        "offender": leak.offender,
        "entropy": leak.entropy,
        "file": leak.file,
        "line_number": leak.line_number,
        "line": leak.line,
        "tags": list(leak.tags),
    }
    if leak.repo:
        data["repo"] = leak.repo
    if leak.commit:
        data.update(
            commit=leak.commit,
            author=leak.author,
            email=leak.email,
            date=leak.date,
            message=leak.message,
        )
    return data


def to_dict(result: ScanResult) -> Dict[str, Any]:
    """Convert ScanResult to a JSON-serialisable dict."""
    leaks: List[Dict[str, Any]] = [leak_to_dict(leak) for leak in result.leaks]
    return {
        "version": __version__,
        "total_leaks": result.total_leaks,
        "leaks": leaks,
        "warnings": result.warnings,
        "units_scanned": result.units_scanned,
        "repos_scanned": result.repos_scanned,
        "scan_duration_ms": result.scan_duration_ms,
    }


def render(result: ScanResult) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2)

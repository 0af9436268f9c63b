"""SARIF v2.1.0 reporter — GitHub code scanning and other SARIF consumers."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from leakscan import __version__
from leakscan.findings.models import ScanResult

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"


def to_dict(result: ScanResult) -> Dict[str, Any]:
    """Convert ScanResult to a SARIF v2.1.0 dict."""
    rules: List[Dict[str, Any]] = []
    seen_rules: set[str] = set()
    results: List[Dict[str, Any]] = []

    for leak in result.leaks:
        if leak.rule not in seen_rules:
            seen_rules.add(leak.rule)
            rules.append({
                "id": leak.rule,
                "name": leak.rule_description,
                "shortDescription": {"text": leak.rule_description},
                "properties": {"tags": list(leak.tags)},
            })

        region: Dict[str, Any] = {"startLine": max(leak.line_number, 1)}
        if leak.line:
            region["snippet"] = {"text": leak.offender}
        entry: Dict[str, Any] = {
            "ruleId": leak.rule,
            "level": "error",
            "message": {"text": f"{leak.rule_description} has detected a secret"},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": leak.file},
                        "region": region,
                    }
                }
            ],
            "properties": {"entropy": leak.entropy},
        }
        if leak.commit:
            entry["partialFingerprints"] = {
                "commitSha": leak.commit,
                "author": leak.author,
                "email": leak.email,
                "date": leak.date,
            }
        results.append(entry)

    return {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "leakscan",
                        "version": __version__,
                        "rules": rules,
                    }
                },
                "results": results,
            }
        ],
    }


def render(result: ScanResult) -> str:
    """Return SARIF JSON string."""
    return json.dumps(to_dict(result), indent=2)

"""Secret redaction for safe output."""

from __future__ import annotations

from leakscan.findings.models import Leak

REDACTED = "REDACTED"


def redact_value(value: str, offender: str) -> str:
    """Replace every occurrence of *offender* in *value*."""
    if not offender:
        return value
    return value.replace(offender, REDACTED)


def redact(leak: Leak) -> Leak:
    """Return a copy of *leak* with the offender removed from every text field.

    Path-only leaks report the file path as offender; the path stays visible.
    """
    if leak.line_number == 0 and leak.offender == leak.file:
        return leak
    return leak.with_changes(
        offender=REDACTED,
        line=redact_value(leak.line, leak.offender),
    )

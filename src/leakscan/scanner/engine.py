"""Per-unit rule evaluation — the one matching path every scan mode shares.

Order of checks for a content unit:

1. Global allowlist (commit, file name, path): a hit skips every rule.
2. For each rule, independently and in rule-set order:
   a. rule-local commit / file / path allowlist skips this rule only;
   b. file/path-only rules report the path once and do no line scanning;
   c. content rules scoped by ``file``/``path`` skip non-matching files;
   d. every line goes through ``Rule.inspect``; a hit on a line that the
      global allowlist regexes do not match becomes a Leak.

Exception safety: matched values never appear in error messages.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from leakscan.findings.models import Leak
from leakscan.git.models import ContentUnit, FileLike
from leakscan.rules.allowlist import Allowlist
from leakscan.rules.models import Rule
from leakscan.rules.registry import RuleSet

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised on internal scanner error (never contains secret values)."""


def _file_allowed(al: Allowlist, item: FileLike) -> bool:
    return al.file_allowed(item.name) or al.path_allowed(item.path)


def unit_allowed(unit: ContentUnit, rule_set: RuleSet) -> bool:
    """True if the global allowlist exempts the whole unit."""
    al = rule_set.allowlist
    return al.commit_allowed(unit.commit_hash) or _file_allowed(al, unit)


def _rule_skips_unit(rule: Rule, unit: ContentUnit) -> bool:
    return rule.allowlist.commit_allowed(unit.commit_hash) or _file_allowed(rule.allowlist, unit)


def _inspect_lines(rule: Rule, unit: ContentUnit, rule_set: RuleSet) -> List[Leak]:
    leaks: List[Leak] = []
    for line_no, line in unit.lines():
        offender, entropy = rule.inspect(line)
        if not offender:
            continue
        if rule_set.allowlist.regex_allowed(line):
            continue
        leaks.append(
            Leak.from_unit(
                rule, unit, offender=offender, entropy=entropy, line=line, line_number=line_no
            )
        )
    return leaks


def check_unit(unit: ContentUnit, rule_set: RuleSet) -> List[Leak]:
    """Run every rule against *unit* and return its leaks in rule order."""
    if unit_allowed(unit, rule_set):
        logger.debug("allowlisted unit %s @ %s", unit.path, unit.commit_hash or "worktree")
        return []

    leaks: List[Leak] = []
    try:
        for rule in rule_set.rules:
            if _rule_skips_unit(rule, unit):
                continue

            if rule.is_file_rule:
                if rule.has_file_or_path_leak_only(unit.path):
                    leaks.append(Leak.from_unit(rule, unit, offender=unit.path))
                continue

            if rule.has_path_scope and not rule.applies_to(unit.name, unit.path):
                continue

            leaks.extend(_inspect_lines(rule, unit, rule_set))
    except Exception as exc:
        found = len(leaks)
        leaks.clear()
        raise ScanError(
            f"Internal scanner error in {unit.path} after {found} leaks "
            f"({type(exc).__name__}). Secrets have been scrubbed from this error."
        ) from None
    return leaks


def check_units(units: Iterable[ContentUnit], rule_set: RuleSet) -> List[Leak]:
    """Synchronous convenience wrapper over ``check_unit``."""
    leaks: List[Leak] = []
    for unit in units:
        leaks.extend(check_unit(unit, rule_set))
    return leaks

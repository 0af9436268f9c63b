"""Rule engine — allowlists, rules, rule sets, built-in rules."""

from leakscan.rules.allowlist import Allowlist
from leakscan.rules.models import EntropyRange, Rule
from leakscan.rules.registry import RuleRegistry, RuleSet, build_rule_set

__all__ = ["Allowlist", "EntropyRange", "Rule", "RuleRegistry", "RuleSet", "build_rule_set"]

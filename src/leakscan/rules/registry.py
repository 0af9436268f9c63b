"""Rule registry — loads built-in, inline and custom rules, applies config filters.

The registry is the mutable builder; ``freeze()`` produces the immutable
``RuleSet`` that scan tasks share.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from leakscan.config.loader import ConfigError
from leakscan.config.schema import LeakScanConfig
from leakscan.rules.allowlist import Allowlist
from leakscan.rules.models import Rule

CUSTOM_RULES_DIR = ".leakscan-rules"


@dataclass(frozen=True)
class RuleSet:
    """Ordered, read-only rules plus the global allowlist."""

    rules: Tuple[Rule, ...] = ()
    allowlist: Allowlist = field(default_factory=Allowlist)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    @property
    def content_rules(self) -> Tuple[Rule, ...]:
        return tuple(r for r in self.rules if not r.is_file_rule)

    @property
    def file_rules(self) -> Tuple[Rule, ...]:
        return tuple(r for r in self.rules if r.is_file_rule)

    def get(self, rule_id: str) -> Optional[Rule]:
        for r in self.rules:
            if r.id == rule_id:
                return r
        return None


def rule_from_entry(entry: Dict[str, Any], source: str) -> Rule:
    """Build a Rule from a mapping, converting every failure into ConfigError."""
    if not isinstance(entry, dict) or "id" not in entry:
        raise ConfigError(f"{source}: every rule needs an 'id'")
    try:
        return Rule.from_dict(entry)
    except re.error as exc:
        raise ConfigError(f"{source}: rule {entry['id']!r} has an invalid regex: {exc}") from exc
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"{source}: rule {entry['id']!r} is malformed: {exc}") from exc


class RuleRegistry:
    """Central, ordered store for all detection rules."""

    def __init__(self) -> None:
        self._rules: Dict[str, Rule] = {}
        self._disabled: set[str] = set()

    # ---- registration ----

    def register(self, rule: Rule) -> None:
        # later definitions replace earlier ones but keep their position
        self._rules[rule.id] = rule

    def register_many(self, rules: Iterable[Rule]) -> None:
        for r in rules:
            self.register(r)

    # ---- queries ----

    @property
    def all_rules(self) -> List[Rule]:
        return list(self._rules.values())

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def enabled_rules(self) -> List[Rule]:
        return [r for r in self._rules.values() if r.id not in self._disabled]

    # ---- config filtering ----

    def apply_config(self, config: LeakScanConfig) -> None:
        """Enable / disable rules based on config.rules."""
        enable_list = config.rules.enable
        self._disabled = {
            rule_id
            for rule_id in self._rules
            if (enable_list and rule_id not in enable_list)
            or rule_id in config.rules.disable
        }

    # ---- custom rule loading ----

    def load_custom_rules(self, directory: Path) -> int:
        """Load YAML rule files from *directory*. Returns count loaded."""
        count = 0
        if not directory.is_dir():
            return 0
        for path in sorted(directory.iterdir()):
            if path.suffix in (".yaml", ".yml"):
                count += self._load_yaml_rules(path)
        return count

    def _load_yaml_rules(self, path: Path) -> int:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to read rules from {path}: {exc}") from exc
        if data is None:
            return 0
        if not isinstance(data, list):
            data = [data]
        for entry in data:
            self.register(rule_from_entry(entry, str(path)))
        return len(data)

    def freeze(self, allowlist: Optional[Allowlist] = None) -> RuleSet:
        return RuleSet(rules=tuple(self.enabled_rules()), allowlist=allowlist or Allowlist())


def build_rule_set(config: LeakScanConfig, repo_root: Path) -> RuleSet:
    """Create the immutable rule set for a scan. Raises ConfigError on bad input."""
    from leakscan.rules.builtin import ALL_BUILTIN_RULES

    registry = RuleRegistry()
    if config.rules.use_builtin:
        registry.register_many(ALL_BUILTIN_RULES)

    for entry in config.inline_rules:
        registry.register(rule_from_entry(entry, "config"))

    registry.load_custom_rules(repo_root / CUSTOM_RULES_DIR)
    registry.apply_config(config)

    try:
        allowlist = Allowlist.from_dict(config.allowlist.as_dict())
    except re.error as exc:
        raise ConfigError(f"global allowlist has an invalid regex: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"global allowlist is malformed: {exc}") from exc

    return registry.freeze(allowlist)

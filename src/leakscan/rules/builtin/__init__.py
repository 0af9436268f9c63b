"""Built-in rules — aggregate all categories."""

from leakscan.rules.builtin.generic import ALL_GENERIC_RULES
from leakscan.rules.builtin.keys import ALL_KEY_RULES
from leakscan.rules.builtin.mailgun import ALL_MAILGUN_RULES
from leakscan.rules.builtin.tokens import ALL_TOKEN_RULES
from leakscan.rules.models import Rule

ALL_BUILTIN_RULES: list[Rule] = [
    *ALL_TOKEN_RULES,
    *ALL_MAILGUN_RULES,
    *ALL_KEY_RULES,
    *ALL_GENERIC_RULES,
]

__all__ = ["ALL_BUILTIN_RULES"]

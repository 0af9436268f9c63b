"""Shared regex builder and generic, entropy-gated rules."""

from typing import Iterable

from leakscan.rules.allowlist import Allowlist
from leakscan.rules.models import EntropyRange, Rule


def semi_generic_regex(identifiers: Iterable[str], secret_regex: str) -> str:
    """Regex for ``<identifier>... = "<secret>"`` style assignments.

    The secret is always capture group 1, so rules built with it use
    ``report_group=1``.
    """
    ids = "|".join(identifiers)
    return (
        r"(?i)(?:" + ids + r")"
        r"(?:[0-9a-z\-_\t .]{0,20})"
        r"(?:[\s|']|[\s|\"]){0,3}"
        r"(?:=|>|:{1,3}=|\|\|:|<=|=>|:|\?=)"
        r"(?:'|\"|\s|=|`){0,5}"
        r"(" + secret_regex + r")"
        r"(?:['|\"\n\r\s`;]|$)"
    )


GENERIC_API_KEY = Rule(
    id="generic-api-key",
    description="Generic API key or secret assignment",
    regex=semi_generic_regex(
        ["key", "api", "token", "secret", "client", "passwd", "password", "auth", "access"],
        r"[0-9a-z\-_.=]{10,150}",
    ),
    report_group=1,
    # only random-looking values; dictionary words fall well below 3.5 bits
    entropies=(EntropyRange(group=1, min=3.5, max=8.0),),
    allowlist=Allowlist.from_dict({"regexes": [r"(?i)example", r"(?i)placeholder", r"(?i)changeme"]}),
    tags=("generic", "key"),
)

ALL_GENERIC_RULES = [GENERIC_API_KEY]

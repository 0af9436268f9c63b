"""Mailgun API and webhook signing keys."""

from leakscan.rules.builtin.generic import semi_generic_regex
from leakscan.rules.models import Rule

MAILGUN_PRIVATE_API_TOKEN = Rule(
    id="mailgun-private-api-token",
    description="Mailgun private API token",
    regex=semi_generic_regex(["mailgun"], r"key-[a-f0-9]{32}"),
    report_group=1,
    tags=("mailgun", "key"),
)

MAILGUN_PUB_KEY = Rule(
    id="mailgun-pub-key",
    description="Mailgun public validation key",
    regex=semi_generic_regex(["mailgun"], r"pubkey-[a-f0-9]{32}"),
    report_group=1,
    tags=("mailgun", "key"),
)

MAILGUN_SIGNING_KEY = Rule(
    id="mailgun-signing-key",
    description="Mailgun webhook signing key",
    regex=semi_generic_regex(["mailgun"], r"[a-h0-9]{32}-[a-h0-9]{8}-[a-h0-9]{8}"),
    report_group=1,
    tags=("mailgun", "key"),
)

ALL_MAILGUN_RULES = [MAILGUN_PRIVATE_API_TOKEN, MAILGUN_PUB_KEY, MAILGUN_SIGNING_KEY]

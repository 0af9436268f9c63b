"""Leak models, aggregation, and redaction."""

from leakscan.findings.aggregator import LeakAggregator
from leakscan.findings.models import Leak, ScanResult
from leakscan.findings.redactor import redact

__all__ = ["Leak", "LeakAggregator", "ScanResult", "redact"]

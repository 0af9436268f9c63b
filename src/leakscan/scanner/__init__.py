"""Scanner — entropy, per-unit rule evaluation, orchestration.

Only the entropy helpers are re-exported; import the engine and the
orchestrator from their modules.
"""

from leakscan.scanner.entropy import entropy_report, shannon_entropy

__all__ = ["entropy_report", "shannon_entropy"]

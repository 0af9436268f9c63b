"""leakscan — find leaked credentials in git history, diffs and working trees."""

__version__ = "0.3.0"

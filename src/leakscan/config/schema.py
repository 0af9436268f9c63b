"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal

OutputFormat = Literal["terminal", "json", "sarif", "csv"]
LogFormat = Literal["rich", "plain", "json"]

OUTPUT_FORMATS = ("terminal", "json", "sarif", "csv")
LOG_FORMATS = ("rich", "plain", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class ScanConfig:
    max_concurrency: int = 4  # repositories scanned at once
    per_page: int = 100  # repositories per listing page
    max_page_failures: int = 3  # consecutive diff-page failures before giving up
    leak_exit_code: int = 1
    clone_depth: int = 0  # 0 = full history


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    redact: bool = False
    show_summary: bool = True


@dataclass
class RulesConfig:
    enable: List[str] = field(default_factory=list)  # empty = all enabled
    disable: List[str] = field(default_factory=list)
    use_builtin: bool = True


@dataclass
class AllowlistConfig:
    description: str = "global allowlist"
    regexes: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    commits: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "regexes": self.regexes,
            "paths": self.paths,
            "files": self.files,
            "commits": self.commits,
        }


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: LogFormat = "rich"


@dataclass
class LeakScanConfig:
    version: str = "1.0"
    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    allowlist: AllowlistConfig = field(default_factory=AllowlistConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    # raw [[rule]] tables, turned into Rule objects by the registry
    inline_rules: List[Dict[str, Any]] = field(default_factory=list)

"""Load and merge configuration from .leakscan.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from leakscan.config.schema import (
    LOG_FORMATS,
    LOG_LEVELS,
    OUTPUT_FORMATS,
    AllowlistConfig,
    LeakScanConfig,
    LoggingConfig,
    OutputConfig,
    RulesConfig,
    ScanConfig,
)

CONFIG_FILENAME = ".leakscan.toml"


class ConfigError(Exception):
    """Raised when config or rule definitions are malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: LeakScanConfig) -> None:
    """Apply LEAKSCAN_* environment variable overrides. Invalid values are ignored."""
    if val := os.environ.get("LEAKSCAN_MAX_CONCURRENCY"):
        try:
            if int(val) > 0:
                cfg.scan.max_concurrency = int(val)
        except ValueError:
            pass
    if val := os.environ.get("LEAKSCAN_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("LEAKSCAN_DISABLE_RULES"):
        cfg.rules.disable.extend(r.strip() for r in val.split(",") if r.strip())
    if val := os.environ.get("LEAKSCAN_LOG_LEVEL"):
        if val.upper() in LOG_LEVELS:
            cfg.logging.level = val.upper()
    if os.environ.get("LEAKSCAN_REDACT") in ("1", "true", "yes"):
        cfg.output.redact = True


_TYPE_NAMES = {bool: "a boolean", int: "an integer", str: "a string", list: "a list of strings"}


def _check_value(section: str, name: str, value: Any, default: Any) -> None:
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif isinstance(default, list):
        ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
    else:
        ok = isinstance(value, type(default))
    if not ok:
        raise ConfigError(f"{section}.{name} must be {_TYPE_NAMES[type(default)]}, got {value!r}")


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    defaults = cls()
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    for name, value in filtered.items():
        _check_value(section, name, value, getattr(defaults, name))
    return cls(**filtered)


def _validate(cfg: LeakScanConfig) -> None:
    if cfg.scan.max_concurrency < 1:
        raise ConfigError("scan.max_concurrency must be at least 1")
    if cfg.scan.per_page < 1:
        raise ConfigError("scan.per_page must be at least 1")
    if cfg.scan.max_page_failures < 1:
        raise ConfigError("scan.max_page_failures must be at least 1")
    if cfg.scan.clone_depth < 0:
        raise ConfigError("scan.clone_depth must not be negative")
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(f"Unknown output format: {cfg.output.format}")
    cfg.logging.level = cfg.logging.level.upper()
    if cfg.logging.level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {cfg.logging.level}")
    if cfg.logging.format not in LOG_FORMATS:
        raise ConfigError(f"Unknown log format: {cfg.logging.format}")


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> LeakScanConfig:
    """Load, validate, and return a LeakScanConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = LeakScanConfig()
    else:
        raw = _parse_toml(config_path)
        inline_rules = raw.get("rule", [])
        if not isinstance(inline_rules, list):
            raise ConfigError("[[rule]] entries must be an array of tables")
        cfg = LeakScanConfig(
            version=raw.get("version", "1.0"),
            scan=_build_section(raw, ScanConfig, "scan"),
            output=_build_section(raw, OutputConfig, "output"),
            rules=_build_section(raw, RulesConfig, "rules"),
            allowlist=_build_section(raw, AllowlistConfig, "allowlist"),
            logging=_build_section(raw, LoggingConfig, "logging"),
            inline_rules=inline_rules,
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg

"""leakscan CLI — Typer application with detect, repos, commit, rules, and init commands."""

from __future__ import annotations

import asyncio
import dataclasses
from pathlib import Path
from typing import Coroutine, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from leakscan import __version__

app = typer.Typer(
    name="leakscan",
    help="Find leaked secrets in git history, working trees and single commits.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


@dataclasses.dataclass
class CommonOptions:
    config: Optional[str]
    format: Optional[str]
    output: Optional[str]
    redact: bool
    concurrency: Optional[int]
    verbose: bool
    debug: bool


# typer options shared by the scanning commands
_CONFIG = typer.Option(None, "--config", "-c", help="Path to .leakscan.toml")
_FORMAT = typer.Option(None, "--format", "-f", help="Output format: terminal | json | sarif | csv")
_OUTPUT = typer.Option(None, "--output", "-o", help="Write report to file")
_REDACT = typer.Option(False, "--redact", help="Replace secrets with REDACTED in reports")
_CONCURRENCY = typer.Option(None, "--concurrency", "-j", min=1, help="Repositories scanned at once")
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Verbose output")
_DEBUG = typer.Option(False, "--debug", help="Debug logging")


def _fail(label: str, exc: Exception) -> typer.Exit:
    console.print(f"[bold red]{label}:[/bold red] {escape(str(exc))}", highlight=False)
    return typer.Exit(code=2)


def _prepare(repo_root: Path, opts: CommonOptions):
    """Load config, apply CLI overrides, configure logging, build the rule set."""
    from leakscan.config.loader import ConfigError, load_config
    from leakscan.config.schema import OUTPUT_FORMATS
    from leakscan.logging_config import configure_logging
    from leakscan.rules.registry import build_rule_set

    try:
        cfg = load_config(repo_root, opts.config)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc

    if opts.format:
        if opts.format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {opts.format}")
            raise typer.Exit(code=2)
        cfg.output.format = opts.format  # type: ignore[assignment]
    if opts.redact:
        cfg.output.redact = True
    if opts.concurrency:
        cfg.scan.max_concurrency = opts.concurrency

    level = cfg.logging.level
    if opts.debug:
        level = "DEBUG"
    elif opts.verbose and level in ("WARNING", "ERROR"):
        level = "INFO"
    configure_logging(level, cfg.logging.format)

    try:
        rule_set = build_rule_set(cfg, repo_root)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc

    if opts.verbose or opts.debug:
        console.print(f"[dim]Rules loaded: {len(rule_set)}[/dim]")
        console.print(f"[dim]Config root: {repo_root}[/dim]")
    return cfg, rule_set


def _run(coro: Coroutine):
    """Run a scan coroutine, mapping terminal errors to exit code 2."""
    from leakscan.git.adapter import GitError
    from leakscan.scanner.engine import ScanError
    from leakscan.scanner.orchestrator import CommitNotFoundError, ListingError

    try:
        return asyncio.run(coro)
    except ListingError as exc:
        raise _fail("Listing error", exc) from exc
    except CommitNotFoundError as exc:
        raise _fail("Commit error", exc) from exc
    except GitError as exc:
        raise _fail("Git error", exc) from exc
    except ScanError as exc:
        raise _fail("Scanner error", exc) from exc
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow]")
        raise typer.Exit(code=2)


def _report(result, cfg, opts: CommonOptions) -> None:
    """Render *result*, write ``--output``, and exit with the leak status."""
    from leakscan.findings.redactor import redact
    from leakscan.output import csv_report, json_report, sarif, terminal

    if cfg.output.redact:
        result = dataclasses.replace(result, leaks=[redact(leak) for leak in result.leaks])

    if opts.debug:
        console.print(f"[dim]Scan duration: {result.scan_duration_ms:.0f}ms[/dim]")

    report_text: Optional[str] = None
    fmt = cfg.output.format
    if fmt == "terminal":
        terminal.render(result, show_summary=cfg.output.show_summary, console=console)
    elif fmt == "json":
        report_text = json_report.render(result)
    elif fmt == "sarif":
        report_text = sarif.render(result)
    elif fmt == "csv":
        report_text = csv_report.render(result)

    if report_text is not None and not opts.output:
        print(report_text)

    if opts.output:
        # terminal output has no file form; write JSON instead
        Path(opts.output).write_text(report_text or json_report.render(result), encoding="utf-8")
        if opts.verbose:
            console.print(f"[dim]Report written to {opts.output}[/dim]")

    if result.leaks:
        raise typer.Exit(code=cfg.scan.leak_exit_code)
    raise typer.Exit(code=0)


# ── detect ────────────────────────────────────────────────────────────────────


@app.command()
def detect(
    path: Path = typer.Argument(Path("."), help="Repository or directory to scan"),
    no_git: bool = typer.Option(False, "--no-git", help="Scan working-tree files instead of history"),
    log_opts: Optional[str] = typer.Option(None, "--log-opts", help="Revision range passed to git log"),
    config: Optional[str] = _CONFIG,
    format: Optional[str] = _FORMAT,
    output: Optional[str] = _OUTPUT,
    redact: bool = _REDACT,
    concurrency: Optional[int] = _CONCURRENCY,
    verbose: bool = _VERBOSE,
    debug: bool = _DEBUG,
) -> None:
    """Scan the git history (or, with --no-git, the files) of one repository."""
    from leakscan.git.adapter import GitError, get_repo_root
    from leakscan.hosts.local import GitHistorySource, StaticListing, iter_worktree_units, repository_ref
    from leakscan.scanner.orchestrator import ScanOrchestrator

    opts = CommonOptions(config, format, output, redact, concurrency, verbose, debug)
    if not path.is_dir():
        console.print(f"[bold red]Error:[/bold red] {path} is not a directory")
        raise typer.Exit(code=2)

    root = path.resolve()
    if not no_git:
        try:
            root = get_repo_root(root)
        except GitError as exc:
            raise _fail("Git error", exc) from exc

    cfg, rule_set = _prepare(root, opts)
    orchestrator = ScanOrchestrator(
        rule_set,
        max_concurrency=cfg.scan.max_concurrency,
        max_page_failures=cfg.scan.max_page_failures,
    )

    if no_git:
        coro = orchestrator.scan_units(iter_worktree_units(root, repo=root.name))
    else:
        listing = StaticListing([repository_ref(str(root))], per_page=cfg.scan.per_page)
        source = GitHistorySource(clone_depth=cfg.scan.clone_depth, rev_range=log_opts)
        coro = orchestrator.scan_listing(listing, source)

    result = _run(coro)
    _report(result, cfg, opts)


# ── repos ─────────────────────────────────────────────────────────────────────


@app.command()
def repos(
    sources: List[str] = typer.Argument(..., help="Repository paths or clone URLs"),
    per_page: Optional[int] = typer.Option(None, "--per-page", min=1, help="Repositories per listing page"),
    config: Optional[str] = _CONFIG,
    format: Optional[str] = _FORMAT,
    output: Optional[str] = _OUTPUT,
    redact: bool = _REDACT,
    concurrency: Optional[int] = _CONCURRENCY,
    verbose: bool = _VERBOSE,
    debug: bool = _DEBUG,
) -> None:
    """Scan the history of many repositories concurrently."""
    from leakscan.hosts.local import GitHistorySource, StaticListing, repository_ref
    from leakscan.scanner.orchestrator import ScanOrchestrator

    opts = CommonOptions(config, format, output, redact, concurrency, verbose, debug)
    cfg, rule_set = _prepare(Path.cwd(), opts)
    if per_page:
        cfg.scan.per_page = per_page

    listing = StaticListing([repository_ref(s) for s in sources], per_page=cfg.scan.per_page)
    source = GitHistorySource(clone_depth=cfg.scan.clone_depth)
    orchestrator = ScanOrchestrator(
        rule_set,
        max_concurrency=cfg.scan.max_concurrency,
        max_page_failures=cfg.scan.max_page_failures,
    )
    result = _run(orchestrator.scan_listing(listing, source))
    _report(result, cfg, opts)


# ── commit ────────────────────────────────────────────────────────────────────


@app.command()
def commit(
    sha: str = typer.Argument(..., help="Commit to scan"),
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Repository containing the commit"),
    config: Optional[str] = _CONFIG,
    format: Optional[str] = _FORMAT,
    output: Optional[str] = _OUTPUT,
    redact: bool = _REDACT,
    concurrency: Optional[int] = _CONCURRENCY,
    verbose: bool = _VERBOSE,
    debug: bool = _DEBUG,
) -> None:
    """Scan the changes introduced by a single commit."""
    from leakscan.git.adapter import GitError, get_repo_root
    from leakscan.hosts.base import CommitRef
    from leakscan.hosts.local import LocalDiffSource
    from leakscan.scanner.orchestrator import ScanOrchestrator

    opts = CommonOptions(config, format, output, redact, concurrency, verbose, debug)
    try:
        root = get_repo_root(repo.resolve())
    except GitError as exc:
        raise _fail("Git error", exc) from exc

    cfg, rule_set = _prepare(root, opts)
    orchestrator = ScanOrchestrator(
        rule_set,
        max_concurrency=cfg.scan.max_concurrency,
        max_page_failures=cfg.scan.max_page_failures,
    )
    diff_source = LocalDiffSource(root, per_page=cfg.scan.per_page)
    result = _run(orchestrator.scan_commit(CommitRef(repo=root.name, sha=sha), diff_source))
    _report(result, cfg, opts)


# ── rules ─────────────────────────────────────────────────────────────────────


@app.command()
def rules(
    path: Path = typer.Argument(Path("."), help="Repository whose config and custom rules apply"),
    config: Optional[str] = _CONFIG,
) -> None:
    """List the rules that a scan of PATH would use."""
    opts = CommonOptions(config, None, None, False, None, False, False)
    _, rule_set = _prepare(path.resolve(), opts)

    table = Table(title=f"{len(rule_set)} active rules", border_style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Kind", style="magenta")
    table.add_column("Tags", style="dim")
    for rule in rule_set:
        kind = "file/path" if rule.is_file_rule else "content"
        table.add_row(rule.id, rule.description, kind, ", ".join(rule.tags))
    Console().print(table)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    path: Path = typer.Argument(Path("."), help="Directory to write the config into"),
) -> None:
    """Generate a starter .leakscan.toml."""
    from leakscan.config.defaults import DEFAULT_TOML
    from leakscan.config.loader import CONFIG_FILENAME

    config_path = path / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"leakscan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """leakscan — find leaked secrets in git repositories."""

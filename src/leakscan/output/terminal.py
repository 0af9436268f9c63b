"""Rich terminal reporter."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from leakscan.findings.aggregator import count_by_rule
from leakscan.findings.models import ScanResult


def render(result: ScanResult, *, show_summary: bool = True, console: Console | None = None) -> None:
    """Print scan results to the terminal using Rich."""
    console = console or Console(stderr=True)

    for warning in result.warnings:
        console.print(f"[yellow]⚠  {escape(warning)}[/yellow]", highlight=False)

    if not result.leaks:
        console.print()
        console.print("[bold green]✅ No leaks found.[/bold green]")
        if show_summary:
            _print_summary(console, result)
        return

    console.print()
    table = Table(
        title="leakscan findings",
        show_lines=True,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("Rule", style="cyan", min_width=18)
    table.add_column("Location", style="magenta")
    table.add_column("Commit", style="green")
    table.add_column("Offender", min_width=15)
    table.add_column("Entropy", justify="right")

    for leak in result.leaks:
        location = leak.file if leak.line_number == 0 else f"{leak.file}:{leak.line_number}"
        if leak.repo:
            location = f"{leak.repo}/{location}"
        table.add_row(
            escape(leak.rule),
            escape(location),
            leak.commit[:10] or "-",
            escape(leak.offender),
            leak.entropy or "-",
        )

    console.print(table)

    if show_summary:
        _print_summary(console, result)

    console.print()
    console.print(f"[bold red]❌ {result.total_leaks} leak(s) found.[/bold red]")


def _print_summary(console: Console, result: ScanResult) -> None:
    console.print()
    console.print(f"[dim]Repositories:[/dim]  {result.repos_scanned}")
    console.print(f"[dim]Units scanned:[/dim] {result.units_scanned}")
    console.print(f"[dim]Leaks:[/dim]         {result.total_leaks}")
    for rule_id, count in count_by_rule(result.leaks).items():
        console.print(f"[dim]  {rule_id}:[/dim] {count}")
    console.print(f"[dim]Warnings:[/dim]      {len(result.warnings)}")
    console.print(f"[dim]Duration:[/dim]      {result.scan_duration_ms:.0f}ms")

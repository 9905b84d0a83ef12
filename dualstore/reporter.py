from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from dualstore.migrator import MigrationReport

MAX_ERRORS_SHOWN = 20


def print_report(report: MigrationReport, console: Optional[Console] = None) -> None:
    """
    Render a migration report as rich tables.

    One row per record kind plus a total row; per-record failures follow in a
    second table, truncated to the first few entries.
    """
    console = console or Console()

    table = Table(
        title="MongoDB -> PostgreSQL Migration",
        box=box.ROUNDED,
        caption=f"Duration {report.duration_seconds:.2f}s",
    )
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Attempted", justify="right", style="magenta")
    table.add_column("Inserted", justify="right", style="bold green")
    table.add_column("Skipped (duplicate)", justify="right", style="yellow")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Source", style="dim")

    for kind in report.kinds:
        table.add_row(
            kind.kind,
            f"{kind.attempted:,}",
            f"{kind.inserted:,}",
            f"{kind.skipped:,}",
            f"{kind.failed:,}",
            f"[red]{kind.source_error}[/red]" if kind.source_error else "ok",
        )
    table.add_section()
    table.add_row(
        "total",
        f"{report.attempted:,}",
        f"{report.inserted:,}",
        f"{report.skipped:,}",
        f"{report.failed:,}",
        "",
    )
    console.print(table)

    if not report.errors:
        return

    errors = Table(title="Skipped records", box=box.SIMPLE)
    errors.add_column("Kind", style="cyan")
    errors.add_column("Source id", style="dim")
    errors.add_column("Error", style="red")
    for err in report.errors[:MAX_ERRORS_SHOWN]:
        errors.add_row(err.kind, err.source_id or "-", err.message)
    console.print(errors)
    hidden = len(report.errors) - MAX_ERRORS_SHOWN
    if hidden > 0:
        console.print(f"[dim]... {hidden} more not shown[/dim]")

from __future__ import annotations

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fixplesk.domain.models import RestoreReport

_stdout = Console(highlight=False)
_stderr = Console(stderr=True, highlight=False)


def error(message: str, console: Optional[Console] = None) -> None:
    """Print a red ERROR line to stderr."""
    (console or _stderr).print(f"[red]ERROR[/red]: {escape(message)}", soft_wrap=True)


def warning(message: str, console: Optional[Console] = None) -> None:
    """Print a yellow WARNING line to stderr."""
    (console or _stderr).print(f"[yellow]WARNING[/yellow]: {escape(message)}", soft_wrap=True)


def _format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return "-"
    return f"{seconds:.2f}s"


def build_summary_table(reports: Sequence[RestoreReport], skipped: Sequence[str]) -> Table:
    """
    Build a summary table with one row per processed domain argument.

    Restored domains come first, in processing order, followed by skipped ones.
    """
    table = Table(title="Permission restore summary", box=box.SIMPLE_HEAVY)
    table.add_column("Domain", style="bold", no_wrap=True)
    table.add_column("System user")
    table.add_column("Document root", overflow="fold")
    table.add_column("Ownership", justify="right")
    table.add_column("Modes", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Status")

    for report in reports:
        record = report.record
        status = "[green]ok[/green]" if report.ok else "[yellow]partial[/yellow]"
        table.add_row(
            escape(record.domain),
            escape(record.system_user),
            escape(str(record.document_root)),
            str(report.owner_changes),
            str(report.mode_changes),
            str(len(report.failures)),
            _format_duration(report.duration_seconds),
            status,
        )
    for domain in skipped:
        table.add_row(escape(domain), "-", "-", "-", "-", "-", "-", "[yellow]skipped[/yellow]")
    return table


def print_summary(
    reports: List[RestoreReport],
    skipped: List[str],
    console: Optional[Console] = None,
) -> None:
    """Render the summary table to stdout (or the given console)."""
    if not reports and not skipped:
        return
    (console or _stdout).print(build_summary_table(reports, skipped))


__all__ = ["build_summary_table", "error", "print_summary", "warning"]

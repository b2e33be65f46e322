# Copyright (c) Syntropy Systems
"""tandem show command - list published results."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console
from rich.table import Table

from tandem.config import get_results_path
from tandem.publishers import read_results

if TYPE_CHECKING:
    from tandem.models.record import ObservationRecord, ResultRecord

console = Console()


def resolve_results_file(results_file: Path | None) -> Path:
    """Return the given results file, or the configured one."""
    if results_file is not None:
        return results_file
    try:
        return get_results_path()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def filter_results(
    results: list[ResultRecord],
    experiment: str | None = None,
    mismatched: bool = False,  # noqa: FBT001, FBT002
) -> list[ResultRecord]:
    """Filter records by experiment name and mismatch state."""
    if experiment is not None:
        results = [r for r in results if r.experiment == experiment]
    if mismatched:
        results = [r for r in results if r.mismatched]
    return results


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as milliseconds."""
    return f"{seconds * 1000:.2f}ms"


def _format_outcome(observation: ObservationRecord) -> str:
    if observation.raised:
        return f"[red]{observation.error_class}: {observation.error_message}[/red]"
    return format_duration(observation.duration)


def show(
    results_file: Optional[Path] = typer.Argument(
        None,
        help="Results JSONL file (default: configured results file)",
    ),
    experiment: Optional[str] = typer.Option(
        None,
        "--experiment", "-e",
        help="Only show results for this experiment",
    ),
    mismatched: bool = typer.Option(
        False,
        "--mismatched", "-m",
        help="Only show mismatches that are not ignored",
    ),
    limit: int = typer.Option(
        20,
        "--limit", "-n",
        min=1,
        help="Number of results to show",
    ),
) -> None:
    """Show published experiment results, newest last."""
    path = resolve_results_file(results_file)
    results = filter_results(read_results(path), experiment, mismatched)

    if not results:
        console.print("[dim]No results found[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Experiment", style="cyan")
    table.add_column("Published", style="dim")
    table.add_column("Matched")
    table.add_column("Ignored")
    table.add_column("Control")
    table.add_column("Candidate")

    for record in results[-limit:]:
        if record.matched:
            matched = "[green]yes[/green]"
        elif record.ignored:
            matched = "[dim]no[/dim]"
        else:
            matched = "[yellow]no[/yellow]"
        table.add_row(
            record.experiment,
            record.published_at or "-",
            matched,
            "yes" if record.ignored else "no",
            _format_outcome(record.control),
            _format_outcome(record.candidate),
        )

    console.print(table)

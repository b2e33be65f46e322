# Copyright (c) Syntropy Systems
"""Export command - export published results to CSV/JSON."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from pydantic import TypeAdapter
from rich.console import Console

from tandem.cli.show import filter_results, resolve_results_file
from tandem.models.base import JSONValue
from tandem.publishers import read_results

if TYPE_CHECKING:
    from tandem.models.record import ObservationRecord

console = Console()
_JSON_VALUE_ADAPTER = TypeAdapter(JSONValue)
_EXPORT_ADAPTER = TypeAdapter(list[dict[str, JSONValue]])

FIELDNAMES = [
    "experiment",
    "published_at",
    "matched",
    "ignored",
    "control.value",
    "control.duration",
    "control.error_class",
    "control.error_message",
    "candidate.value",
    "candidate.duration",
    "candidate.error_class",
    "candidate.error_message",
]


def _to_csv_value(value: JSONValue | None) -> str | float | None:
    if value is None:
        return None
    if isinstance(value, (bool, str)):
        return str(value)
    if isinstance(value, (int, float)):
        return value
    return _JSON_VALUE_ADAPTER.dump_json(value).decode("utf-8")


def _flatten(prefix: str, observation: ObservationRecord) -> dict[str, str | float | None]:
    return {
        f"{prefix}.value": _to_csv_value(observation.value),
        f"{prefix}.duration": observation.duration,
        f"{prefix}.error_class": observation.error_class,
        f"{prefix}.error_message": observation.error_message,
    }


def export(
    output: Path = typer.Argument(..., help="Output file path (.csv or .json)"),
    results_file: Optional[Path] = typer.Argument(
        None,
        help="Results JSONL file (default: configured results file)",
    ),
    experiment: Optional[str] = typer.Option(
        None, "--experiment", "-e", help="Filter by experiment"
    ),
    mismatched: bool = typer.Option(
        False, "--mismatched", "-m", help="Only export unignored mismatches"
    ),
) -> None:
    """Export published results to CSV or JSON format.

    Examples:
        tandem export results.csv
        tandem export mismatches.json --mismatched
        tandem export results.json .tandem/results.jsonl

    """
    suffix = output.suffix.lower()
    if suffix not in [".csv", ".json"]:
        console.print("[red]Output must be .csv or .json[/red]")
        raise typer.Exit(1)

    path = resolve_results_file(results_file)
    results = filter_results(read_results(path), experiment, mismatched)

    if not results:
        console.print("[yellow]No results to export[/yellow]")
        raise typer.Exit(0)

    if suffix == ".json":
        export_data = [record.model_dump(exclude_none=True) for record in results]
        _ = output.write_bytes(_EXPORT_ADAPTER.dump_json(export_data, indent=2))
    else:
        with output.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDNAMES, extrasaction="ignore")
            writer.writeheader()

            for record in results:
                row: dict[str, str | float | None] = {
                    "experiment": record.experiment,
                    "published_at": record.published_at,
                    "matched": str(record.matched),
                    "ignored": str(record.ignored),
                }
                row.update(_flatten("control", record.control))
                row.update(_flatten("candidate", record.candidate))
                writer.writerow(row)

    console.print(f"[green]Exported {len(results)} result(s) to {output}[/green]")

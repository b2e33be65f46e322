# Copyright (c) Syntropy Systems
"""tandem init command."""

from dataclasses import asdict
from pathlib import Path

import typer
import yaml
from rich.console import Console

from tandem.config import TandemConfig

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Initialize a new tandem project.

    Creates a .tandem directory with a default configuration.
    """
    target = path.resolve()
    tandem_dir = target / ".tandem"

    if tandem_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {tandem_dir}")
        return

    tandem_dir.mkdir(parents=True)

    config_path = tandem_dir / "config.yaml"
    with config_path.open("w") as f:
        yaml.dump(asdict(TandemConfig()), f, default_flow_style=False)

    console.print(f"[green]Initialized tandem project:[/green] {tandem_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
    console.print(f"  [dim]results:[/dim] {tandem_dir / TandemConfig().results_file}")

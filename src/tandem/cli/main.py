# Copyright (c) Syntropy Systems
"""Main CLI entry point for tandem."""

import logging

import typer
from rich.logging import RichHandler

from tandem.cli.export import export
from tandem.cli.init_cmd import init
from tandem.cli.show import show
from tandem.config import load_config

app = typer.Typer(
    name="tandem",
    help="Inspect results published by tandem experiments.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Configure logging from the tandem config."""
    config = load_config()
    level = logging.getLevelName(config.log_level)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


# Register commands
_ = app.command()(init)
_ = app.command()(show)
_ = app.command(name="export")(export)


if __name__ == "__main__":
    app()

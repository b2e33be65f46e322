# Copyright (c) Syntropy Systems
"""Configuration management for tandem."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import cast

import yaml

LOG_LEVEL_ENV = "TANDEM_LOG_LEVEL"


@dataclass
class TandemConfig:
    """Configuration for tandem."""

    # JSONL file results are published to, relative to the .tandem directory
    results_file: str = "results.jsonl"

    # Level for the CLI's log handler
    log_level: str = "WARNING"


def find_tandem_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .tandem directory by walking up from start_path.

    Returns None if no .tandem directory is found.
    """
    current = (start_path or Path.cwd()).resolve()

    # The start directory itself, then each ancestor up to the root
    for directory in (current, *current.parents):
        tandem_dir = directory / ".tandem"
        if tandem_dir.is_dir():
            return tandem_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global tandem config directory (~/.tandem)."""
    return Path.home() / ".tandem"


def load_config(tandem_dir: Path | None = None) -> TandemConfig:
    """Load configuration from .tandem/config.yaml or defaults.

    Looks for config in:
    1. Provided tandem_dir
    2. Nearest .tandem directory walking up
    3. ~/.tandem/config.yaml
    4. Defaults

    The TANDEM_LOG_LEVEL environment variable overrides log_level.
    """
    config = TandemConfig()

    config_path = None

    if tandem_dir is not None:
        config_path = tandem_dir / "config.yaml"
    else:
        found_dir = find_tandem_dir()
        if found_dir is not None:
            config_path = found_dir / "config.yaml"
        else:
            global_config = get_global_config_dir() / "config.yaml"
            if global_config.exists():
                config_path = global_config

    if config_path is not None and config_path.exists():
        with config_path.open() as f:
            data = cast("dict[str, object]", yaml.safe_load(f) or {})

        results_file = data.get("results_file")
        if isinstance(results_file, str) and results_file:
            config.results_file = results_file
        log_level = data.get("log_level")
        if isinstance(log_level, str) and log_level:
            config.log_level = log_level.upper()

    env_level = os.environ.get(LOG_LEVEL_ENV)
    if env_level:
        config.log_level = env_level.upper()

    return config


def require_tandem_dir() -> Path:
    """Get tandem directory or raise an error if not found."""
    tandem_dir = find_tandem_dir()
    if tandem_dir is None:
        msg = "No .tandem directory found. Run 'tandem init' first."
        raise RuntimeError(msg)
    return tandem_dir


def get_results_path(tandem_dir: Path | None = None) -> Path:
    """Get the path to the configured results file."""
    if tandem_dir is None:
        tandem_dir = require_tandem_dir()

    config = load_config(tandem_dir)
    results_path = Path(config.results_file)
    if results_path.is_absolute():
        return results_path
    return tandem_dir / results_path

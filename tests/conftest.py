# Copyright (c) Syntropy Systems
"""Pytest fixtures for tandem tests."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tandem_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary tandem project directory."""
    tandem_dir = temp_dir / ".tandem"
    tandem_dir.mkdir()
    _ = (tandem_dir / "config.yaml").write_text("results_file: results.jsonl\n")

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)

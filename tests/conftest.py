"""Test configuration for local imports without installing the package."""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_configure():
    """Ensure the src/ directory is importable and matplotlib stays headless."""
    root = Path(__file__).resolve().parents[1] / "src"
    sys.path.insert(0, str(root))
    os.environ.setdefault("MPLBACKEND", "Agg")


@pytest.fixture
def genome_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "src" / "codoncanvas" / "examples" / "genomes"


@pytest.fixture
def hello_circle() -> str:
    return "ATG GAA CCC GGA TAA"

"""CLI package for TrialSearch command orchestration."""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from TrialSearch.cli.runner import CommandRunner
from TrialSearch.cli.ui import cli


def main() -> None:
    """Run TrialSearch CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()

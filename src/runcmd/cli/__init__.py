"""Command-line interface for runcmd."""

from .app import main, run_cli

__all__ = ["main", "run_cli"]

"""CLI parser builder for runcmd."""

from __future__ import annotations

import argparse
from pathlib import Path

from ..version import __version__

__all__ = ["USAGE", "create_parser"]

USAGE = "Usage: runcmd <group> <dir1> [dir2 ...]"


def _epilog() -> str:
    return (
        "Quick examples:\n"
        "  # Run the 'pull' group in three checkouts, two at a time\n"
        "  runcmd pull ./api ./web ./worker -j 2\n\n"
        "  # Use a specific configuration file\n"
        "  runcmd build ./svc-a ./svc-b --config deploy.yaml\n\n"
        "  # Fail the invocation when any directory fails\n"
        "  runcmd test ./pkg-* --strict --summary\n\n"
        "Configuration:\n"
        "  Built-in defaults are overridden by ~/.config/runcmd/config.txt, then\n"
        "  by ./config.txt (or --config / $RUNCMD_CONFIG). Groups are replaced\n"
        "  by name; settings key by key.\n"
    )


def _add_positionals(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("group", nargs="?", help="Name of the command group to run")
    parser.add_argument(
        "directories",
        nargs="*",
        metavar="dir",
        help="Target directories; the group runs once in each",
    )


def _add_execution_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Execution")
    g.add_argument(
        "-j",
        "--concurrency",
        type=int,
        default=None,
        help="Max directories running at once (default: config value, else 3)",
    )
    g.add_argument("--shell", type=str, default=None, help="Shell used to run scripts")
    g.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any directory fails",
    )
    g.add_argument(
        "--summary",
        action="store_true",
        help="Print a per-directory result summary after the run",
    )


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Configuration")
    g.add_argument("--config", type=Path, default=None, help="Configuration file")
    g.add_argument(
        "--no-global-config",
        action="store_true",
        help="Ignore ~/.config/runcmd/config.txt",
    )
    g.add_argument(
        "--list-groups",
        action="store_true",
        help="List configured groups and exit",
    )


def _add_diag_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Diagnostics")
    mx = g.add_mutually_exclusive_group()
    mx.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    mx.add_argument("-q", "--quiet", action="store_true", help="Errors only")
    g.add_argument(
        "--log-file", type=Path, default=None, help="Append JSONL diagnostics here"
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runcmd",
        description=(
            "Run a named group of shell commands in each target directory,\n"
            "a bounded number of directories at a time."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    _add_positionals(parser)
    _add_execution_args(parser)
    _add_config_args(parser)
    _add_diag_args(parser)
    return parser

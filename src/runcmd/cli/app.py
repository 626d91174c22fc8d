#!/usr/bin/env python3
"""runcmd CLI entrypoint.

Resolves configuration, picks the requested group and concurrency, and hands
both to the execution engine.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Dict, Final, List, Optional, Sequence

from rich.console import Console
from rich.text import Text

from ..config import (
    RunConfig,
    group_names,
    load_config,
    merge_config,
    resolve_concurrency,
    resolve_group,
)
from ..engine import DEFAULT_SHELL, OutputSink, TaskOutcome, make_console, run_group
from ..exceptions import RunCmdError
from ..utils.log_setup import setup_logging
from .parser import USAGE, create_parser
from .summary import display_summary

__all__: Final = ["main", "run_cli"]

logger = logging.getLogger(__name__)


def _cli_overrides(args: argparse.Namespace) -> RunConfig:
    """Settings given on the command line, as the top configuration layer."""
    settings: Dict[str, str] = {}
    if args.concurrency is not None:
        settings["concurrency"] = str(args.concurrency)
    if args.shell:
        settings["shell"] = args.shell
    return RunConfig.build(settings)


def _load(args: argparse.Namespace) -> RunConfig:
    config = load_config(args.config, use_global=not args.no_global_config)
    return merge_config(config, _cli_overrides(args))


def _exit_code(outcomes: Sequence[TaskOutcome], *, strict: bool) -> int:
    """Directory failures only affect the exit status under ``--strict``."""
    if strict and any(not outcome.success for outcome in outcomes):
        return 1
    return 0


def _print_error(console: Console, message: str) -> None:
    console.print(Text(message, style="red"), soft_wrap=True)


def _list_groups(console: Console, config: RunConfig) -> int:
    for name in group_names(config):
        commands = config.groups[name]
        line = Text(name, style="bold")
        line.append(f"  ({len(commands)} commands)", style="dim")
        console.print(line, soft_wrap=True)
    return 0


async def _dispatch(console: Console, args: argparse.Namespace) -> int:
    if not args.list_groups and (not args.group or not args.directories):
        console.print(USAGE, markup=False, highlight=False)
        return 0

    try:
        config = _load(args)
        if args.list_groups:
            return _list_groups(console, config)
        commands = resolve_group(config, args.group)
    except RunCmdError as exc:
        logger.debug("Configuration error", exc_info=True)
        _print_error(console, str(exc))
        return 1

    concurrency = resolve_concurrency(config.settings)
    shell = config.settings.get("shell") or DEFAULT_SHELL
    sink = OutputSink(console)
    sink.info(f"Max concurrency: {concurrency}")

    outcomes: List[TaskOutcome] = await run_group(
        commands, args.directories, concurrency, sink=sink, shell=shell
    )
    if args.summary:
        display_summary(console, outcomes)
    return _exit_code(outcomes, strict=args.strict)


def run_cli(
    argv: Optional[Sequence[str]] = None, *, console: Optional[Console] = None
) -> int:
    """Parse ``argv``, run, and return the process exit status."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)
    return asyncio.run(_dispatch(console or make_console(), args))


def main() -> None:
    """CLI entrypoint."""
    sys.exit(int(run_cli()))


if __name__ == "__main__":
    main()

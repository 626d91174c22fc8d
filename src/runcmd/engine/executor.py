"""Bounded fan-out of a command group across target directories.

Each directory gets one task. A task waits on the shared ``AdmissionGate``,
then runs the whole group as a single shell script with the directory as its
working directory, so later commands see the effects of earlier ones (``cd``,
exported variables, shell functions). Child stdout and stderr are merged and
streamed line by line through the ``OutputSink``.

Failures stay inside their task: a directory that cannot be entered or a
script that exits non-zero is logged and recorded in its ``TaskOutcome``
while the other directories carry on. There is no timeout; a hung child
blocks its task (and the run) indefinitely.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import subprocess
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from .gate import AdmissionGate
from .output import OutputSink
from .types import TaskOutcome, TaskStatus

__all__ = [
    "DEFAULT_SHELL",
    "GroupRunner",
    "build_script",
    "describe_exit",
    "run",
    "run_group",
    "run_in_directory",
]

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "sh"
# Stream reader buffer limit. A line longer than this is emitted as several
# tagged chunks of roughly this size; no bytes are dropped.
STREAM_LIMIT = 1024 * 1024


def build_script(commands: Sequence[str]) -> str:
    """Join the group's commands into one newline-separated script."""
    return "\n".join(commands)


def describe_exit(return_code: int) -> str:
    if return_code < 0:
        try:
            name = signal.Signals(-return_code).name
        except ValueError:
            name = str(-return_code)
        return f"terminated by signal {name}"
    return f"exit status {return_code}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _read_chunk(stream: asyncio.StreamReader) -> tuple[bytes, bool]:
    """Return the next line and whether it was cut at the stream limit."""
    try:
        return await stream.readuntil(b"\n"), False
    except asyncio.IncompleteReadError as exc:
        return exc.partial, False
    except asyncio.LimitOverrunError as exc:
        return await stream.read(exc.consumed), True


async def _pump_output(
    stream: asyncio.StreamReader, directory: str, sink: OutputSink
) -> int:
    """Forward every line of ``stream`` to ``sink`` as soon as it arrives."""
    count = 0
    continued = False
    while True:
        raw, cut = await _read_chunk(stream)
        if not raw:
            return count
        if continued and raw == b"\n":
            continued = False
            continue
        continued = cut
        sink.line(directory, raw.decode("utf-8", errors="replace").rstrip("\r\n"))
        count += 1


async def _execute(
    directory: str,
    script: str,
    shell: str,
    sink: OutputSink,
    outcome: TaskOutcome,
) -> None:
    try:
        process = await asyncio.create_subprocess_exec(
            shell,
            "-c",
            script,
            cwd=directory,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            limit=STREAM_LIMIT,
        )
    except (OSError, ValueError, subprocess.SubprocessError) as exc:
        outcome.status = TaskStatus.START_FAILED
        outcome.error = str(exc)
        logger.warning(
            "Failed to start commands in %s: %s",
            directory,
            exc,
            extra={"directory": directory},
        )
        sink.start_failed(directory, str(exc))
        return

    logger.debug(
        "Started pid %s in %s",
        process.pid,
        directory,
        extra={"directory": directory, "pid": process.pid},
    )
    assert process.stdout is not None
    outcome.line_count = await _pump_output(process.stdout, directory, sink)
    return_code = await process.wait()
    outcome.return_code = return_code

    if return_code == 0:
        outcome.status = TaskStatus.COMPLETED
        logger.debug(
            "Commands completed in %s",
            directory,
            extra={"directory": directory, "return_code": 0},
        )
        return

    outcome.status = TaskStatus.FAILED
    outcome.error = describe_exit(return_code)
    logger.warning(
        "Commands failed in %s: %s",
        directory,
        outcome.error,
        extra={"directory": directory, "return_code": return_code},
    )
    sink.run_error(directory, outcome.error)


async def run_in_directory(
    directory: str,
    commands: Sequence[str],
    gate: AdmissionGate,
    sink: OutputSink,
    *,
    shell: str = DEFAULT_SHELL,
) -> TaskOutcome:
    """Run ``commands`` as one script inside ``directory``.

    The gate is held from the start banner to the completion banner and is
    released on every path, including a failed spawn.
    """
    outcome = TaskOutcome(directory=directory)
    script = build_script(commands)

    async with gate:
        outcome.status = TaskStatus.RUNNING
        outcome.started_at = _now_iso()
        started = time.monotonic()
        sink.start(directory)
        try:
            await _execute(directory, script, shell, sink, outcome)
        finally:
            outcome.completed_at = _now_iso()
            outcome.duration_seconds = time.monotonic() - started
            sink.finished(directory)

    return outcome


class GroupRunner:
    """Run one command group across many directories under a ceiling."""

    def __init__(
        self,
        commands: Iterable[str],
        concurrency: int,
        *,
        sink: Optional[OutputSink] = None,
        shell: str = DEFAULT_SHELL,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.commands = tuple(commands)
        self.concurrency = concurrency
        self.sink = sink or OutputSink()
        self.shell = shell
        self.gate: Optional[AdmissionGate] = None

    async def run(self, directories: Iterable[str]) -> List[TaskOutcome]:
        """Attempt every directory once; return outcomes in input order."""
        targets = [str(d) for d in directories]
        if not targets:
            return []

        self.gate = AdmissionGate(self.concurrency)
        logger.debug(
            "Dispatching %d directories with concurrency %d",
            len(targets),
            self.concurrency,
        )
        tasks = [
            asyncio.create_task(
                run_in_directory(
                    directory, self.commands, self.gate, self.sink, shell=self.shell
                )
            )
            for directory in targets
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: List[TaskOutcome] = []
        for directory, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Unexpected error in %s: %s",
                    directory,
                    result,
                    exc_info=(type(result), result, result.__traceback__),
                    extra={"directory": directory},
                )
                result = TaskOutcome(
                    directory=directory, status=TaskStatus.FAILED, error=str(result)
                )
            outcomes.append(result)
        return outcomes


async def run_group(
    commands: Iterable[str],
    directories: Iterable[str],
    concurrency: int,
    *,
    sink: Optional[OutputSink] = None,
    shell: str = DEFAULT_SHELL,
) -> List[TaskOutcome]:
    """Run ``commands`` in every directory, at most ``concurrency`` at a time."""
    runner = GroupRunner(commands, concurrency, sink=sink, shell=shell)
    return await runner.run(directories)


def run(
    commands: Iterable[str],
    directories: Iterable[str],
    concurrency: int,
    **kwargs,
) -> List[TaskOutcome]:
    """Blocking wrapper around ``run_group``."""
    return asyncio.run(run_group(commands, directories, concurrency, **kwargs))

"""Concurrent execution engine: admission gate, tagged output, task runner."""

from runcmd.engine.executor import (
    DEFAULT_SHELL,
    GroupRunner,
    build_script,
    describe_exit,
    run,
    run_group,
    run_in_directory,
)
from runcmd.engine.gate import AdmissionGate
from runcmd.engine.output import OutputSink, escape_control, make_console
from runcmd.engine.types import TaskOutcome, TaskStatus

__all__ = [
    "AdmissionGate",
    "DEFAULT_SHELL",
    "GroupRunner",
    "OutputSink",
    "TaskOutcome",
    "TaskStatus",
    "build_script",
    "describe_exit",
    "escape_control",
    "make_console",
    "run",
    "run_group",
    "run_in_directory",
]

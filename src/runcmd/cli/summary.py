"""Per-directory result summary printed with ``--summary``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from rich.console import Console
from rich.text import Text

from ..engine import TaskOutcome, TaskStatus

__all__ = ["Totals", "display_summary", "totals_from_outcomes"]


@dataclass(frozen=True)
class Totals:
    success_count: int = 0
    failed_count: int = 0
    start_failed_count: int = 0
    longest_seconds: float = 0.0

    @property
    def total_count(self) -> int:
        return self.success_count + self.failed_count + self.start_failed_count


def _fmt_duration(seconds: Optional[float]) -> str:
    if not seconds:
        return "-"
    if seconds >= 60:
        minutes = int(seconds // 60)
        sec = int(seconds % 60)
        return f"{minutes}m {sec}s"
    return f"{seconds:.1f}s"


def totals_from_outcomes(outcomes: Iterable[TaskOutcome]) -> Totals:
    success = failed = start_failed = 0
    longest = 0.0
    for outcome in outcomes:
        if outcome.status is TaskStatus.COMPLETED:
            success += 1
        elif outcome.status is TaskStatus.START_FAILED:
            start_failed += 1
        else:
            failed += 1
        longest = max(longest, outcome.duration_seconds or 0.0)
    return Totals(success, failed, start_failed, longest)


def _print_outcome(console: Console, outcome: TaskOutcome) -> None:
    line = Text("  ")
    if outcome.success:
        line.append("✓ ", style="green")
    else:
        line.append("✗ ", style="red")
    line.append(outcome.directory)
    line.append(f"  {_fmt_duration(outcome.duration_seconds)}", style="dim")
    if not outcome.success:
        label = "Failed to start" if outcome.status is TaskStatus.START_FAILED else "Failed"
        line.append(f"  {label}: {outcome.error or 'unknown error'}", style="red")
    console.print(line, soft_wrap=True)


def display_summary(console: Console, outcomes: Iterable[TaskOutcome]) -> Totals:
    # Normalize to a list so generators are not exhausted twice.
    items: List[TaskOutcome] = list(outcomes)
    console.print(Text("Summary", style="bold"))
    for outcome in items:
        _print_outcome(console, outcome)

    totals = totals_from_outcomes(items)
    console.print(
        Text(
            f"  {totals.success_count}/{totals.total_count} succeeded, "
            f"{totals.failed_count} failed, "
            f"{totals.start_failed_count} failed to start, "
            f"longest {_fmt_duration(totals.longest_seconds)}",
            style="bold",
        ),
        soft_wrap=True,
    )
    return totals

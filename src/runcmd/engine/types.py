"""Task status and outcome records shared by the engine and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = ["TaskOutcome", "TaskStatus"]


class TaskStatus(Enum):
    """Possible states for a directory task."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    START_FAILED = "start_failed"


@dataclass
class TaskOutcome:
    """Result from running the command group in one directory."""

    directory: str
    status: TaskStatus = TaskStatus.QUEUED
    return_code: Optional[int] = None
    error: Optional[str] = None
    line_count: int = 0
    started_at: Optional[str] = None  # ISO timestamp
    completed_at: Optional[str] = None  # ISO timestamp
    duration_seconds: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def terminal(self) -> bool:
        return self.status in (
            TaskStatus.COMPLETED,
            TaskStatus.FAILED,
            TaskStatus.START_FAILED,
        )

"""runcmd exception hierarchy."""

from __future__ import annotations

from typing import Iterable, List

__all__ = [
    "ConfigError",
    "GroupNotFoundError",
    "RunCmdError",
]


class RunCmdError(Exception):
    """Base class for runcmd exceptions."""


class ConfigError(RunCmdError):
    """Raised when a configuration source cannot be read or parsed."""


class GroupNotFoundError(ConfigError):
    """Raised when the requested command group is not configured."""

    def __init__(self, group: str, available: Iterable[str] = ()) -> None:
        self.group = group
        self.available: List[str] = sorted(available)
        hint = ", ".join(self.available) if self.available else "none"
        super().__init__(
            f"No commands found for group [{group}], check the configuration "
            f"(available groups: {hint})"
        )

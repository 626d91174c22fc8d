"""runcmd public API surface.

Only the entry points below are considered stable; everything else is
internal and may change.
"""

from .config import RunConfig, load_config, merge_config
from .engine import GroupRunner, TaskOutcome, TaskStatus, run, run_group
from .version import __version__

__all__ = [
    "GroupRunner",
    "RunConfig",
    "TaskOutcome",
    "TaskStatus",
    "__version__",
    "load_config",
    "merge_config",
    "run",
    "run_group",
]

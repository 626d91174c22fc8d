"""Built-in configuration shipped with runcmd."""

from __future__ import annotations

from .models import RunConfig
from .parser import parse_config_text

__all__ = ["DEFAULT_CONCURRENCY", "DEFAULT_CONFIG_TEXT", "get_default_config"]

DEFAULT_CONCURRENCY = 3

DEFAULT_CONFIG_TEXT = """\
# Built-in defaults. A config.txt in the working directory overrides
# settings key by key and groups by name.

[settings]
concurrency = 3
shell = sh

[status]
git status --short --branch

[pull]
git pull --ff-only

[fetch]
git fetch --all --prune

[log]
git log --oneline -n 5
"""


def get_default_config() -> RunConfig:
    """Return the parsed built-in configuration."""
    return parse_config_text(DEFAULT_CONFIG_TEXT)

"""Parsers for the text and YAML configuration formats.

The text format is line oriented::

    # comment
    [settings]
    concurrency = 4

    [build]
    make clean
    make all

``[settings]`` holds ``key = value`` pairs; every other section is a command
group whose lines run, in order, as one shell script.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import yaml

from ..exceptions import ConfigError
from .models import RunConfig

__all__ = ["SETTINGS_SECTION", "parse_config_text", "parse_config_yaml"]

SETTINGS_SECTION = "settings"


def parse_config_text(content: str) -> RunConfig:
    """Parse the line-oriented text format."""
    settings: Dict[str, str] = {}
    groups: Dict[str, List[str]] = {}
    section: Optional[str] = None

    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("[") and line.endswith("]"):
            section = line.strip("[]")
            if section != SETTINGS_SECTION:
                groups[section] = []
            continue

        if section == SETTINGS_SECTION:
            key, sep, value = line.partition("=")
            if sep:
                settings[key.strip()] = value.strip()
        elif section is not None:
            groups[section].append(line)

    return RunConfig.build(settings, groups)


def parse_config_yaml(content: str) -> RunConfig:
    """Parse a YAML document with ``settings`` and ``groups`` mappings."""
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("YAML configuration must be a mapping")

    settings = _mapping(data, SETTINGS_SECTION)
    groups: Dict[str, List[str]] = {}
    for name, commands in _mapping(data, "groups").items():
        if commands is None:
            groups[str(name)] = []
        elif isinstance(commands, str):
            groups[str(name)] = [line for line in commands.splitlines() if line.strip()]
        elif isinstance(commands, list):
            groups[str(name)] = [str(cmd) for cmd in commands]
        else:
            raise ConfigError(
                f"Group [{name}] must be a list of commands, got {type(commands).__name__}"
            )

    return RunConfig.build(
        {str(key): _scalar(value) for key, value in settings.items()}, groups
    )


def _mapping(data: Dict[str, Any], key: str) -> Dict[Any, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)

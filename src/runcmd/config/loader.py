"""Configuration loading and layering for runcmd."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from ..exceptions import ConfigError, GroupNotFoundError
from .defaults import DEFAULT_CONCURRENCY, get_default_config
from .models import RunConfig
from .parser import parse_config_text, parse_config_yaml

__all__ = [
    "CONFIG_ENV_VAR",
    "CONCURRENCY_ENV_VAR",
    "PROJECT_CONFIG_NAME",
    "group_names",
    "load_config",
    "load_config_file",
    "load_env_config",
    "load_global_config",
    "merge_config",
    "resolve_concurrency",
    "resolve_group",
]

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = "config.txt"
CONFIG_ENV_VAR = "RUNCMD_CONFIG"
CONCURRENCY_ENV_VAR = "RUNCMD_CONCURRENCY"
_YAML_SUFFIXES = {".yaml", ".yml"}
# Plain ASCII decimal with optional sign; no underscores or other digit sets.
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def merge_config(base: RunConfig, override: RunConfig) -> RunConfig:
    """Layer ``override`` on top of ``base`` without touching either.

    Settings are replaced key by key; a group present in ``override``
    replaces the same-named group in ``base`` wholesale.
    """
    settings: Dict[str, str] = dict(base.settings)
    settings.update(override.settings)
    groups: Dict[str, Tuple[str, ...]] = dict(base.groups)
    groups.update(override.groups)
    return RunConfig(settings=settings, groups=groups)


def load_config_file(path: Path) -> RunConfig:
    """Read and parse one configuration file."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read configuration {path}: {exc}") from exc

    if path.suffix.lower() in _YAML_SUFFIXES:
        return parse_config_yaml(content)
    return parse_config_text(content)


def load_global_config() -> Optional[RunConfig]:
    """Load user-level configuration from standard locations."""
    try:
        home = Path.home()
    except (OSError, RuntimeError):
        return None

    for candidate in (
        home / ".config" / "runcmd" / PROJECT_CONFIG_NAME,
        home / ".runcmd" / PROJECT_CONFIG_NAME,
    ):
        if candidate.is_file():
            logger.info("Using global configuration %s", candidate)
            return load_config_file(candidate)
    return None


def load_env_config(environ: Optional[Mapping[str, str]] = None) -> RunConfig:
    """Collect setting overrides from environment variables."""
    env = os.environ if environ is None else environ
    settings: Dict[str, str] = {}
    if CONCURRENCY_ENV_VAR in env:
        settings["concurrency"] = env[CONCURRENCY_ENV_VAR]
    return RunConfig.build(settings)


def _project_config_path(
    config_path: Optional[Path], cwd: Path, environ: Mapping[str, str]
) -> Tuple[Optional[Path], bool]:
    """Return the project-level file to load and whether it is mandatory."""
    if config_path is not None:
        return Path(config_path), True
    env_path = environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path), True
    candidate = cwd / PROJECT_CONFIG_NAME
    return (candidate, False) if candidate.is_file() else (None, False)


def load_config(
    config_path: Optional[Path] = None,
    *,
    cwd: Optional[Path] = None,
    use_global: bool = True,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """Resolve defaults, global file, project file and environment."""
    env = os.environ if environ is None else environ
    config = get_default_config()

    if use_global:
        global_config = load_global_config()
        if global_config is not None:
            config = merge_config(config, global_config)

    path, required = _project_config_path(config_path, cwd or Path.cwd(), env)
    if path is not None:
        if not path.is_file():
            if required:
                raise ConfigError(f"Configuration file not found: {path}")
        else:
            logger.info("Found external configuration %s, overriding defaults", path)
            config = merge_config(config, load_config_file(path))

    return merge_config(config, load_env_config(env))


def resolve_concurrency(
    settings: Mapping[str, str], default: int = DEFAULT_CONCURRENCY
) -> int:
    """Parse the ``concurrency`` setting, falling back to ``default``."""
    raw = settings.get("concurrency")
    if raw is None:
        return default
    text = str(raw).strip()
    if not _INTEGER_RE.fullmatch(text):
        logger.warning("Ignoring non-numeric concurrency %r, using %d", raw, default)
        return default
    value = int(text)
    if value <= 0:
        logger.warning("Ignoring non-positive concurrency %d, using %d", value, default)
        return default
    return value


def resolve_group(config: RunConfig, name: str) -> Tuple[str, ...]:
    """Return the command list for ``name`` or raise ``GroupNotFoundError``."""
    try:
        return config.groups[name]
    except KeyError:
        raise GroupNotFoundError(name, config.groups.keys()) from None


def group_names(config: RunConfig) -> List[str]:
    return sorted(config.groups)

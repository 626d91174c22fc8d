"""Configuration models, parsing, defaults and layering."""

from runcmd.config.defaults import (
    DEFAULT_CONCURRENCY,
    DEFAULT_CONFIG_TEXT,
    get_default_config,
)
from runcmd.config.loader import (
    CONCURRENCY_ENV_VAR,
    CONFIG_ENV_VAR,
    PROJECT_CONFIG_NAME,
    group_names,
    load_config,
    load_config_file,
    load_env_config,
    load_global_config,
    merge_config,
    resolve_concurrency,
    resolve_group,
)
from runcmd.config.models import RunConfig
from runcmd.config.parser import parse_config_text, parse_config_yaml

__all__ = [
    "CONCURRENCY_ENV_VAR",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_CONFIG_TEXT",
    "PROJECT_CONFIG_NAME",
    "RunConfig",
    "get_default_config",
    "group_names",
    "load_config",
    "load_config_file",
    "load_env_config",
    "load_global_config",
    "merge_config",
    "parse_config_text",
    "parse_config_yaml",
    "resolve_concurrency",
    "resolve_group",
]

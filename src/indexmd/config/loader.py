"""
Configuration loading.

Sources, lowest to highest precedence: schema defaults, the YAML file,
INDEXMD_* environment variables, command-line options. Each source is a
partial nested dict; they are deep-merged and validated once into
AppConfig, so a source only has to mention the keys it changes.
"""

import os
from pathlib import Path
from typing import Any, Callable

import yaml

from .schema import AppConfig

# Environment variable -> (section, key, conversion)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "INDEXMD_MODEL": ("llm", "model", str),
    "INDEXMD_API_BASE": ("llm", "api_base", str),
    "INDEXMD_LOG_LEVEL": ("logging", "level", str.lower),
    "INDEXMD_INDEX_FILE": ("indexer", "index_file_name", str),
}

# CLI option -> (section, key). Applied when the option has a truthy value.
_CLI_VALUE_OPTIONS: dict[str, tuple[str, str]] = {
    "model": ("llm", "model"),
    "api_base": ("llm", "api_base"),
    "index_file": ("indexer", "index_file_name"),
    "listing_order": ("indexer", "listing_order"),
    "follow_symlinks": ("indexer", "follow_symlinks"),
    "exclude": ("indexer", "exclude_dirs"),
    "log_level": ("logging", "level"),
    "log_file": ("logging", "file"),
}

# CLI options where False/0 is meaningful; applied unless None.
_CLI_SET_OPTIONS: dict[str, tuple[str, str]] = {
    "cache": ("llm_cache", "enabled"),
    "verbose": ("logging", "verbose"),
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, recursing into nested dicts.

    >>> deep_merge({"llm": {"model": "a", "retries": 2}}, {"llm": {"model": "b"}})
    {'llm': {'model': 'b', 'retries': 2}}
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Read the YAML file, or nothing without one.

    Raises:
        FileNotFoundError: If config_path does not exist
    """
    if not config_path:
        return {}
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for var, (section, key, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            overrides.setdefault(section, {})[key] = convert(value)
    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Merge the command-line options over an already merged config."""
    overrides: dict[str, Any] = {}
    for option, (section, key) in _CLI_VALUE_OPTIONS.items():
        value = cli_args.get(option)
        if value:
            overrides.setdefault(section, {})[key] = list(value) if isinstance(value, tuple) else value
    for option, (section, key) in _CLI_SET_OPTIONS.items():
        if cli_args.get(option) is not None:
            overrides.setdefault(section, {})[key] = cli_args[option]
    return deep_merge(config_dict, overrides)


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the validated configuration from every source.

    Raises:
        FileNotFoundError: If config_path does not exist
        ValidationError: If the merged configuration is not valid
    """
    merged = deep_merge(load_yaml_config(config_path), load_env_overrides())
    merged = apply_cli_overrides(merged, cli_args or {})
    return AppConfig(**merged)

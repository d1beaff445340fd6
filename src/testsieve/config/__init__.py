"""Configuration management for testsieve.

This module provides a configuration system with proper priority handling:

1. CLI arguments (highest priority)
2. Environment variables
3. Configuration file
4. Default values (lowest priority)

Example usage::

    from testsieve.config import get_config

    config = get_config()
    config = get_config(cli_args={"include": ["Slow"]})

    print(config.filter.include_categories)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from testsieve.config.env import (
    ENV_CONFIG_PATH,
    ENV_EXCLUDE_CATEGORIES,
    ENV_INCLUDE_CATEGORIES,
    ENV_LOG_LEVEL,
    ENV_OUTPUT_FORMAT,
    get_config_path_from_env,
    get_env_overrides,
)
from testsieve.config.loader import ConfigLoader, get_default_config_content
from testsieve.config.schema import (
    FilterSettings,
    LogLevel,
    OutputFormatConfig,
    OutputSettings,
    SieveConfig,
)

__all__ = [
    # Schema classes
    "FilterSettings",
    "LogLevel",
    "OutputFormatConfig",
    "OutputSettings",
    "SieveConfig",
    # Loader
    "ConfigLoader",
    "get_default_config_content",
    # Environment variables
    "ENV_CONFIG_PATH",
    "ENV_INCLUDE_CATEGORIES",
    "ENV_EXCLUDE_CATEGORIES",
    "ENV_OUTPUT_FORMAT",
    "ENV_LOG_LEVEL",
    "get_env_overrides",
    # Priority handling
    "ConfigPriority",
    "get_config",
    "get_config_source",
    "load_config",
    "reset_config",
]


class ConfigPriority(str, Enum):
    """Configuration source priority levels.

    Higher priority sources override lower priority ones.
    """

    DEFAULT = "default"
    CONFIG_FILE = "config_file"
    ENVIRONMENT = "environment"
    CLI = "cli"


# Global configuration cache
_config_cache: SieveConfig | None = None
_config_sources: dict[str, ConfigPriority] = {}


def _merge_configs(
    base: dict[str, Any],
    override: dict[str, Any],
    source: ConfigPriority,
) -> tuple[dict[str, Any], dict[str, ConfigPriority]]:
    """Recursively merge configuration dictionaries.

    Args:
        base: The base configuration dictionary.
        override: The overriding configuration dictionary.
        source: The priority source for the override values.

    Returns:
        A tuple of (merged_config, sources_dict) where sources_dict
        tracks which priority each key came from.
    """
    result = base.copy()
    sources: dict[str, ConfigPriority] = {}

    for key, value in override.items():
        if value is None:
            continue

        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            merged, nested_sources = _merge_configs(result[key], value, source)
            result[key] = merged
            for nested_key, nested_source in nested_sources.items():
                sources[f"{key}.{nested_key}"] = nested_source
        else:
            result[key] = value
            sources[key] = source

    return result, sources


def load_config(
    config_path: Path | str | None = None,
    cli_args: dict[str, Any] | None = None,
    use_env: bool = True,
    use_file: bool = True,
) -> SieveConfig:
    """Load configuration with proper priority handling.

    Configuration is merged in the following order (later sources override earlier):
    1. Default values
    2. Configuration file (explicit path, TESTSIEVE_CONFIG_PATH, or discovered)
    3. Environment variables
    4. CLI arguments

    Args:
        config_path: Optional explicit path to a config file.
        cli_args: Optional dictionary of CLI argument overrides.
        use_env: Whether to apply environment variable overrides.
        use_file: Whether to look for and load config files.

    Returns:
        A fully merged SieveConfig instance.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    global _config_cache, _config_sources

    sources: dict[str, ConfigPriority] = {}

    # Layer 1: Defaults
    config_dict: dict[str, Any] = SieveConfig.model_validate({}).model_dump()

    # Layer 2: Configuration file
    if use_file:
        loader = ConfigLoader()
        file_path = config_path or (get_config_path_from_env() if use_env else None) or loader.find_config_file()
        if file_path:
            file_dict = loader.load_dict(file_path)
            config_dict, file_sources = _merge_configs(
                config_dict, file_dict, ConfigPriority.CONFIG_FILE
            )
            sources.update(file_sources)

    # Layer 3: Environment variables
    if use_env:
        env_overrides = get_env_overrides()
        if env_overrides:
            config_dict, env_sources = _merge_configs(
                config_dict, env_overrides, ConfigPriority.ENVIRONMENT
            )
            sources.update(env_sources)

    # Layer 4: CLI arguments
    if cli_args:
        cli_dict = _normalize_cli_args(cli_args)
        config_dict, cli_sources = _merge_configs(config_dict, cli_dict, ConfigPriority.CLI)
        sources.update(cli_sources)

    config = SieveConfig.model_validate(config_dict)

    _config_cache = config
    _config_sources = sources

    return config


def _normalize_cli_args(cli_args: dict[str, Any]) -> dict[str, Any]:
    """Normalize CLI arguments into nested config structure.

    Args:
        cli_args: Dictionary of CLI argument names to values.

    Returns:
        Nested configuration dictionary.
    """
    result: dict[str, Any] = {
        "filter": {},
        "output": {},
    }

    mappings = {
        "include": ("filter", "include_categories"),
        "exclude": ("filter", "exclude_categories"),
        "format": ("output", "format"),
        "output": ("output", "output_path"),
        "quiet": ("output", "quiet"),
        "verbose": ("output", "verbose"),
    }

    for arg_name, value in cli_args.items():
        if value is None:
            continue

        if arg_name in mappings:
            section, key = mappings[arg_name]
            result[section][key] = value
        else:
            result[arg_name] = value

    return {k: v for k, v in result.items() if v}


def get_config(
    cli_args: dict[str, Any] | None = None,
    reload: bool = False,
) -> SieveConfig:
    """Get the current configuration, loading if necessary.

    Args:
        cli_args: Optional CLI argument overrides.
        reload: If True, force reload from all sources.

    Returns:
        The current SieveConfig instance.
    """
    if _config_cache is None or reload or cli_args:
        return load_config(cli_args=cli_args)

    return _config_cache


def get_config_source(key: str) -> ConfigPriority | None:
    """Get the priority source for a configuration key.

    Args:
        key: The configuration key (e.g., "filter.include_categories").

    Returns:
        The ConfigPriority that provided this value, or None if using default.
    """
    return _config_sources.get(key)


def reset_config() -> None:
    """Reset the configuration cache.

    Forces the next call to get_config() to reload from all sources.
    """
    global _config_cache, _config_sources
    _config_cache = None
    _config_sources = {}

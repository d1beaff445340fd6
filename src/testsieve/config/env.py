"""Environment variable mapping for testsieve configuration.

This module defines the environment variables that can be used to
configure testsieve and provides utilities for reading them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

# Environment variable names
ENV_CONFIG_PATH = "TESTSIEVE_CONFIG_PATH"
ENV_INCLUDE_CATEGORIES = "TESTSIEVE_INCLUDE_CATEGORIES"
ENV_EXCLUDE_CATEGORIES = "TESTSIEVE_EXCLUDE_CATEGORIES"
ENV_OUTPUT_FORMAT = "TESTSIEVE_OUTPUT_FORMAT"
ENV_LOG_LEVEL = "TESTSIEVE_LOG_LEVEL"
ENV_QUIET = "TESTSIEVE_QUIET"
ENV_VERBOSE = "TESTSIEVE_VERBOSE"


def _parse_bool(value: str) -> bool:
    """Parse a boolean from a string value."""
    return value.lower() in ("true", "1", "yes", "on", "enabled")


def _parse_list(value: str) -> list[str]:
    """Parse a list from a comma-separated string."""
    return [item.strip() for item in value.split(",") if item.strip()]


def get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables.

    Reads all supported environment variables and returns a dictionary
    of configuration values that can be merged with other config sources.

    Returns:
        Dictionary of configuration values from environment variables.
    """
    overrides: dict[str, Any] = {
        "filter": {},
        "output": {},
    }

    # TESTSIEVE_CONFIG_PATH is handled separately (specifies config file location)

    if ENV_INCLUDE_CATEGORIES in os.environ:
        overrides["filter"]["include_categories"] = _parse_list(os.environ[ENV_INCLUDE_CATEGORIES])

    if ENV_EXCLUDE_CATEGORIES in os.environ:
        overrides["filter"]["exclude_categories"] = _parse_list(os.environ[ENV_EXCLUDE_CATEGORIES])

    if ENV_OUTPUT_FORMAT in os.environ:
        overrides["output"]["format"] = os.environ[ENV_OUTPUT_FORMAT].lower()

    if ENV_QUIET in os.environ:
        overrides["output"]["quiet"] = _parse_bool(os.environ[ENV_QUIET])

    if ENV_VERBOSE in os.environ:
        overrides["output"]["verbose"] = _parse_bool(os.environ[ENV_VERBOSE])

    if ENV_LOG_LEVEL in os.environ:
        overrides["log_level"] = os.environ[ENV_LOG_LEVEL].lower()

    # Clean up empty sections
    return {k: v for k, v in overrides.items() if v}


def get_config_path_from_env() -> Path | None:
    """Get the config file path from environment variable.

    Returns:
        Path to config file if set and existing, None otherwise.
    """
    if ENV_CONFIG_PATH in os.environ:
        path = Path(os.environ[ENV_CONFIG_PATH])
        if path.exists():
            return path
    return None


def get_env_var_docs() -> dict[str, str]:
    """Get documentation for all environment variables.

    Returns:
        Dictionary mapping variable names to descriptions.
    """
    return {
        ENV_CONFIG_PATH: "Path to configuration file",
        ENV_INCLUDE_CATEGORIES: "Comma-separated list of categories to run",
        ENV_EXCLUDE_CATEGORIES: "Comma-separated list of categories never to run",
        ENV_OUTPUT_FORMAT: "Output format (json, table)",
        ENV_LOG_LEVEL: "Logging level (debug, info, warning, error, critical)",
        ENV_QUIET: "Suppress non-essential output (true/false)",
        ENV_VERBOSE: "Enable verbose output (true/false)",
    }

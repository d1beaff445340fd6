"""Configuration file loading and discovery.

This module handles finding and loading configuration files from various
locations and formats (YAML, TOML, JSON).
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from testsieve.core.exceptions import ConfigError

if TYPE_CHECKING:
    from testsieve.config.schema import SieveConfig

# Config file names to search for (in order of preference)
CONFIG_FILE_NAMES = [
    ".testsieve.yml",
    ".testsieve.yaml",
    ".testsieve.toml",
    "testsieve.config.json",
]

# User-level config directories
USER_CONFIG_DIRS = [
    Path.home() / ".config" / "testsieve",
]


class ConfigLoader:
    """Loads and parses configuration files.

    Handles automatic discovery of config files in project directories
    and user-level config directories. Supports YAML, TOML, and JSON
    formats.
    """

    def find_config_file(self, start_path: Path | None = None) -> Path | None:
        """Find a configuration file by searching standard locations.

        Searches in the following order:
        1. The start_path directory (or cwd if not specified)
        2. Parent directories up to the root
        3. User config directory (~/.config/testsieve)

        Args:
            start_path: Directory to start searching from.

        Returns:
            Path to the config file if found, None otherwise.
        """
        search_dirs: list[Path] = []
        current = Path(start_path).resolve() if start_path else Path.cwd()
        while current != current.parent:
            search_dirs.append(current)
            current = current.parent
        search_dirs.append(current)

        search_dirs.extend(USER_CONFIG_DIRS)

        for search_dir in search_dirs:
            if not search_dir.exists():
                continue

            for config_name in CONFIG_FILE_NAMES:
                config_path = search_dir / config_name
                if config_path.is_file():
                    return config_path

        return None

    def load(self, path: Path | str) -> SieveConfig:
        """Load configuration from a file.

        Args:
            path: Path to the configuration file.

        Returns:
            A SieveConfig instance.

        Raises:
            ConfigError: If the file cannot be loaded or parsed.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Configuration path is not a file: {path}")

        return self._parse_config(self._load_file(path), path)

    def load_dict(self, path: Path | str) -> dict[str, Any]:
        """Load a configuration file as a raw dictionary.

        Only the keys present in the file are returned, so the result can
        be layered over defaults.
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")
        data = self._load_file(path)
        # Validate eagerly so errors point at the file
        self._parse_config(data, path)
        return data

    def _load_file(self, path: Path) -> dict[str, Any]:
        """Load and parse a configuration file.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        suffix = path.suffix.lower()
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        if suffix in (".yml", ".yaml"):
            return self._load_yaml(content, path)
        elif suffix == ".toml":
            return self._load_toml(content, path)
        else:
            return self._load_json(content, path)

    def _load_yaml(self, content: str, path: Path) -> dict[str, Any]:
        """Load YAML content."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping, got: {type(data).__name__}")
        return data

    def _load_toml(self, content: str, path: Path) -> dict[str, Any]:
        """Load TOML content."""
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    def _load_json(self, content: str, path: Path) -> dict[str, Any]:
        """Load JSON content."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain an object, got: {type(data).__name__}")
        return data

    def _parse_config(self, data: dict[str, Any], path: Path) -> SieveConfig:
        """Parse configuration dictionary into SieveConfig.

        Raises:
            ConfigError: If validation fails.
        """
        from testsieve.config.schema import SieveConfig

        try:
            return SieveConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid configuration in {path}: {e}\n"
                "Run 'testsieve config validate' for details."
            ) from e

    def validate_config_file(self, path: Path | str) -> list[str]:
        """Validate a configuration file and return any errors.

        Args:
            path: Path to the config file.

        Returns:
            List of validation error messages (empty if valid).
        """
        from testsieve.config.schema import SieveConfig

        errors: list[str] = []
        path = Path(path)

        if not path.exists():
            return [f"File not found: {path}"]

        if not path.is_file():
            return [f"Not a file: {path}"]

        try:
            data = self._load_file(path)
        except ConfigError as e:
            return [str(e)]

        try:
            SieveConfig.model_validate(data)
        except ValidationError as e:
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                errors.append(f"{loc}: {error['msg']}")

        return errors


def get_default_config_content(format: str = "yaml") -> str:
    """Generate default configuration file content.

    Args:
        format: Output format ('yaml', 'toml', or 'json').

    Returns:
        Configuration file content as a string.
    """
    if format == "yaml":
        return _get_yaml_config()
    elif format == "toml":
        return _get_toml_config()
    elif format == "json":
        return _get_json_config()
    else:
        raise ValueError(f"Unknown format: {format}")


def _get_yaml_config() -> str:
    """Generate default YAML configuration."""
    return """# testsieve configuration

# Category filter settings
filter:
  # Categories to run (empty = all)
  include_categories: []

  # Categories never to run; wins over include_categories
  exclude_categories: []

# Output settings
output:
  # Output format (json, table)
  format: table

  # Path to save output (null for stdout)
  output_path: null

# Logging level (debug, info, warning, error, critical)
log_level: warning
"""


def _get_toml_config() -> str:
    """Generate default TOML configuration."""
    return """# testsieve configuration

# Logging level (debug, info, warning, error, critical)
log_level = "warning"

[filter]
# Categories to run (empty = all)
include_categories = []

# Categories never to run; wins over include_categories
exclude_categories = []

[output]
# Output format (json, table)
format = "table"
"""


def _get_json_config() -> str:
    """Generate default JSON configuration."""
    config = {
        "filter": {
            "include_categories": [],
            "exclude_categories": [],
        },
        "output": {
            "format": "table",
            "output_path": None,
        },
        "log_level": "warning",
    }

    return json.dumps(config, indent=2)

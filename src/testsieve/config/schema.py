"""Configuration schema definitions using Pydantic Settings.

This module defines all configuration models for testsieve with proper
validation, defaults, and documentation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class OutputFormatConfig(str, Enum):
    """Supported output formats for configuration."""

    JSON = "json"
    TABLE = "table"


def parse_names(v: Any) -> list[str]:
    """Parse category names from a comma-separated string or a list.

    Blank entries are dropped and duplicates removed, keeping first
    occurrences in order.
    """
    if v is None:
        return []
    if isinstance(v, str):
        v = v.split(",")
    names: list[str] = []
    for item in v:
        name = str(item).strip()
        if name and name not in names:
            names.append(name)
    return names


class FilterSettings(BaseModel):
    """Settings for the category filter.

    Names are resolved against the plan's category hierarchy when the
    filter is built.
    """

    include_categories: list[str] = Field(
        default_factory=list,
        description="Categories to run (empty = all)",
    )
    exclude_categories: list[str] = Field(
        default_factory=list,
        description="Categories never to run; wins over include_categories",
    )

    @field_validator("include_categories", "exclude_categories", mode="before")
    @classmethod
    def parse_categories(cls, v: Any) -> list[str]:
        """Parse categories from string or list."""
        return parse_names(v)


class OutputSettings(BaseModel):
    """Settings for output formatting.

    Controls how selection results are rendered and where they go.
    """

    format: OutputFormatConfig = Field(
        default=OutputFormatConfig.TABLE,
        description="Output format for selection results",
    )
    output_path: Path | None = Field(
        default=None,
        description="Path to save output file (None for stdout)",
    )
    quiet: bool = Field(
        default=False,
        description="Suppress non-essential output",
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose output",
    )

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v: Any) -> OutputFormatConfig:
        """Validate and normalize output format."""
        if v is None:
            return OutputFormatConfig.TABLE
        if isinstance(v, OutputFormatConfig):
            return v
        v = str(v).lower()
        try:
            return OutputFormatConfig(v)
        except ValueError:
            valid = ", ".join(f.value for f in OutputFormatConfig)
            raise ValueError(f"format must be one of: {valid}")


class SieveConfig(BaseSettings):
    """Main configuration for testsieve.

    Combines all settings sections into a single configuration object.
    This can be loaded from environment variables, config files, or
    constructed programmatically.
    """

    model_config = SettingsConfigDict(
        env_prefix="TESTSIEVE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    filter: FilterSettings = Field(
        default_factory=FilterSettings,
        description="Category filter settings",
    )
    output: OutputSettings = Field(
        default_factory=OutputSettings,
        description="Output settings",
    )
    log_level: LogLevel = Field(
        default=LogLevel.WARNING,
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> LogLevel:
        """Validate and normalize log level."""
        if v is None:
            return LogLevel.WARNING
        if isinstance(v, LogLevel):
            return v
        v = str(v).lower()
        try:
            return LogLevel(v)
        except ValueError:
            valid = ", ".join(level.value for level in LogLevel)
            raise ValueError(f"log_level must be one of: {valid}")

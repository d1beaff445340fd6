"""Custom exception hierarchy for testsieve.

This module defines the exception classes used throughout testsieve
for error handling and reporting. All exceptions inherit from the
base SieveError class, allowing callers to catch all testsieve
errors with a single except clause.

The category filter itself never raises; these errors come from the
collaborators that feed it (the category hierarchy, the configuration
layer and the plan loader).
"""

from __future__ import annotations


class SieveError(Exception):
    """Base exception for all testsieve errors.

    Attributes:
        message: Human-readable error message.
        context: Optional dictionary of additional context about the error.
    """

    def __init__(self, message: str, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            context: Optional dictionary of additional context about the error.
        """
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including context if present."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class CategoryError(SieveError):
    """Exception raised for unknown or conflicting category markers.

    Raised by the category hierarchy when a name cannot be resolved,
    when a parent is registered after its child, or when the declared
    hierarchy contains a cycle.

    Example:
        >>> raise CategoryError("Unknown category", category="Slow")
    """

    def __init__(self, message: str, category: str | None = None, context: dict | None = None):
        """Initialize the category error.

        Args:
            message: Human-readable error message.
            category: Name of the offending category, if applicable.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if category:
            ctx["category"] = category
        super().__init__(message, ctx)
        self.category = category


class ConfigError(SieveError):
    """Exception raised for configuration errors.

    Example:
        >>> raise ConfigError("Invalid output format", context={"format": "xml"})
    """

    def __init__(self, message: str, config_key: str | None = None, context: dict | None = None):
        """Initialize the config error.

        Args:
            message: Human-readable error message.
            config_key: The configuration key that caused the error.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if config_key:
            ctx["config_key"] = config_key
        super().__init__(message, ctx)
        self.config_key = config_key


class PlanError(SieveError):
    """Exception raised when a test plan file cannot be loaded.

    Example:
        >>> raise PlanError("Node is missing a name", plan_path="plan.yml")
    """

    def __init__(self, message: str, plan_path: str | None = None, context: dict | None = None):
        """Initialize the plan error.

        Args:
            message: Human-readable error message.
            plan_path: Path of the plan file being loaded.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if plan_path:
            ctx["plan_path"] = plan_path
        super().__init__(message, ctx)
        self.plan_path = plan_path


class OutputError(SieveError):
    """Exception raised when output generation fails.

    Example:
        >>> raise OutputError("Failed to write output file", output_path="/readonly/file")
    """

    def __init__(self, message: str, output_path: str | None = None, context: dict | None = None):
        """Initialize the output error.

        Args:
            message: Human-readable error message.
            output_path: The output path that caused the error.
            context: Optional dictionary of additional context.
        """
        ctx = context or {}
        if output_path:
            ctx["output_path"] = output_path
        super().__init__(message, ctx)
        self.output_path = output_path

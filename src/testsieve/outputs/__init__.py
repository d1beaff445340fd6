"""Output formatter classes for testsieve.

This module provides the base output interface and registry for managing
output formatters that render selection results in different formats.
"""

from abc import ABC, abstractmethod

from testsieve.core.models import SelectionResult


class BaseOutput(ABC):
    """Abstract base class for all output formatters.

    Subclasses must implement the `name` property and `format` method
    to provide specific formatting logic for different output types.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this output formatter (e.g., 'json', 'table')."""
        pass

    @abstractmethod
    def format(self, result: SelectionResult) -> str:
        """Format a selection result for output.

        Args:
            result: The SelectionResult to format.

        Returns:
            A formatted string representation of the selection result.
        """
        pass


class OutputRegistry:
    """Registry for managing and retrieving output formatter instances."""

    def __init__(self) -> None:
        """Initialize an empty output registry."""
        self._outputs: dict[str, BaseOutput] = {}

    def register(self, output: BaseOutput) -> None:
        """Register an output formatter instance.

        Raises:
            ValueError: If a formatter with the same name is already registered.
        """
        if output.name in self._outputs:
            raise ValueError(f"Output formatter '{output.name}' is already registered")
        self._outputs[output.name] = output

    def unregister(self, name: str) -> None:
        """Remove an output formatter from the registry.

        Raises:
            KeyError: If no formatter with the given name is registered.
        """
        if name not in self._outputs:
            raise KeyError(f"Output formatter '{name}' is not registered")
        del self._outputs[name]

    def get(self, name: str) -> BaseOutput:
        """Retrieve an output formatter by name.

        Raises:
            KeyError: If no formatter with the given name is registered.
        """
        if name not in self._outputs:
            raise KeyError(f"Output formatter '{name}' is not registered")
        return self._outputs[name]

    def list_names(self) -> list[str]:
        """List the names of all registered output formatters."""
        return list(self._outputs.keys())

    def __len__(self) -> int:
        return len(self._outputs)

    def __contains__(self, name: str) -> bool:
        return name in self._outputs


def _build_default_registry() -> OutputRegistry:
    from testsieve.outputs.json_output import JsonOutput
    from testsieve.outputs.table_output import TableOutput

    registry = OutputRegistry()
    registry.register(JsonOutput())
    registry.register(TableOutput())
    return registry


# Global registry instance with the built-in formatters
default_registry = _build_default_registry()

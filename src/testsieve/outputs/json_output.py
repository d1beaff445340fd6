"""JSON output formatter for testsieve."""

from testsieve.core.models import SelectionResult
from testsieve.outputs import BaseOutput


class JsonOutput(BaseOutput):
    """Output formatter that serializes SelectionResult to formatted JSON.

    Example:
        formatter = JsonOutput()
        json_str = formatter.format(selection_result)
    """

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "json"

    def format(self, result: SelectionResult) -> str:
        """Format a selection result as indented JSON."""
        return result.model_dump_json(indent=2)

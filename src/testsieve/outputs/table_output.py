"""Table output formatter for testsieve.

This module provides a table output formatter that renders selection
results as a console-friendly table using Rich.
"""

from io import StringIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from testsieve.core.models import NodeKind, SelectionResult
from testsieve.outputs import BaseOutput

INDENT = "  "


class TableOutput(BaseOutput):
    """Output formatter that renders SelectionResult as a Rich table.

    One row per node, indented by depth, showing the categories that
    apply to the node and whether it runs. Followed by the active filter
    and a summary.

    Args:
        color: Emit ANSI styling. Disabled when writing to a file.
    """

    def __init__(self, color: bool = True) -> None:
        self.color = color

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "table"

    def format(self, result: SelectionResult) -> str:
        """Format a selection result as a Rich table.

        Args:
            result: The SelectionResult to format.

        Returns:
            The rendered table and summary.
        """
        title = "Test Selection"
        if result.source:
            title += f": {escape(result.source)}"

        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Test", style="white", no_wrap=False)
        table.add_column("Kind", style="dim")
        table.add_column("Categories", style="magenta")
        table.add_column("Run", justify="center")
        table.add_column("Reason", style="dim")

        for node in result.nodes:
            style = "bold" if node.kind == NodeKind.SUITE else ""
            name = INDENT * node.depth + escape(node.name)
            decision = "[green]yes[/green]" if node.should_run else "[red]no[/red]"
            table.add_row(
                f"[{style}]{name}[/{style}]" if style else name,
                node.kind.value,
                escape(", ".join(node.categories)),
                decision,
                escape(node.reason),
            )

        string_io = StringIO()
        console = Console(
            file=string_io, force_terminal=self.color, no_color=not self.color, width=120
        )
        console.print(table)

        summary_lines = [
            "",
            "[bold]Selection Summary[/bold]",
            f"  Filter: {escape(result.filter_description)}",
            f"  Tests: {result.leaf_count}",
            f"  [green]Selected: {result.selected_count}[/green]",
            f"  [red]Skipped: {result.skipped_count}[/red]",
            f"  Duration: {result.duration:.3f}s",
        ]
        for line in summary_lines:
            console.print(line)

        return string_io.getvalue()

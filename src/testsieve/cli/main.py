"""Command-line interface for testsieve.

This module provides the Typer-based CLI for selecting tests from a
test plan by category, describing a category filter, and managing the
configuration file.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from testsieve import __version__
from testsieve.api import build_filter
from testsieve.config import get_config_source, load_config
from testsieve.config.loader import CONFIG_FILE_NAMES, ConfigLoader, get_default_config_content
from testsieve.config.schema import OutputFormatConfig, parse_names
from testsieve.core.categories import CategoryId
from testsieve.core.category_filter import CategoryFilter
from testsieve.core.exceptions import (
    CategoryError,
    ConfigError,
    OutputError,
    PlanError,
    SieveError,
)
from testsieve.core.logging import setup_logging
from testsieve.core.plan import load_plan
from testsieve.core.selector import select as select_tests
from testsieve.outputs import default_registry
from testsieve.outputs.table_output import TableOutput

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_NOTHING_SELECTED = 2

app = typer.Typer(
    name="testsieve",
    help="testsieve - Category-based test selection.",
    add_completion=False,
)
config_app = typer.Typer(help="Show, create and validate configuration files.")
app.add_typer(config_app, name="config")

console = Console()
error_console = Console(stderr=True)


def _display_error(error: Exception, title: str = "Error") -> None:
    """Display an error with rich formatting.

    Args:
        error: The exception to display.
        title: The title for the error panel.
    """
    if isinstance(error, PlanError):
        message = f"[bold red]Plan Error[/bold red]\n\n{escape(error.message)}"
        if error.plan_path:
            message += f"\n\n[dim]Plan:[/dim] {escape(error.plan_path)}"
        error_console.print(Panel(message, title="[red]Plan Error[/red]", border_style="red"))
    elif isinstance(error, ConfigError):
        message = f"[bold red]Configuration Error[/bold red]\n\n{escape(error.message)}"
        if error.config_key:
            message += f"\n\n[dim]Config key:[/dim] {escape(error.config_key)}"
        error_console.print(Panel(message, title="[red]Config Error[/red]", border_style="red"))
    elif isinstance(error, CategoryError):
        message = f"[bold red]Category Error[/bold red]\n\n{escape(error.message)}"
        if error.category:
            message += f"\n\n[dim]Category:[/dim] {escape(error.category)}"
        error_console.print(Panel(message, title="[red]Category Error[/red]", border_style="red"))
    elif isinstance(error, OutputError):
        message = f"[bold red]Output Error[/bold red]\n\n{escape(error.message)}"
        if error.output_path:
            message += f"\n\n[dim]Output path:[/dim] {escape(error.output_path)}"
        error_console.print(Panel(message, title="[red]Output Error[/red]", border_style="red"))
    elif isinstance(error, SieveError):
        message = f"[bold red]Error[/bold red]\n\n{escape(error.message)}"
        error_console.print(Panel(message, title=f"[red]{title}[/red]", border_style="red"))
    else:
        error_console.print(
            Panel(
                f"[bold red]{title}[/bold red]\n\n{escape(str(error))}",
                title="[red]Error[/red]",
                border_style="red",
            )
        )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]testsieve[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


def _names_or_none(value: Optional[str]) -> Optional[list[str]]:
    """Parse a comma-separated option, keeping None when it was not given."""
    return None if value is None else parse_names(value)


IncludeOption = Annotated[
    Optional[str],
    typer.Option(
        "--include",
        "-i",
        help="Comma-separated categories to run (default: all)",
    ),
]
ExcludeOption = Annotated[
    Optional[str],
    typer.Option(
        "--exclude",
        "-e",
        help="Comma-separated categories never to run",
    ),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to a configuration file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
]


@app.command("select")
def select_command(
    plan: Annotated[
        Path,
        typer.Argument(
            help="Test plan file (YAML, TOML or JSON)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write output to file instead of stdout",
        ),
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option(
            "--format",
            "-f",
            help="Output format (table, json)",
            case_sensitive=False,
        ),
    ] = None,
    config: ConfigOption = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every filter decision",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output",
        ),
    ] = False,
) -> None:
    """Select the tests of a plan that match the category filter.

    Exit codes:
        0: At least one test selected
        1: Error occurred
        2: No test selected
    """
    if format is not None and format.lower() not in [f.value for f in OutputFormatConfig]:
        _display_error(
            ConfigError(
                f"Invalid format '{format}'. Choose one of: {', '.join(default_registry.list_names())}.",
                config_key="format",
            )
        )
        raise typer.Exit(code=EXIT_ERROR)

    try:
        settings = load_config(
            config_path=config,
            cli_args={
                "include": _names_or_none(include),
                "exclude": _names_or_none(exclude),
                "format": format.lower() if format else None,
                "output": output,
            },
        )
        test_plan = load_plan(plan)
        category_filter = build_filter(settings, test_plan.hierarchy, test_plan.extractor)
    except SieveError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None
    except ValueError as e:
        # pydantic validation errors from merged config layers
        _display_error(ConfigError(str(e)))
        raise typer.Exit(code=EXIT_ERROR) from None

    quiet = quiet or settings.output.quiet
    verbose = verbose or settings.output.verbose
    if not quiet:
        setup_logging(verbose=verbose, level=settings.log_level.value)

    if verbose and not quiet:
        console.print(f"[dim]Plan:[/dim] {escape(str(plan))}")
        console.print(f"[dim]Filter:[/dim] {escape(category_filter.describe())}")

    result = select_tests(test_plan.tree, category_filter, source=test_plan.source)

    formatter = default_registry.get(settings.output.format.value)
    output_path = settings.output.output_path
    if output_path and isinstance(formatter, TableOutput):
        # Files get plain text, not terminal escape codes
        formatter = TableOutput(color=False)
    try:
        formatted_output = formatter.format(result)
    except Exception as e:
        _display_error(OutputError(f"Failed to format output: {e}"))
        raise typer.Exit(code=EXIT_ERROR) from None

    if output_path:
        try:
            Path(output_path).write_text(formatted_output)
            if not quiet:
                console.print(f"[green]Output written to:[/green] {escape(str(output_path))}")
        except OSError as e:
            _display_error(OutputError(f"Failed to write output file: {e}", output_path=str(output_path)))
            raise typer.Exit(code=EXIT_ERROR) from None
    elif not quiet:
        # JSON bypasses Rich so it is never wrapped or re-styled
        if settings.output.format == OutputFormatConfig.JSON:
            print(formatted_output)
        else:
            console.print(formatted_output, markup=False, highlight=False)

    if result.selected_count == 0:
        raise typer.Exit(code=EXIT_NOTHING_SELECTED)

    raise typer.Exit(code=EXIT_SUCCESS)


@app.command()
def describe(
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    config: ConfigOption = None,
) -> None:
    """Print the description of a category filter.

    Names are taken as given; they are not checked against any hierarchy.
    """
    try:
        settings = load_config(
            config_path=config,
            cli_args={"include": _names_or_none(include), "exclude": _names_or_none(exclude)},
        )
    except SieveError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None
    except ValueError as e:
        _display_error(ConfigError(str(e)))
        raise typer.Exit(code=EXIT_ERROR) from None

    category_filter = CategoryFilter(
        included=[CategoryId(name) for name in settings.filter.include_categories],
        excluded=[CategoryId(name) for name in settings.filter.exclude_categories],
    )
    typer.echo(category_filter.describe())


@config_app.command("show")
def config_show(config: ConfigOption = None) -> None:
    """Show the effective configuration and where each value came from."""
    try:
        settings = load_config(config_path=config)
    except SieveError as e:
        _display_error(e)
        raise typer.Exit(code=EXIT_ERROR) from None
    except ValueError as e:
        _display_error(ConfigError(str(e)))
        raise typer.Exit(code=EXIT_ERROR) from None

    data = settings.model_dump(mode="json")
    print(json.dumps(data, indent=2))

    overridden = []
    for section, values in data.items():
        keys = [f"{section}.{key}" for key in values] if isinstance(values, dict) else [section]
        for key in keys:
            source = get_config_source(key)
            if source is not None:
                overridden.append(f"{key} ({source.value})")
    if overridden:
        console.print(f"[dim]Overridden:[/dim] {escape(', '.join(overridden))}")


@config_app.command("init")
def config_init(
    path: Annotated[
        Optional[Path],
        typer.Argument(help="Directory or file to write (default: current directory)"),
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="File format (yaml, toml, json)", case_sensitive=False),
    ] = "yaml",
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """Write a default configuration file."""
    format_lower = format.lower()
    file_names = {
        "yaml": CONFIG_FILE_NAMES[0],
        "toml": ".testsieve.toml",
        "json": "testsieve.config.json",
    }
    if format_lower not in file_names:
        _display_error(ConfigError(f"Invalid format '{format}'. Choose yaml, toml or json.", config_key="format"))
        raise typer.Exit(code=EXIT_ERROR)

    target = path or Path.cwd()
    if target.is_dir():
        target = target / file_names[format_lower]

    if target.exists() and not force:
        _display_error(ConfigError(f"{target} already exists. Use --force to overwrite."))
        raise typer.Exit(code=EXIT_ERROR)

    try:
        target.write_text(get_default_config_content(format_lower))
    except OSError as e:
        _display_error(OutputError(f"Failed to write config file: {e}", output_path=str(target)))
        raise typer.Exit(code=EXIT_ERROR) from None

    console.print(f"[green]Configuration written to:[/green] {escape(str(target))}")


@config_app.command("validate")
def config_validate(
    path: Annotated[Path, typer.Argument(help="Configuration file to validate")],
) -> None:
    """Validate a configuration file."""
    errors = ConfigLoader().validate_config_file(path)
    if errors:
        for error in errors:
            error_console.print(f"[red]✗[/red] {escape(error)}")
        raise typer.Exit(code=EXIT_ERROR)

    console.print(f"[green]✓[/green] {escape(str(path))} is valid")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """testsieve - Category-based test selection.

    Use 'testsieve select <plan>' to pick the tests matching a category filter.
    """
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run_cli() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    app()

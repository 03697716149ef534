"""campaignflow CLI - Typer-based command line interface."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from campaignflow.cli.commands import (
    export_command,
    form_command,
    schema_command,
    stats_command,
    validate_command,
)
from campaignflow.cli.utils import CLIContext
from campaignflow.constants import DEFAULT_LOG_LEVEL, ENV_LOG_LEVEL, LOG_LEVELS, get_env_str

# Create main app and console
app = typer.Typer(
    name="campaignflow",
    help="campaignflow: schema-driven validation and export of campaign metadata",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    level = (get_env_str(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
    if level not in LOG_LEVELS:
        level = DEFAULT_LOG_LEVEL
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose output")
    ] = False,
    schema: Annotated[
        Path | None,
        typer.Option("--schema", help="Schema document to use instead of the bundled one"),
    ] = None,
):
    """
    campaignflow CLI callback - sets up context for all commands.

    This callback initializes the CLIContext object that is shared across all commands.
    Commands can access the context via ctx.obj, which provides:
    - Engine loading from the configured schema
    - Document loading and error reporting
    - Console output management
    - Verbose mode control
    """
    _configure_logging(verbose)
    ctx.obj = CLIContext(console=console, verbose=verbose, schema_path=schema)


app.command(name="validate")(validate_command)
app.command(name="export")(export_command)
app.command(name="form")(form_command)
app.command(name="schema")(schema_command)
app.command(name="stats")(stats_command)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""CLI utilities package.

This package provides utilities for CLI commands including:
- CLIContext: Context management for commands
- CliPrinter: Report, form and export formatting
- Decorators: Error handling decorators
- Helper functions: File writing
"""

from pathlib import Path

import typer

from campaignflow.cli.utils.context import CLIContext
from campaignflow.cli.utils.decorators import handle_cli_errors
from campaignflow.cli.utils.printer import CliPrinter

__all__ = [
    "CLIContext",
    "CliPrinter",
    "handle_cli_errors",
    "safe_write_file",
]


def safe_write_file(file_path: Path, content: str) -> None:
    """Safely write content to file with error handling.

    Raises:
        typer.BadParameter: If writing fails
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    except PermissionError as e:
        raise typer.BadParameter(f"Permission denied writing to {file_path}") from e
    except OSError as e:
        raise typer.BadParameter(f"Failed to write to {file_path}: {e}") from e

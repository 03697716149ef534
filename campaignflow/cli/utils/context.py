"""
CLI Context for campaignflow.

Provides centralized engine and document loading for all CLI commands.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from campaignflow.cli.utils.printer import CliPrinter
from campaignflow.common.exceptions import CampaignFlowError
from campaignflow.config import EngineConfig
from campaignflow.engine import CampaignEngine
from campaignflow.loader import read_document


@dataclass
class CLIContext:
    """
    Context object for CLI commands.

    This context is created once and passed to all commands via Typer's
    context injection. It centralizes:
    - Engine construction from the configured schema and standard
    - Document loading from JSON or YAML files
    - Console output management
    - Verbose mode control
    - JSON mode control (suppresses all non-JSON output)

    Attributes:
        console: Rich console for output
        verbose: Enable verbose output (ignored when json_mode is True)
        schema_path: Schema document overriding the configured one
        printer: CLI printer for formatted output
        json_mode: When True, suppress all non-JSON output (set by commands)
    """

    console: Console
    verbose: bool = False
    schema_path: Path | None = None
    printer: CliPrinter = field(init=False)
    json_mode: bool = False
    _engine: CampaignEngine | None = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Initialize printer."""
        self.printer = CliPrinter(console=self.console, verbose=self.verbose)

    def set_json_mode(self, json_mode: bool) -> None:
        self.json_mode = json_mode
        self.printer.json_mode = json_mode

    def print_verbose(self, message: str, **kwargs) -> None:
        """Print a message only if verbose mode is enabled and not in JSON mode."""
        if self.verbose and not self.json_mode:
            self.console.print(message, **kwargs)

    def print_error(self, message: str) -> None:
        """Print an error message, as JSON in JSON mode."""
        if self.json_mode:
            self.printer.print_json({"error": message})
        else:
            self.printer.print_error(message)

    def load_engine_or_exit(self) -> CampaignEngine:
        """
        Build the engine and exit on failure.

        Raises:
            typer.Exit: If the schema or standard definition cannot be loaded
        """
        if self._engine is not None:
            return self._engine

        try:
            config = EngineConfig.from_env()
            if self.schema_path is not None:
                config = replace(config, schema_path=self.schema_path)
            self.print_verbose(
                f"[dim]Loading schema from: {config.schema_path or 'bundled schema'}[/dim]"
            )
            self._engine = CampaignEngine.from_config(config)
        except CampaignFlowError as e:
            self.print_error(f"Failed to load engine: {e}")
            raise typer.Exit(code=1) from e

        self.print_verbose("[green]✓ Engine loaded[/green]")
        return self._engine

    def load_document_or_exit(self, path: Path) -> Any:
        """
        Read a campaign document and exit on failure.

        Raises:
            typer.Exit: If the document cannot be read or parsed
        """
        self.print_verbose(f"[dim]Loading document from {path}[/dim]")
        try:
            return read_document(path)
        except CampaignFlowError as e:
            self.print_error(str(e))
            raise typer.Exit(code=1) from e

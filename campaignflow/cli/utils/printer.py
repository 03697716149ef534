"""CLI Printer for consistent output formatting."""

from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from campaignflow.export import ExportResult, ExportStatistics
from campaignflow.form import FormModel
from campaignflow.models import (
    Severity,
    StepReport,
    StepStatus,
    ValidationIssue,
    ValidationReport,
)
from campaignflow.models.nodes import SchemaNode

STATUS_STYLES = {
    StepStatus.READY: "green",
    StepStatus.INCOMPLETE: "yellow",
    StepStatus.BLOCKED: "red",
}


class CliPrinter:
    """Centralized printer for CLI output.

    This class handles all printing operations for the CLI, ensuring consistent
    formatting across commands and proper handling of verbose/JSON modes.
    """

    def __init__(self, console: Console, verbose: bool = False, json_mode: bool = False):
        """Initialize printer with console and mode settings.

        Args:
            console: Rich console for output
            verbose: Whether to show detailed output
            json_mode: Whether to output in JSON format (can be set later)
        """
        self.console = console
        self.verbose = verbose
        self.json_mode = json_mode

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def print_report(self, report: ValidationReport, source: str = "") -> None:
        """Print a document validation report."""
        if self.json_mode:
            self.print_json(report.to_dict())
            return

        if source:
            self.console.print(f"[bold]Document:[/bold] {escape(source)}")
        for step in report.steps.values():
            self._print_step_line(step)
        self.console.print()

        if report.valid and not report.warnings:
            self.show_success("Document is valid")
            return
        self.print_issues(report.errors, "Errors")
        self.print_issues(report.warnings, "Warnings")
        if report.valid:
            self.show_success(f"Document is valid ({len(report.warnings)} warning(s))")
        else:
            self.console.print(f"[red]✗ {len(report.errors)} error(s)[/red]")

    def print_step_report(self, report: StepReport) -> None:
        """Print the report of a single step."""
        if self.json_mode:
            self.print_json(report.to_dict())
            return

        self._print_step_line(report)
        self.print_issues(report.errors, "Errors")
        self.print_issues(report.warnings, "Warnings")

    def _print_step_line(self, report: StepReport) -> None:
        style = STATUS_STYLES[report.status]
        counts = f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
        self.console.print(
            f"  [{style}]● {report.step}[/{style}]: {report.status.value} [dim]({counts})[/dim]"
        )

    def print_issues(self, issues: Iterable[ValidationIssue], title: str) -> None:
        """Print issues as a table with the data path of each."""
        issues = list(issues)
        if not issues:
            return

        style = "red" if issues[0].severity == Severity.ERROR else "yellow"
        table = Table(title=f"{title} ({len(issues)})", title_style=f"bold {style}")
        table.add_column("Path", style="cyan", no_wrap=True)
        table.add_column("Rule")
        table.add_column("Message")
        if self.verbose:
            table.add_column("Suggested fix", style="dim")

        for issue in issues:
            row = [escape(issue.data_path or "<root>"), issue.rule, escape(issue.message)]
            if self.verbose:
                row.append(escape(issue.suggested_fix or ""))
            table.add_row(*row)
        self.console.print(table)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def print_export_result(self, result: ExportResult) -> None:
        """Print an export outcome; blocked exports list every blocking issue."""
        if self.json_mode:
            self.print_json(result.to_dict())
            return

        if result.removed_fields:
            self.console.print(
                f"[dim]Removed {len(result.removed_fields)} helper field(s)[/dim]"
            )
            if self.verbose:
                for path in result.removed_fields:
                    self.console.print(f"[dim]  - {escape(path)}[/dim]")

        if result.can_export:
            self.print_issues(result.warnings, "Warnings")
            self.show_success("Ready for export")
        else:
            self.console.print(
                f"[red]✗ Export blocked by {len(result.blocking_issues)} issue(s)[/red]"
            )
            self.print_issues(result.blocking_issues, "Blocking issues")
            self.print_issues(result.warnings, "Warnings")

    def print_statistics(self, statistics: ExportStatistics) -> None:
        if self.json_mode:
            self.print_json(statistics.to_dict())
            return

        table = Table(title="Campaign statistics", show_header=False)
        table.add_column("Figure", style="bold")
        table.add_column("Value")
        table.add_row("Locations", str(statistics.total_locations))
        table.add_row("Measurement points", str(statistics.total_measurement_points))
        for station_type, count in statistics.station_types.items():
            table.add_row(f"  {station_type}", str(count))
        table.add_row("Data completeness", f"{statistics.data_completeness}%")
        table.add_row(
            "Required fields",
            "[green]complete[/green]" if statistics.required_fields_complete else "[red]incomplete[/red]",
        )
        self.console.print(table)

    # ------------------------------------------------------------------
    # Forms and schema
    # ------------------------------------------------------------------

    def print_form_model(self, model: FormModel) -> None:
        if self.json_mode:
            self.print_json(model.to_dict())
            return

        table = Table(title=f"Step: {model.step} ({len(model.fields)} field(s))")
        table.add_column("Path", style="cyan")
        table.add_column("Kind")
        table.add_column("Required")
        table.add_column("Options", style="dim")
        for descriptor in model.fields:
            required = "yes" if descriptor.required else ""
            if descriptor.disabled:
                required = f"{required} (read-only)".strip()
            table.add_row(
                escape(descriptor.data_path),
                descriptor.kind.value,
                required,
                escape(", ".join(descriptor.options)),
            )
        self.console.print(table)

    def print_node(self, node: SchemaNode, enum_values: list[str], required: bool) -> None:
        """Print a schema node with its constraints and enum values."""
        info: dict[str, Any] = {
            "path": node.path,
            "kind": node.kind.value,
            "types": list(node.types),
            "required": required,
            "title": node.title,
            "description": node.description,
            "constraints": node.constraints(),
            "enum": enum_values,
        }
        if self.json_mode:
            self.print_json(info)
            return

        self.console.print(f"[bold cyan]{escape(node.path)}[/bold cyan] ({node.kind.value})")
        if node.title:
            self.console.print(f"  Title: {escape(node.title)}")
        if node.description:
            self.console.print(f"  Description: {escape(node.description)}")
        if node.types:
            self.console.print(f"  Types: {', '.join(node.types)}")
        self.console.print(f"  Required: {'yes' if required else 'no'}")
        for keyword, value in node.constraints().items():
            if keyword != "enum":
                self.console.print(f"  {keyword}: {escape(str(value))}")
        if enum_values:
            self.console.print("  Values:")
            for value in enum_values:
                self.console.print(f"    - {escape(value)}")

    # ------------------------------------------------------------------
    # Basics
    # ------------------------------------------------------------------

    def show_progress(self, message: str) -> None:
        if self.verbose and not self.json_mode:
            self.console.print(f"[dim]… {message}[/dim]")

    def show_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_json(self, data: Any) -> None:
        self.console.print_json(data=data, default=str)

    def print(self, message: str, **kwargs) -> None:
        self.console.print(message, **kwargs)

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗ Error:[/red] {escape(message)}")

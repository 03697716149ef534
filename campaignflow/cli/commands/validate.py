"""Validate command for checking campaign documents against the schema."""

from pathlib import Path
from typing import Annotated

import typer

from campaignflow.cli.utils import handle_cli_errors


@handle_cli_errors("Validation failed")
def validate_command(
    ctx: typer.Context,
    document: Annotated[Path, typer.Argument(help="Campaign document (JSON/YAML)")],
    step: Annotated[
        str | None,
        typer.Option("--step", "-s", help="Validate a single step instead of the whole document"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output in JSON format")] = False,
):
    """
    Validate a campaign document.

    Exits with code 1 when the document (or the selected step) has errors.
    Warnings never change the exit code.

    Examples:

        campaignflow validate campaign.json

        campaignflow validate campaign.yaml --step basic_info --json
    """
    cli_ctx = ctx.obj
    cli_ctx.set_json_mode(json_output)

    engine = cli_ctx.load_engine_or_exit()
    data = cli_ctx.load_document_or_exit(document)

    if step is not None:
        cli_ctx.printer.show_progress(f"Validating step '{step}'...")
        step_report = engine.validate_step(data, step)
        cli_ctx.printer.print_step_report(step_report)
        valid = step_report.valid
    else:
        cli_ctx.printer.show_progress("Validating document...")
        report = engine.validate_all(data)
        cli_ctx.printer.print_report(report, source=str(document))
        valid = report.valid

    if not valid:
        raise typer.Exit(code=1)

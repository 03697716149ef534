"""Export command for producing a cleaned campaign document."""

from pathlib import Path
from typing import Annotated

import typer

from campaignflow.cli.utils import handle_cli_errors, safe_write_file


@handle_cli_errors("Export failed")
def export_command(
    ctx: typer.Context,
    document: Annotated[Path, typer.Argument(help="Campaign document (JSON/YAML)")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the cleaned document to this file"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output the export report as JSON")] = False,
):
    """
    Strip helper fields, validate and export a campaign document.

    Without --output the cleaned document is printed to stdout. A blocked
    export prints every blocking issue with its data path and exits with
    code 1.

    Examples:

        campaignflow export campaign.json -o export.json

        campaignflow export campaign.json --json
    """
    cli_ctx = ctx.obj
    cli_ctx.set_json_mode(json_output)

    engine = cli_ctx.load_engine_or_exit()
    data = cli_ctx.load_document_or_exit(document)

    cli_ctx.printer.show_progress("Preparing export...")
    result = engine.prepare_export(data)

    if not result.can_export:
        cli_ctx.printer.print_export_result(result)
        raise typer.Exit(code=1)

    if output is not None:
        safe_write_file(output, result.to_json())
        cli_ctx.printer.print_export_result(result)
        if not json_output:
            cli_ctx.printer.show_success(f"Export written to {output}")
    elif json_output:
        cli_ctx.printer.print_json({**result.to_dict(), "document": result.cleaned})
    else:
        typer.echo(result.to_json())

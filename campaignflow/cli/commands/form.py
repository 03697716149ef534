"""Form command for showing the fields of a data entry step."""

from pathlib import Path
from typing import Annotated

import typer

from campaignflow.cli.utils import handle_cli_errors


@handle_cli_errors("Failed to build form")
def form_command(
    ctx: typer.Context,
    step: Annotated[str, typer.Argument(help="Step name (e.g. basic_info)")],
    document: Annotated[Path, typer.Argument(help="Campaign document (JSON/YAML)")],
    json_output: Annotated[bool, typer.Option("--json", help="Output in JSON format")] = False,
):
    """
    Show the fields a step currently presents for a document.

    Fields hidden by the station type are left out.
    """
    cli_ctx = ctx.obj
    cli_ctx.set_json_mode(json_output)

    engine = cli_ctx.load_engine_or_exit()
    data = cli_ctx.load_document_or_exit(document)
    cli_ctx.printer.print_form_model(engine.build_form_model(step, data))

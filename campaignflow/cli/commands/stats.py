"""Stats command for summarizing a campaign document."""

from pathlib import Path
from typing import Annotated

import typer

from campaignflow.cli.utils import handle_cli_errors


@handle_cli_errors("Failed to compute statistics")
def stats_command(
    ctx: typer.Context,
    document: Annotated[Path, typer.Argument(help="Campaign document (JSON/YAML)")],
    json_output: Annotated[bool, typer.Option("--json", help="Output in JSON format")] = False,
):
    """Count locations, measurement points and station types of a document."""
    cli_ctx = ctx.obj
    cli_ctx.set_json_mode(json_output)

    engine = cli_ctx.load_engine_or_exit()
    data = cli_ctx.load_document_or_exit(document)
    cli_ctx.printer.print_statistics(engine.export_statistics(data))

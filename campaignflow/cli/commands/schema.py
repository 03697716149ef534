"""Schema command for inspecting schema nodes."""

from typing import Annotated

import typer

from campaignflow.cli.utils import handle_cli_errors


@handle_cli_errors("Schema lookup failed")
def schema_command(
    ctx: typer.Context,
    path: Annotated[
        str,
        typer.Argument(help="Schema or data path (e.g. measurement_location[0].measurement_station_type_id)"),
    ],
    json_output: Annotated[bool, typer.Option("--json", help="Output in JSON format")] = False,
):
    """Show a schema node, its constraints and its enum values."""
    cli_ctx = ctx.obj
    cli_ctx.set_json_mode(json_output)

    engine = cli_ctx.load_engine_or_exit()
    node = engine.get_schema_property(path)
    cli_ctx.printer.print_node(
        node,
        engine.get_enum_values(node.path),
        engine.repository.is_required(node.path),
    )

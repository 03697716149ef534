"""CLI commands module for campaignflow."""

from campaignflow.cli.commands.export import export_command
from campaignflow.cli.commands.form import form_command
from campaignflow.cli.commands.schema import schema_command
from campaignflow.cli.commands.stats import stats_command
from campaignflow.cli.commands.validate import validate_command

__all__ = [
    "export_command",
    "form_command",
    "schema_command",
    "stats_command",
    "validate_command",
]

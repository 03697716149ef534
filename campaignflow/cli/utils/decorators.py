"""Decorators for CLI error handling and consistent output formatting."""

from collections.abc import Callable
from functools import wraps

import typer

from campaignflow.common.exceptions import CampaignFlowError


def handle_cli_errors(error_message: str) -> Callable:
    """Decorator to handle engine errors with consistent formatting.

    Catches ``CampaignFlowError`` raised by a command, prints it according to
    the context's json_mode and exits with code 1.

    Args:
        error_message: Base error message template (can include {error} placeholder)

    Example:
        ```python
        @handle_cli_errors("Failed to build form")
        def form_command(ctx: typer.Context, ...):
            model = engine.build_form_model(step, data)
        ```
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            ctx = args[0] if args else kwargs.get("ctx")
            try:
                return func(*args, **kwargs)
            except CampaignFlowError as e:
                if "{error}" in error_message:
                    formatted_message = error_message.format(error=e)
                else:
                    formatted_message = f"{error_message}: {e}"

                cli_ctx = getattr(ctx, "obj", None)
                if cli_ctx is None:
                    raise
                cli_ctx.print_error(formatted_message)
                raise typer.Exit(1) from e

        return wrapper

    return decorator

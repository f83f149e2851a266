"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from devinit.core.errors import ErrorCode
from devinit.core.result import Err, Result
from devinit.output.console import Style

if TYPE_CHECKING:
    from devinit.cli.context import CLIContext


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.COMMAND_ERROR,
) -> None:
    """Print the error and exit if ``result`` is Err, otherwise return.

    Expects error objects to have a 'message' and an optional 'hint'.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)

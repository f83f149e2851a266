from __future__ import annotations

import os
from pathlib import Path

import typer

from devinit import __version__
from devinit.cli.commands.check import check
from devinit.cli.commands.init import init
from devinit.core.errors import ErrorCode
from devinit.core.project import PROJECT_ROOT_ENV


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(init)
app.command()(check)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root holding the warden .env (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if project is not None:
        root = project.expanduser().resolve()
        if not (root / ".env").is_file():
            typer.echo(
                f"error: --project '{root}' is not a warden project (missing .env)",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[PROJECT_ROOT_ENV] = str(root)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def main() -> None:
    app()

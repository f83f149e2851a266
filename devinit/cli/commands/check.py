from __future__ import annotations

from pathlib import Path

import typer

from devinit.cli.context import CLIContext, build_context
from devinit.core.errors import ErrorCode
from devinit.output.console import Style
from devinit.services.bootstrap import BootstrapService, InitOptions
from devinit.services.checkers import CheckResult, CheckStatus


def check(
    clean_install: bool = typer.Option(
        False, "--clean-install", help="Check the files a clean install needs"
    ),
    skip_db_import: bool = typer.Option(
        False, "--skip-db-import", help="Do not require the database dump"
    ),
    db_dump: Path | None = typer.Option(
        None,
        "--db-dump",
        help="Path to the .sql.gz file to check for",
        dir_okay=False,
    ),
) -> None:
    """Check host tools and project files without changing anything."""
    ctx = build_context()

    service = BootstrapService(
        project=ctx.project,
        env=ctx.env,
        platform=ctx.platform,
        console=ctx.console,
    )
    options = InitOptions(
        clean_install=clean_install,
        skip_db_import=skip_db_import,
        db_dump=db_dump.expanduser().resolve() if db_dump is not None else None,
    )
    plan = service.plan(options)
    report = service.verify(plan, fix=False)

    ctx.console.print(f"project: {ctx.project.root}", Style.DIM)
    ctx.console.print(f"platform: {ctx.platform}", Style.DIM)
    mode = "clean install" if plan.clean_install else "update"
    if plan.db_import:
        mode += f", import {ctx.project.display(plan.db_dump)}"
    ctx.console.print(f"mode: {mode}", Style.DIM)

    _print_group(ctx, "Host", report.host)
    _print_group(ctx, "Project files", report.files)

    if report.has_errors():
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))


def _print_group(ctx: CLIContext, title: str, results: list[CheckResult]) -> None:
    console = ctx.console
    console.header(title)
    for r in results:
        console.print(f"{r.name}: {r.message}", _style_for_status(r.status))
        if r.hint and r.status != CheckStatus.OK:
            console.print(f"hint: {r.hint}", Style.DIM)


def _style_for_status(status: CheckStatus) -> Style:
    if status == CheckStatus.OK:
        return Style.SUCCESS
    if status == CheckStatus.WARNING:
        return Style.WARNING
    return Style.ERROR

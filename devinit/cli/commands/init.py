from __future__ import annotations

from pathlib import Path

import typer

from devinit.cli.commands._helpers import exit_on_error, exit_with_code
from devinit.cli.context import build_context
from devinit.core.errors import ErrorCode
from devinit.core.result import Err
from devinit.core.versions import is_valid_meta_version
from devinit.services.bootstrap import (
    DEFAULT_ADMIN_USER,
    BootstrapError,
    BootstrapService,
    InitOptions,
)
from devinit.services.magento import DEFAULT_META_PACKAGE

_EXIT_CODES: dict[str, ErrorCode] = {
    "verify_failed": ErrorCode.ENV_ERROR,
    "command_failed": ErrorCode.COMMAND_ERROR,
    "dump_unreadable": ErrorCode.IO_ERROR,
}


def init(
    clean_install: bool = typer.Option(
        False,
        "--clean-install",
        help="Install from scratch rather than use an existing database dump; "
        "implied when no composer.json file is present in the web root",
    ),
    meta_package: str = typer.Option(
        DEFAULT_META_PACKAGE,
        "--meta-package",
        help="Passed to 'composer create-project' when --clean-install is specified",
    ),
    meta_version: str | None = typer.Option(
        None,
        "--meta-version",
        help="Alternate version to install; defaults to latest; "
        "may be given as 2.3.x (latest minor) or 2.3.4",
    ),
    skip_db_import: bool = typer.Option(
        False,
        "--skip-db-import",
        help="Skip the database import (assume it has already been imported)",
    ),
    db_dump: Path | None = typer.Option(
        None,
        "--db-dump",
        help="Path to the .sql.gz file to import",
        dir_okay=False,
    ),
    admin_user: str = typer.Option(
        DEFAULT_ADMIN_USER, "--admin-user", help="Admin account to create"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done"),
) -> None:
    """Initialize the local environment.

    Verifies host tools and local files, starts warden, installs or imports
    the application and creates an admin user.
    """
    ctx = build_context()

    if meta_version is not None and not is_valid_meta_version(meta_version):
        ctx.console.error(
            f"Invalid --meta-version={meta_version} specified "
            "(valid values are 2.3.4 or later and 2.[3-9].x)"
        )
        exit_with_code(int(ErrorCode.USER_ERROR))

    options = InitOptions(
        clean_install=clean_install,
        meta_package=meta_package,
        meta_version=meta_version,
        skip_db_import=skip_db_import,
        db_dump=db_dump.expanduser().resolve() if db_dump is not None else None,
        admin_user=admin_user,
        dry_run=dry_run,
    )

    service = BootstrapService(
        project=ctx.project,
        env=ctx.env,
        platform=ctx.platform,
        console=ctx.console,
    )
    result = service.run(options)
    if isinstance(result, Err):
        exit_on_error(result, ctx, error_code=_exit_code(result.error))


def _exit_code(error: BootstrapError) -> ErrorCode:
    return _EXIT_CODES.get(error.kind, ErrorCode.COMMAND_ERROR)

"""Environment initialization: plan, verify, then drive warden and the application.

The run is a straight sequence of steps. The first failing command ends it
(the image pull is the one tolerated failure); nothing is rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from devinit.core.config import EnvConfig
from devinit.core.project import Project
from devinit.core.result import Err, Ok, Result
from devinit.core.versions import WARDEN_SYNC_AUTOSTART_VERSION, version_at_least
from devinit.output.console import ConsoleProtocol, Style, step_title
from devinit.platform.detection import PlatformInfo
from devinit.platform.process import ProcessError
from devinit.services.checkers.common import CommandRunner
from devinit.services.magento import (
    DEFAULT_META_PACKAGE,
    AdminAccount,
    DumpError,
    MagentoCli,
    generate_password,
)
from devinit.services.verify import VerifyReport, VerifyService
from devinit.services.warden import WardenCli

__all__ = [
    "DEFAULT_ADMIN_USER",
    "BootstrapError",
    "BootstrapService",
    "InitOptions",
    "InitPlan",
    "InstallInfo",
    "plan_init",
]

DEFAULT_ADMIN_USER = "localadmin"


@dataclass(frozen=True, slots=True)
class BootstrapError:
    kind: Literal["verify_failed", "command_failed", "dump_unreadable"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class InitOptions:
    """What the developer asked for on the command line.

    Attributes:
        clean_install: Install from scratch instead of importing a dump
        meta_package: Composer package used for a clean install
        meta_version: Version constraint for the meta-package (latest if None)
        skip_db_import: Assume the database has already been imported
        db_dump: Dump to import (defaults to DB_DUMP from the environment)
        admin_user: Admin account created at the end
        dry_run: Print commands without running them
    """

    clean_install: bool = False
    meta_package: str = DEFAULT_META_PACKAGE
    meta_version: str | None = None
    skip_db_import: bool = False
    db_dump: Path | None = None
    admin_user: str = DEFAULT_ADMIN_USER
    dry_run: bool = False


def _empty_paths() -> list[Path]:
    return []


@dataclass(frozen=True, slots=True)
class InitPlan:
    """Resolved install mode and the files it depends on."""

    clean_install: bool
    db_import: bool
    db_dump: Path
    implied_clean_install: bool = False
    required_files: list[Path] = field(default_factory=_empty_paths)


@dataclass(frozen=True, slots=True)
class InstallInfo:
    front_url: str
    admin_url: str
    username: str
    password: str

    def rows(self) -> list[tuple[str, str]]:
        return [
            ("FrontURL", self.front_url),
            ("AdminURL", self.admin_url),
            ("Username", self.username),
            ("Password", self.password),
        ]


def plan_init(project: Project, env: EnvConfig, options: InitOptions) -> InitPlan:
    """Resolve the install mode.

    A web root without ``composer.json`` cannot be updated, so it implies
    a clean install even when not requested. A clean install never imports
    a database.
    """
    clean_install = options.clean_install
    implied = False
    if not clean_install and not project.composer_json.is_file():
        clean_install = True
        implied = True

    db_import = not (clean_install or options.skip_db_import)
    db_dump = options.db_dump or project.resolve(env.db_dump)

    required = [project.auth_json]
    if clean_install:
        required.append(project.env_init_php)
    if db_import:
        required.extend([db_dump, project.env_warden_php])

    return InitPlan(
        clean_install=clean_install,
        db_import=db_import,
        db_dump=db_dump,
        implied_clean_install=implied,
        required_files=required,
    )


class BootstrapService:
    def __init__(
        self,
        *,
        project: Project,
        env: EnvConfig,
        platform: PlatformInfo,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
        warden_home: Path | None = None,
        composer_home: Path | None = None,
    ) -> None:
        self._project = project
        self._env = env
        self._platform = platform
        self._console = console
        self._runner = runner
        self._warden_home = warden_home or Path.home() / ".warden"
        self._composer_home = composer_home

    def certificate_path(self) -> Path:
        domain = self._env.traefik_domain
        return self._warden_home / "ssl" / "certs" / f"{domain}.crt.pem"

    def plan(self, options: InitOptions) -> InitPlan:
        plan = plan_init(self._project, self._env, options)
        if plan.implied_clean_install:
            self._console.warning(
                "Implying --clean-install since file "
                f"{self._project.display(self._project.composer_json)} not present"
            )
        return plan

    def verify(self, plan: InitPlan, *, fix: bool, dry_run: bool = False) -> VerifyReport:
        return VerifyService(
            project=self._project,
            platform=self._platform,
            console=self._console,
            runner=self._runner,
            composer_home=self._composer_home,
        ).run(plan.required_files, fix=fix, dry_run=dry_run)

    def run(self, options: InitOptions) -> Result[InstallInfo, BootstrapError]:
        plan = self.plan(options)

        self._step("Verifying configuration")
        report = self.verify(plan, fix=True, dry_run=options.dry_run)
        for issue in report.errors():
            self._console.error(issue.message)
            if issue.hint:
                self._console.print(f"hint: {issue.hint}", Style.DIM)
        if report.has_errors():
            return Err(
                BootstrapError(
                    kind="verify_failed",
                    message=f"{len(report.errors())} precondition(s) not met",
                    hint="Fix the errors above and re-run",
                )
            )

        warden = WardenCli(
            project_root=self._project.root,
            console=self._console,
            dry_run=options.dry_run,
        )
        magento = MagentoCli(warden=warden, console=self._console)

        result = self._start(warden, report.warden_version)
        if isinstance(result, Ok):
            result = self._install(warden, magento, plan, options)
        if isinstance(result, Err):
            return Err(_command_error(result.error))

        self._step("Creating admin user")
        account = AdminAccount(username=options.admin_user, password=generate_password())
        created = magento.create_admin(account)
        if isinstance(created, Err):
            return Err(_command_error(created.error))

        self._step("Initialization complete")
        info = InstallInfo(
            front_url=self._env.front_url,
            admin_url=self._env.admin_url,
            username=account.username,
            password=account.password,
        )
        self._console.table(info.rows())
        return Ok(info)

    def _start(self, warden: WardenCli, warden_version: str) -> Result[None, ProcessError]:
        self._step("Starting Warden")
        result = warden.up()
        if isinstance(result, Err):
            return result
        if not self.certificate_path().exists():
            result = warden.sign_certificate(self._env.traefik_domain)
            if isinstance(result, Err):
                return result

        self._step("Initializing environment")
        pulled = warden.env_pull()
        if isinstance(pulled, Err):
            self._console.warning(f"{pulled.error}; continuing with local images")

        for action in (warden.env_build, warden.env_up, warden.wait_for_db):
            result = action()
            if isinstance(result, Err):
                return result

        # Older warden releases on macOS leave the file sync session to us.
        if self._platform.is_macos and not version_at_least(
            warden_version, WARDEN_SYNC_AUTOSTART_VERSION
        ):
            return warden.sync_start()
        return Ok(None)

    def _install(
        self,
        warden: WardenCli,
        magento: MagentoCli,
        plan: InitPlan,
        options: InitOptions,
    ) -> Result[None, ProcessError | DumpError]:
        if plan.clean_install and not self._project.composer_json.is_file():
            self._step("Installing meta-package")
            result = magento.create_project(options.meta_package, options.meta_version)
            if isinstance(result, Err):
                return result

        self._step("Installing dependencies")
        result = magento.install_dependencies()
        if isinstance(result, Err):
            return result

        if plan.db_import:
            self._step("Importing database")
            result = magento.reset_database()
            if isinstance(result, Err):
                return result
            imported = magento.import_database(plan.db_dump)
            if isinstance(imported, Err):
                return imported
        elif plan.clean_install:
            self._step("Installing application")
            result = magento.setup_install()
            if isinstance(result, Err):
                return result

            self._step("Configuring application")
            result = magento.configure_clean_install(self._env.front_url)
            if isinstance(result, Err):
                return result

            self._step("Rebuilding indexes")
            result = magento.reindex()
            if isinstance(result, Err):
                return result

        if not plan.clean_install:
            self._step("Configuring application")
            result = magento.link_env_php()
            if isinstance(result, Err):
                return result

            self._step("Updating application")
            result = magento.upgrade()
            if isinstance(result, Err):
                return result

        self._step("Flushing cache")
        return magento.flush_cache()

    def _step(self, title: str) -> None:
        self._console.header(step_title(title))


def _command_error(error: ProcessError | DumpError) -> BootstrapError:
    if isinstance(error, DumpError):
        return BootstrapError(kind="dump_unreadable", message=error.message)
    hint = error.stderr.strip() or None
    return BootstrapError(kind="command_failed", message=str(error), hint=hint)

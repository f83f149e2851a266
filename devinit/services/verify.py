"""Verification phase: every precondition is checked before anything starts.

All problems are collected and reported together so one run tells the
developer everything that needs fixing.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from devinit.core.project import Project
from devinit.core.result import Err
from devinit.output.console import ConsoleProtocol, Style
from devinit.platform.detection import PlatformInfo
from devinit.services.checkers import (
    CheckResult,
    HostChecker,
    RequiredFilesChecker,
    load_hints,
)
from devinit.services.checkers.common import CommandRunner, DefaultCommandRunner
from devinit.services.credentials import CredentialsService

__all__ = ["MUTAGEN_BREW_FORMULA", "VerifyReport", "VerifyService"]

MUTAGEN_BREW_FORMULA = "havoc-io/mutagen/mutagen"


@dataclass(frozen=True, slots=True)
class VerifyReport:
    host: list[CheckResult]
    files: list[CheckResult]
    warden_version: str = ""

    def all_results(self) -> list[CheckResult]:
        return [*self.host, *self.files]

    def errors(self) -> list[CheckResult]:
        return [r for r in self.all_results() if r.is_error]

    def has_errors(self) -> bool:
        return any(r.is_error for r in self.all_results())


class VerifyService:
    """Run host and project checks.

    With ``fix=True`` two problems are repaired on the way: a missing
    mutagen on macOS is installed through Homebrew, and a missing project
    ``auth.json`` is seeded from global composer credentials.
    """

    def __init__(
        self,
        *,
        project: Project,
        platform: PlatformInfo,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
        composer_home: Path | None = None,
    ) -> None:
        self._project = project
        self._platform = platform
        self._console = console
        self._runner = runner or DefaultCommandRunner()
        self._composer_home = composer_home

    def run(
        self,
        required_files: Sequence[Path],
        *,
        fix: bool = True,
        dry_run: bool = False,
    ) -> VerifyReport:
        host_results: list[CheckResult] = []

        if self._platform.is_macos and fix:
            installed = self._install_mutagen(dry_run=dry_run)
            if installed is not None:
                host_results.append(installed)

        checker = HostChecker(
            platform=self._platform.platform,
            distro=self._platform.distro,
            hints=load_hints(),
            runner=self._runner,
        )
        host_results.extend(checker.check_commands())

        warden_version = checker.probe_version("warden")
        host_results.append(checker.check_warden_version(warden_version))
        host_results.append(checker.check_docker_running())

        if fix:
            seeded = self._seed_credentials(dry_run=dry_run)
            if seeded is not None:
                host_results.append(seeded)

        if checker.uses_mutagen:
            host_results.append(checker.check_mutagen_version(checker.probe_version("mutagen")))

        files_checker = RequiredFilesChecker(project=self._project, required=required_files)
        file_results = files_checker.check_all()
        # A dry run never writes auth.json, so do not report it as missing.
        if dry_run and fix:
            file_results = [self._dry_run_auth(r) for r in file_results]

        return VerifyReport(
            host=host_results,
            files=file_results,
            warden_version=warden_version,
        )

    def _install_mutagen(self, *, dry_run: bool) -> CheckResult | None:
        if shutil.which("mutagen") or not shutil.which("brew"):
            return None

        self._console.warning("Mutagen could not be found; attempting install via brew.")
        cmd = ["brew", "install", MUTAGEN_BREW_FORMULA]
        self._console.print(f"$ {shlex.join(cmd)}", Style.DIM)
        if dry_run:
            return None

        proc = self._runner.run(cmd, capture=False)
        if proc.returncode != 0:
            return CheckResult.error(
                "mutagen install",
                f"brew install {MUTAGEN_BREW_FORMULA} failed (exit {proc.returncode})",
            )
        return CheckResult.success("mutagen install", "installed via brew")

    def _seed_credentials(self, *, dry_run: bool) -> CheckResult | None:
        service = CredentialsService(
            project=self._project,
            console=self._console,
            composer_home=self._composer_home,
        )
        result = service.seed_project_auth(dry_run=dry_run)
        if isinstance(result, Err):
            return CheckResult.error("auth.json", result.error.message)
        if result.value:
            return CheckResult.warning("auth.json", "configured from global composer credentials")
        return None

    def _dry_run_auth(self, result: CheckResult) -> CheckResult:
        if not result.is_error or result.name != self._project.auth_json.name:
            return result
        service = CredentialsService(
            project=self._project,
            console=self._console,
            composer_home=self._composer_home,
        )
        if service.global_credentials() is None:
            return result
        return CheckResult.warning(result.name, "would be configured from global credentials")

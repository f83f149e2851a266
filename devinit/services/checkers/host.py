"""Host dependency checker.

Validates the host side of the toolchain:
- warden, docker-compose (and mutagen on macOS) on PATH
- warden / mutagen minimum versions
- a reachable Docker daemon
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field

from devinit.core.versions import (
    MUTAGEN_MIN_VERSION,
    WARDEN_MIN_VERSION,
    version_at_least,
)
from devinit.platform.detection import LinuxDistro, Platform

from .base import CheckResult
from .common import (
    CommandRunner,
    DefaultCommandRunner,
    Hints,
    first_line,
    get_platform_key,
)

_REQUIRED_COMMANDS = ("warden", "mutagen", "docker-compose")
_MACOS_ONLY_COMMANDS = frozenset({"mutagen"})


@dataclass(frozen=True, slots=True)
class HostChecker:
    """Check host commands, their versions and the Docker daemon.

    Attributes:
        platform: Current platform
        distro: Linux distribution (for hint lookup)
        hints: Install hints
        runner: Command runner for probes
    """

    platform: Platform
    distro: LinuxDistro | None = None
    hints: Hints = field(default_factory=Hints.empty)
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)

    @property
    def uses_mutagen(self) -> bool:
        return self.platform == Platform.MACOS

    def required_commands(self) -> list[str]:
        return [
            name
            for name in _REQUIRED_COMMANDS
            if name not in _MACOS_ONLY_COMMANDS or self.uses_mutagen
        ]

    def check_commands(self) -> list[CheckResult]:
        return [self.check_command(name) for name in self.required_commands()]

    def check_command(self, name: str) -> CheckResult:
        path = shutil.which(name)
        if not path:
            return CheckResult.error(
                name,
                f"Command '{name}' not found. Please install.",
                hint=self._hint(name),
            )
        return CheckResult.success(name, path)

    def probe_version(self, name: str) -> str:
        """Return ``<name> version`` output, or "" if it cannot be obtained."""
        if not shutil.which(name):
            return ""
        proc = self.runner.run([name, "version"])
        if proc.returncode != 0:
            return ""
        return first_line(proc.stdout or "")

    def check_warden_version(self, installed: str) -> CheckResult:
        return self._check_min_version("warden", "Warden", installed, WARDEN_MIN_VERSION)

    def check_mutagen_version(self, installed: str) -> CheckResult:
        return self._check_min_version("mutagen", "Mutagen", installed, MUTAGEN_MIN_VERSION)

    def check_docker_running(self) -> CheckResult:
        proc = self.runner.run(["docker", "system", "info"])
        if proc.returncode != 0:
            return CheckResult.error(
                "docker",
                "Docker does not appear to be running. Please start Docker.",
                hint=self._hint("docker"),
            )
        return CheckResult.success("docker", "running")

    def _check_min_version(
        self, name: str, label: str, installed: str, required: str
    ) -> CheckResult:
        if installed and version_at_least(installed, required):
            return CheckResult.success(f"{name} version", installed)
        return CheckResult.error(
            f"{name} version",
            f"{label} {required} or greater is required "
            f"(version {installed or 'none'} is installed)",
            hint=self._hint(name),
        )

    def _hint(self, name: str) -> str | None:
        return self.hints.get(name, get_platform_key(self.platform, self.distro))

"""Common utilities for checkers.

- CommandRunner protocol so probes can be faked in tests
- Install hints loaded from ``devinit/data/hints.toml``
- Small text helpers for version output
"""

from __future__ import annotations

import subprocess
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from devinit.platform.detection import LinuxDistro, Platform

__all__ = [
    "CommandRunner",
    "DefaultCommandRunner",
    "Hints",
    "first_line",
    "get_platform_key",
    "load_hints",
]


class CommandRunner(Protocol):
    """Protocol for running probe commands."""

    def run(
        self, args: list[str], *, capture: bool = True, cwd: Path | None = None
    ) -> subprocess.CompletedProcess[str]:
        """Run a command and return the completed process.

        A command that cannot be started is reported as return code 127
        rather than raising.
        """
        ...


class DefaultCommandRunner:
    """Default command runner using subprocess.run."""

    def run(
        self, args: list[str], *, capture: bool = True, cwd: Path | None = None
    ) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                args,
                capture_output=capture,
                text=True,
                check=False,
                cwd=cwd,
            )
        except OSError as e:
            return subprocess.CompletedProcess(args, 127, stdout="", stderr=str(e))


def _empty_hint_dict() -> dict[str, dict[str, str]]:
    return {}


@dataclass(frozen=True, slots=True)
class Hints:
    """Install hints per command and platform key.

    Structure mirrors hints.toml:
        [commands.warden]
        macos = "brew install wardenenv/warden/warden"
        debian = "https://docs.warden.dev/installing.html"
    """

    commands: dict[str, dict[str, str]] = field(default_factory=_empty_hint_dict)

    def get(self, command: str, platform_key: str) -> str | None:
        hints = self.commands.get(command)
        if hints:
            return hints.get(platform_key) or hints.get("default")
        return None

    @classmethod
    def empty(cls) -> Hints:
        return cls()


def load_hints(path: Path | None = None) -> Hints:
    """Load hints from TOML.

    A missing or unreadable file yields empty hints; hints only decorate
    error messages and must never make a check fail.
    """
    if path is None:
        path = Path(__file__).parent.parent.parent / "data" / "hints.toml"

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return Hints.empty()

    commands: dict[str, dict[str, str]] = {}
    section = data.get("commands")
    if isinstance(section, dict):
        for name, entries in section.items():
            if not isinstance(entries, dict):
                continue
            hint_dict = {str(k): str(v) for k, v in entries.items() if isinstance(v, str)}
            if hint_dict:
                commands[str(name)] = hint_dict

    return Hints(commands=commands)


def get_platform_key(platform: Platform, distro: LinuxDistro | None = None) -> str:
    """Map a platform/distro pair to a hints.toml key."""
    match platform:
        case Platform.MACOS:
            return "macos"
        case Platform.WINDOWS:
            return "windows"
        case Platform.LINUX:
            match distro:
                case LinuxDistro.FEDORA:
                    return "fedora"
                case LinuxDistro.ARCH:
                    return "arch"
                case _:
                    return "debian"
        case _:
            return "debian"


def first_line(text: str) -> str:
    """Extract the first non-empty line from command output."""
    for line in text.strip().splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""

"""Tests for common checker utilities."""

from __future__ import annotations

from pathlib import Path

from devinit.platform.detection import LinuxDistro, Platform
from devinit.services.checkers.common import (
    DefaultCommandRunner,
    Hints,
    first_line,
    get_platform_key,
    load_hints,
)


class TestFirstLine:
    def test_multiple_lines(self) -> None:
        assert first_line("0.6.0\nextra") == "0.6.0"

    def test_blank_lines_before_content(self) -> None:
        assert first_line("\n\n  0.10.3  \n") == "0.10.3"

    def test_empty(self) -> None:
        assert first_line("") == ""


class TestGetPlatformKey:
    def test_macos(self) -> None:
        assert get_platform_key(Platform.MACOS) == "macos"

    def test_linux_families(self) -> None:
        assert get_platform_key(Platform.LINUX, LinuxDistro.DEBIAN) == "debian"
        assert get_platform_key(Platform.LINUX, LinuxDistro.FEDORA) == "fedora"
        assert get_platform_key(Platform.LINUX, LinuxDistro.ARCH) == "arch"
        assert get_platform_key(Platform.LINUX, None) == "debian"

    def test_windows(self) -> None:
        assert get_platform_key(Platform.WINDOWS) == "windows"


class TestHints:
    def test_platform_specific_first(self) -> None:
        hints = Hints(commands={"warden": {"macos": "brew", "default": "docs"}})
        assert hints.get("warden", "macos") == "brew"
        assert hints.get("warden", "debian") == "docs"

    def test_unknown_command(self) -> None:
        assert Hints.empty().get("warden", "macos") is None


class TestLoadHints:
    def test_bundled_hints(self) -> None:
        hints = load_hints()
        assert hints.get("warden", "macos") is not None
        assert hints.get("docker-compose", "fedora") == "sudo dnf install docker-compose"

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_hints(tmp_path / "nope.toml") == Hints.empty()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "hints.toml"
        path.write_text("[commands.warden\n", encoding="utf-8")
        assert load_hints(path) == Hints.empty()

    def test_non_string_values_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "hints.toml"
        path.write_text('[commands.pv]\nmacos = 1\ndebian = "apt install pv"\n', encoding="utf-8")

        hints = load_hints(path)

        assert hints.commands == {"pv": {"debian": "apt install pv"}}


def test_default_runner_missing_command() -> None:
    proc = DefaultCommandRunner().run(["nonexistent_command_12345"])
    assert proc.returncode == 127

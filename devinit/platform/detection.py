"""Platform detection.

The bootstrap only branches on macOS (file sync through mutagen), but
install hints are keyed by Linux distribution family as well.
"""

from __future__ import annotations

import sys as _sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from pathlib import Path

__all__ = [
    "LinuxDistro",
    "Platform",
    "PlatformInfo",
    "detect",
    "detect_linux_distro",
    "detect_platform",
]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


class LinuxDistro(Enum):
    """Linux distribution family."""

    DEBIAN = auto()  # Debian, Ubuntu, Mint, Pop!_OS
    FEDORA = auto()  # Fedora, RHEL, CentOS, Rocky
    ARCH = auto()  # Arch, Manjaro, EndeavourOS
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Detected platform information. Use ``detect()`` to get one."""

    platform: Platform
    distro: LinuxDistro = LinuxDistro.UNKNOWN

    @property
    def is_macos(self) -> bool:
        return self.platform == Platform.MACOS

    def __str__(self) -> str:
        if self.platform == Platform.LINUX and self.distro != LinuxDistro.UNKNOWN:
            return f"{self.platform}-{self.distro}"
        return str(self.platform)


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def _read_os_release() -> str | None:
    try:
        return Path("/etc/os-release").read_text().lower()
    except OSError:
        return None


@lru_cache(maxsize=1)
def detect_linux_distro() -> LinuxDistro:
    """Detect Linux distribution family (cached).

    Returns LinuxDistro.UNKNOWN off Linux or when /etc/os-release is
    unreadable or unrecognized.
    """
    if detect_platform() != Platform.LINUX:
        return LinuxDistro.UNKNOWN

    content = _read_os_release()
    if content is None:
        return LinuxDistro.UNKNOWN

    if any(x in content for x in ("fedora", "rhel", "centos", "rocky", "almalinux")):
        return LinuxDistro.FEDORA
    if any(x in content for x in ("ubuntu", "debian", "mint", "pop")):
        return LinuxDistro.DEBIAN
    if any(x in content for x in ("arch", "manjaro", "endeavour")):
        return LinuxDistro.ARCH
    return LinuxDistro.UNKNOWN


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    """Detect complete platform information (cached)."""
    return PlatformInfo(platform=detect_platform(), distro=detect_linux_distro())

"""Platform abstraction layer."""

from .detection import (
    LinuxDistro,
    Platform,
    PlatformInfo,
    detect,
)
from .process import (
    ProcessError,
    run_silent,
    run_with_input,
)

__all__ = [
    # detection
    "LinuxDistro",
    "Platform",
    "PlatformInfo",
    "detect",
    # process
    "ProcessError",
    "run_silent",
    "run_with_input",
]

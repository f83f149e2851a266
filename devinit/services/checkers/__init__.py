"""Checker modules for precondition validation.

- HostChecker: host commands, versions, Docker daemon
- RequiredFilesChecker: local files the install mode depends on
"""

from devinit.services.checkers.base import CheckResult, CheckStatus
from devinit.services.checkers.common import Hints, load_hints
from devinit.services.checkers.files import RequiredFilesChecker
from devinit.services.checkers.host import HostChecker

__all__ = [
    "CheckResult",
    "CheckStatus",
    "Hints",
    "load_hints",
    "HostChecker",
    "RequiredFilesChecker",
]

"""Base types for checkers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class CheckStatus(Enum):
    """Status of a check result."""

    OK = auto()
    WARNING = auto()
    """Not fatal: something was missing but has been worked around."""
    ERROR = auto()
    """Fatal: the bootstrap must not start."""


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single precondition check.

    Attributes:
        name: What was checked (e.g. "warden", "docker", "auth.json")
        status: Whether the check passed, warned, or failed
        message: Human-readable result message
        hint: Optional install command or fix
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == CheckStatus.ERROR

    @classmethod
    def success(cls, name: str, message: str) -> CheckResult:
        return cls(name=name, status=CheckStatus.OK, message=message)

    @classmethod
    def warning(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.WARNING, message=message, hint=hint)

    @classmethod
    def error(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.ERROR, message=message, hint=hint)

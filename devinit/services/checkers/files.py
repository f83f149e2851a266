"""Required local files checker."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from devinit.core.project import Project

from .base import CheckResult


@dataclass(frozen=True, slots=True)
class RequiredFilesChecker:
    """Check that every file the chosen install mode reads is present."""

    project: Project
    required: Sequence[Path]

    def check_all(self) -> list[CheckResult]:
        return [self.check_file(path) for path in self.required]

    def check_file(self, path: Path) -> CheckResult:
        shown = self.project.display(path)
        if not path.is_file():
            return CheckResult.error(path.name, f"Missing local file: {shown}")
        return CheckResult.success(path.name, shown)

"""Project detection and paths.

A project is a directory holding the warden ``.env`` file. The application
itself lives in the web root (``WARDEN_WEB_ROOT``) below it, which is where
``composer.json``, ``auth.json`` and ``app/etc`` are looked up.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "PROJECT_ROOT_ENV",
    "Project",
    "ProjectError",
    "detect_project",
    "find_project_upward",
]

PROJECT_ROOT_ENV = "DEVINIT_PROJECT_ROOT"


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be detected."""

    message: str
    searched_from: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected warden project.

    Attributes:
        root: Directory holding ``.env``
        web_root: Application directory relative to root (``./`` prefixed)
    """

    root: Path
    web_root: str = "./"

    def with_web_root(self, web_root: str) -> Project:
        return Project(root=self.root, web_root=web_root)

    @property
    def env_path(self) -> Path:
        """Path to the warden ``.env``."""
        return self.root / ".env"

    @property
    def web_root_dir(self) -> Path:
        return self.root / self.web_root

    @property
    def composer_json(self) -> Path:
        return self.web_root_dir / "composer.json"

    @property
    def auth_json(self) -> Path:
        """Marketplace credentials used by composer inside the container."""
        return self.web_root_dir / "auth.json"

    @property
    def env_init_php(self) -> Path:
        """Local overrides merged into ``env.php`` after a clean install."""
        return self.web_root_dir / "app" / "etc" / "env.php.init.php"

    @property
    def env_warden_php(self) -> Path:
        """The ``env.php`` that ``app/etc/env.php`` is symlinked to."""
        return self.web_root_dir / "app" / "etc" / "env.php.warden.php"

    def display(self, path: Path) -> str:
        """Render ``path`` relative to the project root when possible."""
        try:
            return f"./{path.relative_to(self.root).as_posix()}"
        except ValueError:
            return str(path)

    def resolve(self, path: str | Path) -> Path:
        """Resolve a project-relative path."""
        p = Path(path).expanduser()
        if p.is_absolute():
            return p
        return self.root / p


def find_project_upward(start: Path) -> Path | None:
    """Return the nearest directory at or above ``start`` holding ``.env``."""
    for candidate in (start, *start.parents):
        if (candidate / ".env").is_file():
            return candidate
    return None


def detect_project(explicit: Path | None = None) -> Result[Project, ProjectError]:
    """Detect the project root.

    Order: the explicit path, then ``DEVINIT_PROJECT_ROOT``, then an upward
    search from the current directory.
    """
    if explicit is None:
        env = os.environ.get(PROJECT_ROOT_ENV)
        if env:
            explicit = Path(env)

    if explicit is not None:
        root = explicit.expanduser().resolve()
        if not (root / ".env").is_file():
            return Err(
                ProjectError(
                    f"'{root}' is not a warden project (missing .env)",
                    searched_from=root,
                )
            )
        return Ok(Project(root=root))

    cwd = Path.cwd().resolve()
    found = find_project_upward(cwd)
    if found is None:
        return Err(
            ProjectError(
                "No warden project found (no .env in this directory or its parents)",
                searched_from=cwd,
                hint="cd into the project or pass --project <dir>",
            )
        )
    return Ok(Project(root=found))

"""Marketplace credentials for composer inside the php-fpm container.

Per-project ``auth.json`` with project keys is preferred. When it is
missing, the developer's global composer credentials for
repo.magento.com are copied into the web root so the install can proceed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from devinit.core.project import Project
from devinit.core.result import Err, Ok, Result
from devinit.output.console import ConsoleProtocol, Style

__all__ = ["MARKETPLACE_HOST", "CredentialsError", "CredentialsService"]

MARKETPLACE_HOST = "repo.magento.com"


@dataclass(frozen=True, slots=True)
class CredentialsError:
    message: str
    path: Path | None = None


class CredentialsService:
    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        composer_home: Path | None = None,
    ) -> None:
        self._project = project
        self._console = console
        self._composer_home = composer_home or Path.home() / ".composer"

    @property
    def global_auth_path(self) -> Path:
        return self._composer_home / "auth.json"

    def global_credentials(self) -> dict[str, object] | None:
        """Return the global http-basic entry for the marketplace, if any."""
        try:
            data = json.loads(self.global_auth_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        http_basic = data.get("http-basic")
        if not isinstance(http_basic, dict):
            return None
        entry = http_basic.get(MARKETPLACE_HOST)
        if not isinstance(entry, dict) or not entry:
            return None
        return entry

    def seed_project_auth(self, *, dry_run: bool = False) -> Result[bool, CredentialsError]:
        """Write ``<web_root>/auth.json`` from global credentials.

        Returns:
            Ok(True) if the file was (or would be) written, Ok(False) if
            nothing needed doing, Err on write failure.
        """
        target = self._project.auth_json
        if target.exists():
            return Ok(False)

        credentials = self.global_credentials()
        if credentials is None:
            return Ok(False)

        self._console.warning(
            f"Configuring {self._project.display(target)} with global credentials "
            f"for {MARKETPLACE_HOST}"
        )
        if dry_run:
            self._console.print(f"would write {target}", Style.DIM)
            return Ok(True)

        payload = {"http-basic": {MARKETPLACE_HOST: credentials}}
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(payload, indent=4) + "\n", encoding="utf-8")
        except OSError as e:
            return Err(CredentialsError(f"Cannot write {target}: {e}", path=target))
        return Ok(True)

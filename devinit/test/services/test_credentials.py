"""Tests for marketplace credential seeding."""

from __future__ import annotations

import json
from pathlib import Path

from devinit.core.project import Project
from devinit.core.result import Ok
from devinit.output.console import MockConsole
from devinit.services.credentials import MARKETPLACE_HOST, CredentialsService

_ENTRY = {"username": "public-key", "password": "private-key"}


def _write_global(home: Path, data: object) -> None:
    home.mkdir(parents=True, exist_ok=True)
    (home / "auth.json").write_text(json.dumps(data), encoding="utf-8")


def _service(tmp_path: Path, web_root: str = "./") -> tuple[CredentialsService, MockConsole]:
    console = MockConsole()
    project = Project(root=tmp_path / "project", web_root=web_root)
    project.root.mkdir()
    service = CredentialsService(
        project=project, console=console, composer_home=tmp_path / "composer"
    )
    return service, console


class TestGlobalCredentials:
    def test_missing_file(self, tmp_path: Path) -> None:
        service, _ = _service(tmp_path)
        assert service.global_credentials() is None

    def test_invalid_json(self, tmp_path: Path) -> None:
        service, _ = _service(tmp_path)
        (tmp_path / "composer").mkdir()
        (tmp_path / "composer" / "auth.json").write_text("{not json", encoding="utf-8")
        assert service.global_credentials() is None

    def test_other_host_only(self, tmp_path: Path) -> None:
        service, _ = _service(tmp_path)
        _write_global(tmp_path / "composer", {"http-basic": {"example.org": _ENTRY}})
        assert service.global_credentials() is None

    def test_marketplace_entry(self, tmp_path: Path) -> None:
        service, _ = _service(tmp_path)
        _write_global(tmp_path / "composer", {"http-basic": {MARKETPLACE_HOST: _ENTRY}})
        assert service.global_credentials() == _ENTRY


class TestSeedProjectAuth:
    def test_existing_project_auth_untouched(self, tmp_path: Path) -> None:
        service, console = _service(tmp_path)
        _write_global(tmp_path / "composer", {"http-basic": {MARKETPLACE_HOST: _ENTRY}})
        target = tmp_path / "project" / "auth.json"
        target.write_text("{}", encoding="utf-8")

        assert service.seed_project_auth() == Ok(False)
        assert target.read_text(encoding="utf-8") == "{}"
        assert not console.has_warning()

    def test_nothing_to_seed(self, tmp_path: Path) -> None:
        service, _ = _service(tmp_path)

        assert service.seed_project_auth() == Ok(False)
        assert not (tmp_path / "project" / "auth.json").exists()

    def test_writes_web_root_auth(self, tmp_path: Path) -> None:
        service, console = _service(tmp_path, web_root="./webroot")
        _write_global(tmp_path / "composer", {"http-basic": {MARKETPLACE_HOST: _ENTRY}})

        assert service.seed_project_auth() == Ok(True)

        written = json.loads((tmp_path / "project" / "webroot" / "auth.json").read_text())
        assert written == {"http-basic": {MARKETPLACE_HOST: _ENTRY}}
        assert console.find("Configuring ./webroot/auth.json with global credentials")

    def test_dry_run_does_not_write(self, tmp_path: Path) -> None:
        service, console = _service(tmp_path)
        _write_global(tmp_path / "composer", {"http-basic": {MARKETPLACE_HOST: _ENTRY}})

        assert service.seed_project_auth(dry_run=True) == Ok(True)
        assert not (tmp_path / "project" / "auth.json").exists()
        assert console.has_warning()

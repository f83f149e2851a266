from __future__ import annotations

import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from devinit import __version__
from devinit.cli.app import app
from devinit.core.errors import ErrorCode
from devinit.core.project import PROJECT_ROOT_ENV

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_commands_registered() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "init" in result.output
    assert "check" in result.output


def test_project_option_sets_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(PROJECT_ROOT_ENV, raising=False)
    (tmp_path / ".env").write_text("TRAEFIK_DOMAIN=shop.test\n", encoding="utf-8")

    result = runner.invoke(app, ["--project", str(tmp_path)])

    assert result.exit_code == 0
    assert os.environ[PROJECT_ROOT_ENV] == str(tmp_path.resolve())


def test_project_option_rejects_non_project(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(PROJECT_ROOT_ENV, raising=False)

    result = runner.invoke(app, ["--project", str(tmp_path)])

    assert result.exit_code == int(ErrorCode.ENV_ERROR)
    assert PROJECT_ROOT_ENV not in os.environ

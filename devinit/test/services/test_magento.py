"""Tests for application-level steps."""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from devinit.core.result import Err, Ok
from devinit.output.console import MockConsole
from devinit.services.magento import (
    AdminAccount,
    DumpError,
    InstallSettings,
    MagentoCli,
    generate_password,
    iter_dump,
)
from devinit.services.warden import WardenCli
from devinit.test.services.fakes import ProcessRecorder

_SQL = b"CREATE TABLE core_config_data (id int);\n" * 2000


def _magento(tmp_path: Path) -> tuple[MagentoCli, MockConsole]:
    console = MockConsole()
    warden = WardenCli(project_root=tmp_path, console=console)
    return MagentoCli(warden=warden, console=console), console


class TestInstallSettings:
    def test_setup_install_args(self) -> None:
        args = InstallSettings().setup_install_args()

        assert args[0] == "--cleanup-database"
        assert "--backend-frontname=backend" in args
        assert "--db-host=db" in args
        assert "--amqp-host=rabbitmq" in args
        assert "--http-cache-hosts=varnish:80" in args
        assert "--session-save-redis-db=2" in args
        assert "--cache-backend-redis-db=0" in args
        assert "--page-cache-redis-db=1" in args

    def test_overrides(self) -> None:
        args = InstallSettings(db_name="shop", redis_port=6380).setup_install_args()

        assert "--db-name=shop" in args
        assert "--page-cache-redis-port=6380" in args


class TestGeneratePassword:
    def test_shape(self) -> None:
        for _ in range(50):
            password = generate_password()
            assert len(password) == 16
            assert password.isalnum()
            assert any(c.isdigit() for c in password)
            assert any(c.isalpha() for c in password)

    def test_unique(self) -> None:
        assert generate_password() != generate_password()

    def test_too_short(self) -> None:
        with pytest.raises(ValueError):
            generate_password(1)


def test_admin_email() -> None:
    assert AdminAccount(username="localadmin", password="x").email == "localadmin@example.com"


class TestIterDump:
    def test_gzip_is_inflated(self, tmp_path: Path) -> None:
        dump = tmp_path / "db.sql.gz"
        dump.write_bytes(gzip.compress(_SQL))
        progress: list[int] = []

        data = b"".join(iter_dump(dump, progress.append, chunk_size=4096))

        assert data == _SQL
        assert sum(progress) == dump.stat().st_size

    def test_plain_sql_passes_through(self, tmp_path: Path) -> None:
        dump = tmp_path / "db.sql"
        dump.write_bytes(_SQL)
        progress: list[int] = []

        data = b"".join(iter_dump(dump, progress.append, chunk_size=4096))

        assert data == _SQL
        assert sum(progress) == len(_SQL)


class TestImportDatabase:
    def test_streams_inflated_sql(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        recorder = ProcessRecorder().install(monkeypatch)
        dump = tmp_path / "db.sql.gz"
        dump.write_bytes(gzip.compress(_SQL))
        magento, console = _magento(tmp_path)

        assert magento.import_database(dump) == Ok(None)

        assert recorder.calls == [["warden", "db", "import"]]
        assert recorder.fed == _SQL
        assert console.transfers == [("db.sql.gz", dump.stat().st_size, dump.stat().st_size)]

    def test_missing_dump(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        ProcessRecorder().install(monkeypatch)
        magento, _ = _magento(tmp_path)

        result = magento.import_database(tmp_path / "absent.sql.gz")

        assert isinstance(result, Err)
        assert isinstance(result.error, DumpError)

    def test_corrupt_gzip(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        ProcessRecorder().install(monkeypatch)
        dump = tmp_path / "db.sql.gz"
        dump.write_bytes(b"not gzip at all")
        magento, _ = _magento(tmp_path)

        result = magento.import_database(dump)

        assert isinstance(result, Err)
        assert isinstance(result.error, DumpError)
        assert "db.sql.gz" in result.error.message

    def test_damaged_deflate_stream(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        ProcessRecorder().install(monkeypatch)
        data = bytearray(gzip.compress(_SQL))
        # Keep the 10-byte header intact so the damage surfaces as zlib.error.
        for i in range(10, 60):
            data[i] ^= 0xFF
        dump = tmp_path / "db.sql.gz"
        dump.write_bytes(bytes(data))
        magento, _ = _magento(tmp_path)

        result = magento.import_database(dump)

        assert isinstance(result, Err)
        assert isinstance(result.error, DumpError)

    def test_import_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        ProcessRecorder(failures={("db", "import"): 1}).install(monkeypatch)
        dump = tmp_path / "db.sql"
        dump.write_bytes(_SQL)
        magento, _ = _magento(tmp_path)

        result = magento.import_database(dump)

        assert isinstance(result, Err)
        assert not isinstance(result.error, DumpError)
        assert result.error.returncode == 1


class TestCommands:
    def test_create_project_latest(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        recorder = ProcessRecorder().install(monkeypatch)
        magento, _ = _magento(tmp_path)

        magento.create_project("magento/project-community-edition")

        create = recorder.calls[0]
        assert create[-2:] == ["magento/project-community-edition", "/tmp/create-project"]
        assert "--repository-url=https://repo.magento.com/" in create
        assert recorder.commands[1] == (
            "env exec -T php-fpm rsync -a /tmp/create-project/ /var/www/html/"
        )

    def test_create_project_version(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        recorder = ProcessRecorder().install(monkeypatch)
        magento, _ = _magento(tmp_path)

        magento.create_project("magento/project-enterprise-edition", "2.4.x")

        assert recorder.calls[0][-1] == "2.4.x"

    def test_sequence_stops_at_first_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        recorder = ProcessRecorder(
            failures={("env", "exec", "-T", "php-fpm", "bin/magento", "app:config:import"): 1}
        ).install(monkeypatch)
        magento, _ = _magento(tmp_path)

        result = magento.upgrade()

        assert isinstance(result, Err)
        assert not recorder.ran("setup:db-schema:upgrade")

    def test_reset_database(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        recorder = ProcessRecorder().install(monkeypatch)
        magento, _ = _magento(tmp_path)

        magento.reset_database()

        assert recorder.calls == [
            ["warden", "db", "connect", "-e", "drop database magento; create database magento;"]
        ]

    def test_configure_clean_install(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        recorder = ProcessRecorder().install(monkeypatch)
        magento, _ = _magento(tmp_path)

        magento.configure_clean_install("https://app.shop.test/")

        assert recorder.index("php -r") < recorder.index("cp -n app/etc/env.php")
        assert recorder.ran("config:set -q --lock-env web/unsecure/base_url https://app.shop.test/")
        assert recorder.ran("config:set -q --lock-env web/secure/base_url https://app.shop.test/")
        assert recorder.ran("deploy:mode:set -s developer")
        assert recorder.ran("cache:disable block_html full_page")

    def test_create_admin(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        recorder = ProcessRecorder().install(monkeypatch)
        magento, _ = _magento(tmp_path)

        magento.create_admin(AdminAccount(username="localadmin", password="abc123"))

        assert recorder.calls[0][5:] == [
            "bin/magento",
            "admin:user:create",
            "--admin-password=abc123",
            "--admin-user=localadmin",
            "--admin-firstname=Local",
            "--admin-lastname=Admin",
            "--admin-email=localadmin@example.com",
        ]

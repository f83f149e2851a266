"""Application-level steps run inside the php-fpm container.

Wraps composer and ``bin/magento`` invocations. Service endpoints used by
``setup:install`` match the containers of a warden magento2 environment.
"""

from __future__ import annotations

import gzip
import secrets
import string
import zlib
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from devinit.core.config import ADMIN_FRONTNAME
from devinit.core.result import Err, Ok, Result
from devinit.output.console import ConsoleProtocol
from devinit.platform.process import ProcessError
from devinit.services.warden import WardenCli

__all__ = [
    "DEFAULT_META_PACKAGE",
    "AdminAccount",
    "DumpError",
    "InstallSettings",
    "MagentoCli",
    "generate_password",
    "iter_dump",
]

DEFAULT_META_PACKAGE = "magento/project-community-edition"
MARKETPLACE_URL = "https://repo.magento.com/"
CREATE_PROJECT_DIR = "/tmp/create-project"
CONTAINER_WEB_ROOT = "/var/www/html/"

_DUMP_CHUNK_SIZE = 1024 * 1024
_PASSWORD_ALPHABET = string.ascii_letters + string.digits

# Merges the local overrides in env.php.init.php into the env.php written by
# setup:install. Runs with the web root as working directory.
_MERGE_ENV_PHP = """
$env = "<?php\\nreturn " . var_export(array_merge_recursive(
  include("app/etc/env.php"),
  include("app/etc/env.php.init.php")
), true) . ";\\n";
file_put_contents("app/etc/env.php", $env);
"""

type Step = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DumpError:
    """Error reading the database dump."""

    message: str
    path: Path


@dataclass(frozen=True, slots=True)
class InstallSettings:
    """``setup:install`` wiring to the environment's service containers."""

    backend_frontname: str = ADMIN_FRONTNAME
    db_host: str = "db"
    db_name: str = "magento"
    db_user: str = "magento"
    db_password: str = "magento"
    amqp_host: str = "rabbitmq"
    amqp_port: int = 5672
    amqp_user: str = "guest"
    amqp_password: str = "guest"
    redis_host: str = "redis"
    redis_port: int = 6379
    cache_redis_db: int = 0
    page_cache_redis_db: int = 1
    session_redis_db: int = 2
    session_redis_max_concurrency: int = 20
    http_cache_hosts: str = "varnish:80"

    def setup_install_args(self) -> list[str]:
        return [
            "--cleanup-database",
            f"--backend-frontname={self.backend_frontname}",
            f"--amqp-host={self.amqp_host}",
            f"--amqp-port={self.amqp_port}",
            f"--amqp-user={self.amqp_user}",
            f"--amqp-password={self.amqp_password}",
            "--consumers-wait-for-messages=0",
            f"--db-host={self.db_host}",
            f"--db-name={self.db_name}",
            f"--db-user={self.db_user}",
            f"--db-password={self.db_password}",
            f"--http-cache-hosts={self.http_cache_hosts}",
            "--session-save=redis",
            f"--session-save-redis-host={self.redis_host}",
            f"--session-save-redis-port={self.redis_port}",
            f"--session-save-redis-db={self.session_redis_db}",
            f"--session-save-redis-max-concurrency={self.session_redis_max_concurrency}",
            "--cache-backend=redis",
            f"--cache-backend-redis-server={self.redis_host}",
            f"--cache-backend-redis-db={self.cache_redis_db}",
            f"--cache-backend-redis-port={self.redis_port}",
            "--page-cache=redis",
            f"--page-cache-redis-server={self.redis_host}",
            f"--page-cache-redis-db={self.page_cache_redis_db}",
            f"--page-cache-redis-port={self.redis_port}",
        ]


@dataclass(frozen=True, slots=True)
class AdminAccount:
    username: str
    password: str
    firstname: str = "Local"
    lastname: str = "Admin"

    @property
    def email(self) -> str:
        return f"{self.username}@example.com"


def generate_password(length: int = 16) -> str:
    """Generate an admin password with at least one letter and one digit."""
    if length < 2:
        raise ValueError("password length must be at least 2")
    while True:
        password = "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
        if any(c.isdigit() for c in password) and any(c.isalpha() for c in password):
            return password


def iter_dump(
    path: Path,
    advance: Callable[[int], None],
    chunk_size: int = _DUMP_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Yield the SQL in ``path``, gunzipping ``.gz`` dumps.

    ``advance`` receives the number of bytes of ``path`` consumed so far,
    so progress tracks the file on disk rather than the inflated stream.
    """
    with path.open("rb") as raw:
        if path.suffix != ".gz":
            while chunk := raw.read(chunk_size):
                advance(len(chunk))
                yield chunk
            return

        consumed = 0
        with gzip.GzipFile(fileobj=raw) as inflated:
            while chunk := inflated.read(chunk_size):
                position = raw.tell()
                advance(position - consumed)
                consumed = position
                yield chunk
            # The gzip trailer may be read after the last data chunk.
            if raw.tell() > consumed:
                advance(raw.tell() - consumed)


class MagentoCli:
    def __init__(
        self,
        *,
        warden: WardenCli,
        console: ConsoleProtocol,
        settings: InstallSettings | None = None,
    ) -> None:
        self._warden = warden
        self._console = console
        self._settings = settings or InstallSettings()

    @property
    def settings(self) -> InstallSettings:
        return self._settings

    def create_project(
        self, package: str, version: str | None = None
    ) -> Result[None, ProcessError]:
        """Fetch the meta-package skeleton and copy it into the web root."""
        create: Step = (
            "composer",
            "create-project",
            "-q",
            "--no-interaction",
            "--prefer-dist",
            "--no-install",
            f"--repository-url={MARKETPLACE_URL}",
            package,
            CREATE_PROJECT_DIR,
        )
        if version:
            create = (*create, version)
        copy: Step = ("rsync", "-a", f"{CREATE_PROJECT_DIR}/", CONTAINER_WEB_ROOT)
        return self._run_each([create, copy])

    def install_dependencies(self) -> Result[None, ProcessError]:
        return self._run_each(
            [
                ("composer", "global", "require", "hirak/prestissimo"),
                ("composer", "install"),
            ]
        )

    def reset_database(self) -> Result[None, ProcessError]:
        name = self._settings.db_name
        return self._warden.db_execute(f"drop database {name}; create database {name};")

    def import_database(self, dump: Path) -> Result[None, ProcessError | DumpError]:
        """Stream ``dump`` into the database container."""
        try:
            total = dump.stat().st_size
        except OSError as e:
            return Err(DumpError(f"Cannot read database dump: {e}", path=dump))

        with self._console.transfer(dump.name, total) as advance:
            try:
                result = self._warden.db_import(iter_dump(dump, advance))
            except (OSError, EOFError, zlib.error) as e:
                return Err(DumpError(f"Cannot read database dump {dump}: {e}", path=dump))
        if isinstance(result, Err):
            return result
        return Ok(None)

    def setup_install(self) -> Result[None, ProcessError]:
        return self._run_each(
            [
                ("rm", "-vf", "app/etc/config.php", "app/etc/env.php"),
                ("bin/magento", "setup:install", *self._settings.setup_install_args()),
            ]
        )

    def configure_clean_install(self, front_url: str) -> Result[None, ProcessError]:
        """Merge local overrides and switch the fresh install to developer settings."""
        return self._run_each(
            [
                ("php", "-r", _MERGE_ENV_PHP),
                ("cp", "-n", "app/etc/env.php", "app/etc/env.php.warden.php"),
                ("ln", "-fsn", "env.php.warden.php", "app/etc/env.php"),
                ("bin/magento", "app:config:import"),
                *self._base_url_steps(front_url),
                ("bin/magento", "deploy:mode:set", "-s", "developer"),
                ("bin/magento", "cache:disable", "block_html", "full_page"),
                ("bin/magento", "app:config:dump", "themes", "scopes", "i18n"),
            ]
        )

    def reindex(self) -> Result[None, ProcessError]:
        return self._warden.php("bin/magento", "indexer:reindex")

    def link_env_php(self) -> Result[None, ProcessError]:
        return self._warden.php("ln", "-fsn", "env.php.warden.php", "app/etc/env.php")

    def upgrade(self) -> Result[None, ProcessError]:
        """Bring an imported database up to the code's schema and data."""
        return self._run_each(
            [
                ("bin/magento", "cache:flush"),
                ("bin/magento", "app:config:import"),
                ("bin/magento", "setup:db-schema:upgrade"),
                ("bin/magento", "setup:db-data:upgrade"),
            ]
        )

    def flush_cache(self) -> Result[None, ProcessError]:
        return self._warden.php("bin/magento", "cache:flush")

    def create_admin(self, account: AdminAccount) -> Result[None, ProcessError]:
        return self._warden.php(
            "bin/magento",
            "admin:user:create",
            f"--admin-password={account.password}",
            f"--admin-user={account.username}",
            f"--admin-firstname={account.firstname}",
            f"--admin-lastname={account.lastname}",
            f"--admin-email={account.email}",
        )

    def _base_url_steps(self, front_url: str) -> list[Step]:
        return [
            ("bin/magento", "config:set", "-q", "--lock-env", f"web/{scope}/base_url", front_url)
            for scope in ("unsecure", "secure")
        ]

    def _run_each(self, steps: Sequence[Step]) -> Result[None, ProcessError]:
        for step in steps:
            result = self._warden.php(*step)
            if isinstance(result, Err):
                return result
        return Ok(None)

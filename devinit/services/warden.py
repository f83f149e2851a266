"""Thin wrapper over the ``warden`` CLI.

Every call is echoed before it runs. In dry-run mode the echo is all that
happens.
"""

from __future__ import annotations

import shlex
from collections.abc import Iterable
from pathlib import Path

from devinit.core.result import Ok, Result
from devinit.output.console import ConsoleProtocol, Style
from devinit.platform.process import ProcessError, run_silent, run_with_input

__all__ = ["PHP_SERVICE", "WardenCli"]

PHP_SERVICE = "php-fpm"
DB_SERVICE_HOST = "db"
DB_SERVICE_PORT = 3306


class WardenCli:
    def __init__(
        self,
        *,
        project_root: Path,
        console: ConsoleProtocol,
        dry_run: bool = False,
        executable: str = "warden",
    ) -> None:
        self._root = project_root
        self._console = console
        self._dry_run = dry_run
        self._executable = executable

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def command(self, *args: str) -> list[str]:
        return [self._executable, *args]

    def call(self, *args: str) -> Result[None, ProcessError]:
        """Run ``warden <args>`` with output streaming to the terminal."""
        cmd = self._echo(*args)
        if self._dry_run:
            return Ok(None)
        return run_silent(cmd, cwd=self._root)

    def feed(self, args: Iterable[str], chunks: Iterable[bytes]) -> Result[None, ProcessError]:
        """Run ``warden <args>`` with ``chunks`` written to its stdin."""
        cmd = self._echo(*args)
        if self._dry_run:
            return Ok(None)
        return run_with_input(cmd, cwd=self._root, chunks=chunks)

    # Environment lifecycle

    def up(self) -> Result[None, ProcessError]:
        """Start the global services (traefik, dnsmasq, portainer...)."""
        return self.call("up")

    def sign_certificate(self, domain: str) -> Result[None, ProcessError]:
        return self.call("sign-certificate", domain)

    def env_pull(self) -> Result[None, ProcessError]:
        return self.call("env", "pull", "--ignore-pull-failures")

    def env_build(self) -> Result[None, ProcessError]:
        return self.call("env", "build", "--pull")

    def env_up(self) -> Result[None, ProcessError]:
        return self.call("env", "up", "-d")

    def wait_for_db(
        self, host: str = DB_SERVICE_HOST, port: int = DB_SERVICE_PORT
    ) -> Result[None, ProcessError]:
        """Block until the database container accepts TCP connections."""
        script = f"while ! nc -z {host} {port} </dev/null; do sleep 2; done"
        return self.call("shell", "-c", script)

    def sync_start(self) -> Result[None, ProcessError]:
        return self.call("sync", "start")

    # Container commands

    def php(self, *args: str) -> Result[None, ProcessError]:
        """Run a command inside the php-fpm container."""
        return self.call("env", "exec", "-T", PHP_SERVICE, *args)

    def db_execute(self, sql: str) -> Result[None, ProcessError]:
        return self.call("db", "connect", "-e", sql)

    def db_import(self, chunks: Iterable[bytes]) -> Result[None, ProcessError]:
        return self.feed(("db", "import"), chunks)

    def _echo(self, *args: str) -> list[str]:
        cmd = self.command(*args)
        self._console.print(f"$ {shlex.join(cmd)}", Style.DIM)
        return cmd

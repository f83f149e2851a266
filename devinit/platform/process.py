"""Subprocess execution with Result-based error handling.

Two shapes cover every external call the bootstrap makes:

- ``run_silent``: let output stream to the terminal (long-running steps)
- ``run_with_input``: stream bytes into stdin (database import)
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from devinit.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run_silent", "run_with_input"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process (-1 if it could not start).
        stdout: Standard output (may be empty).
        stderr: Standard error, or the launch error message.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:4])
        if len(self.command) > 4:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def _launch_error(cmd: list[str], error: OSError) -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(error)))


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command, letting its output stream to the terminal.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return _launch_error(cmd, e)

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)


def run_with_input(
    cmd: list[str],
    cwd: Path,
    chunks: Iterable[bytes],
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command, writing ``chunks`` to its stdin.

    The command's stdout/stderr stream to the terminal. If the command exits
    early the remaining input is discarded and its exit code is reported.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.Popen(cmd, cwd=str(cwd), env=env, stdin=subprocess.PIPE)
    except OSError as e:
        return _launch_error(cmd, e)

    assert proc.stdin is not None
    returncode = -1
    try:
        for chunk in chunks:
            proc.stdin.write(chunk)
    except BrokenPipeError:
        pass
    finally:
        try:
            proc.stdin.close()
        except BrokenPipeError:
            pass
        # Also reached when producing the input raised; the child sees EOF and exits.
        returncode = proc.wait()

    if returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr=""))

    return Ok(None)

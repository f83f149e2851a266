from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from devinit.core.config import EnvConfig, load_env_config
from devinit.core.errors import ErrorCode
from devinit.core.project import Project, detect_project
from devinit.core.result import Err
from devinit.output.console import ConsoleProtocol, RichConsole, Style
from devinit.platform.detection import PlatformInfo, detect


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    env: EnvConfig
    platform: PlatformInfo
    console: ConsoleProtocol


def build_context(project_dir: Path | None = None) -> CLIContext:
    console = RichConsole()

    project_result = detect_project(project_dir)
    if isinstance(project_result, Err):
        console.error(project_result.error.message)
        if project_result.error.hint:
            console.print(f"hint: {project_result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    project = project_result.value
    env_result = load_env_config(project.env_path)
    if isinstance(env_result, Err):
        console.error(env_result.error.message)
        if env_result.error.hint:
            console.print(f"hint: {env_result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    env = env_result.value
    return CLIContext(
        project=project.with_web_root(env.web_root),
        env=env,
        platform=detect(),
        console=console,
    )

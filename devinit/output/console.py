"""Console output abstraction.

Services print through ``ConsoleProtocol`` so they stay independent of the
rendering library and can be tested against ``MockConsole``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import ContextManager, Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
    "step_title",
]

type Advance = Callable[[int], None]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


def step_title(message: str, now: datetime | None = None) -> str:
    """Format a step header: ``==> [HH:MM:SS] message``."""
    now = now or datetime.now()
    return f"==> [{now:%H:%M:%S}] {message}"


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Print a section header, preceded by a blank line."""
        ...

    def table(self, rows: Sequence[tuple[str, str]]) -> None:
        """Print two-column label/value rows as a boxed table."""
        ...

    def transfer(self, description: str, total: int) -> ContextManager[Advance]:
        """Report progress of a byte transfer.

        The context yields a callable taking the number of bytes just
        processed.
        """
        ...


class RichConsole:
    """Console implementation using Rich library."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console()
        self._err_console = Console(stderr=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        # Command lines and paths may contain [brackets]; never parse markup here.
        if rich_style:
            self._console.print(message, style=rich_style, markup=False, highlight=False)
        else:
            self._console.print(message, markup=False, highlight=False)

    def error(self, message: str) -> None:
        self._err_console.print(f"[red bold]ERROR[/red bold]: {_escape(message)}")

    def warning(self, message: str) -> None:
        self._err_console.print(f"[yellow]WARNING[/yellow]: {_escape(message)}")

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False, highlight=False)

    def table(self, rows: Sequence[tuple[str, str]]) -> None:
        from rich import box
        from rich.table import Table

        table = Table(box=box.ASCII, show_header=False, show_lines=True)
        table.add_column(no_wrap=True)
        table.add_column(no_wrap=True, overflow="fold")
        for label, value in rows:
            table.add_row(label, value)
        self._console.print(table)

    @contextmanager
    def transfer(self, description: str, total: int) -> Iterator[Advance]:
        from rich.progress import (
            BarColumn,
            DownloadColumn,
            Progress,
            TimeRemainingColumn,
            TransferSpeedColumn,
        )

        with Progress(
            "[progress.description]{task.description}",
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self._console,
            transient=False,
        ) as progress:
            task = progress.add_task(description, total=total or None)

            def advance(n: int) -> None:
                progress.update(task, advance=n)

            yield advance


def _escape(message: str) -> str:
    from rich.markup import escape

    return escape(message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


def _empty_transfers() -> list[tuple[str, int, int]]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    transfers: list[tuple[str, int, int]] = field(default_factory=_empty_transfers)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"ERROR: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"WARNING: {message}", Style.WARNING))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def table(self, rows: Sequence[tuple[str, str]]) -> None:
        for label, value in rows:
            self.outputs.append(OutputRecord(f"{label} | {value}", Style.DEFAULT))

    @contextmanager
    def transfer(self, description: str, total: int) -> Iterator[Advance]:
        done = 0

        def advance(n: int) -> None:
            nonlocal done
            done += n

        try:
            yield advance
        finally:
            self.transfers.append((description, total, done))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    @property
    def headers(self) -> list[str]:
        return [o.message for o in self.outputs if o.style == Style.HEADER]

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exit status mapping and per-command console output for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

import typer
from rich.console import Console
from rich.text import Text

from ..errors import InterruptedWaitError, LaunchError, LaunchPhase
from ..logging import Status, emit, enable_verbose_logging

EXIT_INTERRUPTED: Final[int] = 130
EXIT_CODES: Final[dict[LaunchPhase, int]] = {
    LaunchPhase.CONFIGURATION: 2,
    LaunchPhase.CATALOG: 3,
    LaunchPhase.ANALYSIS: 3,
    LaunchPhase.RESOLUTION: 3,
    LaunchPhase.PACKAGING: 4,
    LaunchPhase.SPAWN: 5,
    LaunchPhase.READINESS: 6,
    LaunchPhase.SHUTDOWN: 1,
}


def exit_code_for(error: LaunchError) -> int:
    """Return the process exit status reported for *error*."""

    if isinstance(error, InterruptedWaitError):
        return EXIT_INTERRUPTED
    return EXIT_CODES.get(error.phase, 1)


@dataclass(slots=True)
class CLILogger:
    """Status output for one command invocation, honouring its emoji flag."""

    console: Console
    use_emoji: bool
    debug_enabled: bool = False

    def _emit(self, status: Status, message: str) -> None:
        emit(status, message, use_emoji=self.use_emoji)

    def fail(self, message: str) -> None:
        """Report a failed command or launch phase."""

        self._emit(Status.FAIL, message)

    def warn(self, message: str) -> None:
        """Report a non-fatal condition such as an empty analysis."""

        self._emit(Status.WARN, message)

    def ok(self, message: str) -> None:
        """Report a successful outcome."""

        self._emit(Status.OK, message)

    def info(self, message: str) -> None:
        """Report launch progress."""

        self._emit(Status.INFO, message)

    def echo(self, message: str) -> None:
        """Write a bare line such as a module label."""

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Print *message* dimmed when ``--verbose`` was given; otherwise do nothing."""

        if not self.debug_enabled:
            return
        line = Text("[debug] ", style="bold cyan")
        line.append(message, style="dim")
        self.console.print(line)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` with its own Rich console.

    With *debug* set, records from the ``bootrun`` loggers also go to stderr.
    """

    if debug:
        enable_verbose_logging()
    return CLILogger(console=Console(no_color=no_color, highlight=False), use_emoji=emoji, debug_enabled=debug)


__all__ = [
    "CLILogger",
    "EXIT_CODES",
    "EXIT_INTERRUPTED",
    "build_cli_logger",
    "exit_code_for",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console status lines for launch progress and diagnostic logger wiring."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Final

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

PACKAGE_LOGGER: Final[str] = "bootrun"
_VERBOSE_MARKER: Final[str] = "_bootrun_verbose_configured"


@dataclass(frozen=True, slots=True)
class _Badge:
    emoji: str
    style: str


class Status(Enum):
    """Severity of a console status line."""

    INFO = _Badge("ℹ️ ", "cyan")
    OK = _Badge("✅ ", "green")
    WARN = _Badge("⚠️ ", "yellow")
    FAIL = _Badge("❌ ", "red")


def detect_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False


class ConsoleManager:
    """Hand out one Rich console per ``(color, emoji, tty)`` combination.

    The tty flag is part of the key so a console built while stdout was a pipe
    is never reused once stdout becomes a terminal, or the other way round.
    """

    def __init__(self) -> None:
        self._consoles: dict[tuple[bool, bool, bool], Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        tty = detect_tty()
        key = (color, emoji, tty)
        console = self._consoles.get(key)
        if console is None:
            styled = color and tty
            console = Console(
                color_system="auto" if styled else None,
                force_terminal=tty,
                no_color=not styled,
                emoji=emoji,
                soft_wrap=True,
            )
            self._consoles[key] = console
        return console

    def clear(self) -> None:
        self._consoles.clear()


@lru_cache(maxsize=1)
def get_console_manager() -> ConsoleManager:
    """Return the process-wide :class:`ConsoleManager`."""

    return ConsoleManager()


def emit(status: Status, msg: str, *, use_emoji: bool = False, use_color: bool | None = None) -> None:
    """Print one status line, styled for *status* when colour is enabled.

    Args:
        status: Severity controlling the emoji badge and colour.
        msg: Message text; Rich markup is not interpreted.
        use_emoji: Prefix the line with the status badge.
        use_color: Force colour on or off; defaults to whether stdout is a tty.
    """

    colored = detect_tty() if use_color is None else use_color
    badge = status.value
    line = Text(f"{badge.emoji}{msg}" if use_emoji else msg)
    if colored:
        line.stylize(badge.style)
    get_console_manager().get(color=colored, emoji=use_emoji).print(line)


def info(msg: str, *, use_emoji: bool = False, use_color: bool | None = None) -> None:
    """Print a progress line (cyan when coloured).

    Args:
        msg: Message text.
        use_emoji: Prefix the line with an information badge.
        use_color: Force colour on or off; defaults to tty detection.
    """

    emit(Status.INFO, msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool = False, use_color: bool | None = None) -> None:
    """Print a success line (green when coloured)."""

    emit(Status.OK, msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool = False, use_color: bool | None = None) -> None:
    """Print a warning line (yellow when coloured)."""

    emit(Status.WARN, msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool = False, use_color: bool | None = None) -> None:
    """Print a failure line (red when coloured)."""

    emit(Status.FAIL, msg, use_emoji=use_emoji, use_color=use_color)


def section(title: str, *, use_color: bool) -> None:
    """Print a header separating blocks of command output."""

    console = get_console_manager().get(color=use_color, emoji=True)
    if not use_color:
        console.print(f"\n--- {title} ---")
        return
    console.print()
    console.print(Rule(title))


def enable_verbose_logging(stream=None) -> logging.Logger:  # type: ignore[no-untyped-def]
    """Route ``bootrun`` library records at DEBUG level to *stream* (stderr by default).

    Repeated calls leave the single installed handler in place.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if getattr(logger, _VERBOSE_MARKER, False):
        return logger
    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    setattr(logger, _VERBOSE_MARKER, True)
    return logger


__all__ = [
    "ConsoleManager",
    "PACKAGE_LOGGER",
    "Status",
    "detect_tty",
    "emit",
    "enable_verbose_logging",
    "fail",
    "get_console_manager",
    "info",
    "ok",
    "section",
    "warn",
]

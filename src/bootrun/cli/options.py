# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer option declarations and CLI override handling for ``bootrun start``."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from ..config import DEFAULT_SETTINGS_FILE, LaunchOptions
from ..errors import ConfigError

CONFIG_OPTION = Annotated[
    Path,
    typer.Option("--config", "-c", help="Settings file with [project] and [launch] tables."),
]
UBER_JAR_OPTION = Annotated[
    bool | None,
    typer.Option("--uber-jar/--no-uber-jar", help="Launch the self-contained executable archive."),
]
DEBUG_OPTION = Annotated[
    int | None,
    typer.Option("--debug", min=1, max=65535, help="Suspend the JVM and listen for a debugger on PORT."),
]
JVM_ARG_OPTION = Annotated[
    list[str] | None,
    typer.Option("--jvm-arg", help="Additional JVM argument (repeatable)."),
]
MODULE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--module", "-m", help="Explicit module: name, group:name or group:name:version (repeatable)."),
]
MODULE_PATH_OPTION = Annotated[
    list[str] | None,
    typer.Option("--module-path", help="Additional module search path (repeatable)."),
]
STDOUT_FILE_OPTION = Annotated[
    Path | None,
    typer.Option("--stdout-file", help="Redirect the application's stdout to FILE."),
]
STDERR_FILE_OPTION = Annotated[
    Path | None,
    typer.Option("--stderr-file", help="Redirect the application's stderr to FILE."),
]
MAIN_CLASS_OPTION = Annotated[
    str | None,
    typer.Option("--main-class", help="Override the entry point class."),
]
WAIT_OPTION = Annotated[
    bool,
    typer.Option("--wait/--no-wait", help="Block until the application exits."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Stream diagnostic logging to stderr."),
]


def normalize_cli_values(values: Sequence[str] | None) -> tuple[str, ...]:
    """Return sanitized CLI values preserving order."""

    if not values:
        return ()
    return tuple(stripped for entry in values if entry and (stripped := entry.strip()))


@dataclass(slots=True)
class StartCLIOptions:
    """Capture CLI overrides supplied to the start command."""

    config: Path = Path(DEFAULT_SETTINGS_FILE)
    uber_jar: bool | None = None
    debug_port: int | None = None
    jvm_arguments: tuple[str, ...] = ()
    modules: tuple[str, ...] = ()
    module_paths: tuple[str, ...] = ()
    stdout_file: Path | None = None
    stderr_file: Path | None = None
    main_class: str | None = None
    wait: bool = True
    emoji: bool = True
    verbose: bool = False

    def apply(self, options: LaunchOptions) -> LaunchOptions:
        """Return a copy of *options* with the CLI overrides layered on top.

        Repeatable options extend the configured lists; scalar options replace
        the configured value when given.

        Raises:
            ConfigError: If an override fails validation.
        """

        updates: dict[str, Any] = {"wait_for_process": self.wait}
        if self.uber_jar is not None:
            updates["use_uber_jar"] = self.uber_jar
        if self.debug_port is not None:
            updates["debug_port"] = self.debug_port
        if self.jvm_arguments:
            updates["jvm_arguments"] = [*options.jvm_arguments, *self.jvm_arguments]
        if self.modules:
            updates["modules"] = [*options.modules, *self.modules]
        if self.module_paths:
            updates["module_paths"] = [*options.module_paths, *self.module_paths]
        if self.stdout_file is not None:
            updates["stdout_file"] = self.stdout_file
        if self.stderr_file is not None:
            updates["stderr_file"] = self.stderr_file
        if self.main_class:
            updates["main_class"] = self.main_class

        merged = options.model_dump()
        merged.update(updates)
        try:
            return LaunchOptions.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"invalid command line option: {exc}") from exc


__all__ = [
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "JVM_ARG_OPTION",
    "MAIN_CLASS_OPTION",
    "MODULE_OPTION",
    "MODULE_PATH_OPTION",
    "STDERR_FILE_OPTION",
    "STDOUT_FILE_OPTION",
    "StartCLIOptions",
    "UBER_JAR_OPTION",
    "VERBOSE_OPTION",
    "WAIT_OPTION",
    "normalize_cli_values",
]

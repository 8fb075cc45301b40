# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Immutable process specification handed to the supervisor."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Final

from ..errors import UnsupportedPackagingError

DEFAULT_READY_MARKER: Final[str] = "WFSWARM99999"
DEFAULT_ERROR_MARKERS: Final[tuple[str, ...]] = ('Exception in thread "main"',)
MODULE_PATHS_PROPERTY: Final[str] = "swarm.module.paths"
DEBUG_AGENT_TEMPLATE: Final[str] = "-agentlib:jdwp=transport=dt_socket,server=y,suspend=y,address={port}"


class PackagingKind(StrEnum):
    """Closed set of launchable packaging kinds."""

    EXECUTABLE_ARCHIVE = "executable-archive"
    WEB_ARCHIVE = "war"
    PLAIN_ARCHIVE = "jar"

    @classmethod
    def select(cls, packaging: str, *, use_uber_jar: bool = False) -> PackagingKind:
        """Return the kind for a project packaging string.

        Args:
            packaging: Packaging declared by the build (``"war"`` or ``"jar"``).
            use_uber_jar: Launch the self-contained executable archive instead.

        Returns:
            PackagingKind: Selected kind.

        Raises:
            UnsupportedPackagingError: If *packaging* is neither ``war`` nor ``jar``
                and the executable archive was not requested.
        """

        if use_uber_jar:
            return cls.EXECUTABLE_ARCHIVE
        if packaging == cls.WEB_ARCHIVE.value:
            return cls.WEB_ARCHIVE
        if packaging == cls.PLAIN_ARCHIVE.value:
            return cls.PLAIN_ARCHIVE
        raise UnsupportedPackagingError(f"Unsupported packaging: {packaging}")

    @property
    def needs_classpath(self) -> bool:
        """Return ``True`` when the launch requires a computed classpath."""

        return self is not PackagingKind.EXECUTABLE_ARCHIVE


@dataclass(frozen=True, slots=True)
class ApplicationArtifact:
    """The built application: where it lives and the name it runs under."""

    path: Path
    name: str


@dataclass(frozen=True, slots=True)
class ReadinessProbe:
    """Output markers that signal deployment completion or failure."""

    ready_marker: str = DEFAULT_READY_MARKER
    error_markers: tuple[str, ...] = DEFAULT_ERROR_MARKERS

    def is_ready(self, line: str) -> bool:
        """Return ``True`` when *line* carries the readiness marker."""

        return self.ready_marker in line

    def is_error(self, line: str) -> bool:
        """Return ``True`` when *line* contains any configured error marker."""

        return any(marker in line for marker in self.error_markers)


@dataclass(frozen=True, slots=True)
class LaunchConfiguration:
    """Everything needed to spawn the application process.

    Built once per launch and never mutated afterwards.
    """

    java_executable: str = "java"
    kind: PackagingKind = PackagingKind.PLAIN_ARCHIVE
    application: ApplicationArtifact | None = None
    executable_archive: Path | None = None
    classpath: tuple[Path, ...] = ()
    module_paths: tuple[Path, ...] = ()
    main_class: str | None = None
    jvm_arguments: tuple[str, ...] = ()
    arguments: tuple[str, ...] = ()
    properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    environment: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    working_directory: Path | None = None
    debug_port: int | None = None
    stdout_file: Path | None = None
    stderr_file: Path | None = None
    readiness: ReadinessProbe = field(default_factory=ReadinessProbe)

    @property
    def debug_argument(self) -> str | None:
        """Return the debug agent argument when a debug port is configured."""

        if self.debug_port is None:
            return None
        return DEBUG_AGENT_TEMPLATE.format(port=self.debug_port)

    def system_properties(self) -> dict[str, str]:
        """Return the ``-D`` properties, including the module search path."""

        properties = dict(self.properties)
        if self.module_paths:
            properties[MODULE_PATHS_PROPERTY] = os.pathsep.join(str(path) for path in self.module_paths)
        return properties

    def command_line(self) -> tuple[str, ...]:
        """Return the full argument vector, executable first."""

        command: list[str] = [self.java_executable, *self.jvm_arguments]
        if (debug := self.debug_argument) is not None:
            command.append(debug)
        properties = self.system_properties()
        command.extend(f"-D{key}={properties[key]}" for key in sorted(properties))
        if self.executable_archive is not None:
            command.extend(("-jar", str(self.executable_archive)))
        elif self.main_class is not None:
            if self.classpath:
                command.extend(("-classpath", os.pathsep.join(str(entry) for entry in self.classpath)))
            command.append(self.main_class)
        command.extend(self.arguments)
        return tuple(command)


__all__ = [
    "ApplicationArtifact",
    "DEBUG_AGENT_TEMPLATE",
    "DEFAULT_ERROR_MARKERS",
    "DEFAULT_READY_MARKER",
    "LaunchConfiguration",
    "MODULE_PATHS_PROPERTY",
    "PackagingKind",
    "ReadinessProbe",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Assemble a :class:`LaunchConfiguration` from build metadata and user options."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Final

from ..catalog.loader import DEFAULT_MAIN_CLASS
from ..config import LaunchOptions, ProjectMetadata
from ..resolution.closure import DependencyClosure
from .models import ApplicationArtifact, LaunchConfiguration, PackagingKind, ReadinessProbe

LOGGER = logging.getLogger(__name__)

APP_NAME_PROPERTY: Final[str] = "swarm.app.name"
REMOTE_REPOSITORIES_PROPERTY: Final[str] = "remote.maven.repo"
EXECUTABLE_ARCHIVE_SUFFIX: Final[str] = "-swarm.jar"
JAVA_HOME_ENV: Final[str] = "JAVA_HOME"
_ARCHIVE_EXTENSIONS: Final[tuple[str, ...]] = (".war", ".jar")


def application_artifact(kind: PackagingKind, project: ProjectMetadata) -> ApplicationArtifact:
    """Return the built artifact location and run name for *kind*.

    * executable archive: ``<build>/<final name without extension>-swarm.jar``
    * web archive: ``<build>/<final name>.war``
    * plain archive: the compiled output directory, named ``<final name>.jar``
    """

    final_name = project.final_name
    if kind is PackagingKind.EXECUTABLE_ARCHIVE:
        stem = final_name[:-4] if final_name.endswith(_ARCHIVE_EXTENSIONS) else final_name
        name = f"{stem}{EXECUTABLE_ARCHIVE_SUFFIX}"
        return ApplicationArtifact(path=project.build_directory / name, name=name)
    if kind is PackagingKind.WEB_ARCHIVE:
        name = final_name if final_name.endswith(".war") else f"{final_name}.war"
        return ApplicationArtifact(path=project.build_directory / name, name=name)
    name = final_name if final_name.endswith(".jar") else f"{final_name}.jar"
    return ApplicationArtifact(path=project.output_directory, name=name)


class LaunchConfigurationBuilder:
    """Combine resolved dependencies with project metadata into a process specification."""

    def __init__(self, *, default_main_class: str = DEFAULT_MAIN_CLASS, env: Mapping[str, str] | None = None) -> None:
        """Initialise the builder.

        Args:
            default_main_class: Entry point used when the user names none.
            env: Host environment consulted for ``JAVA_HOME``; defaults to ``os.environ``.
        """

        self._default_main_class = default_main_class
        self._env = os.environ if env is None else env

    def build(
        self,
        kind: PackagingKind,
        closure: DependencyClosure | None,
        project: ProjectMetadata,
        options: LaunchOptions,
    ) -> LaunchConfiguration:
        """Return the launch configuration for *kind*.

        Args:
            kind: Packaging kind selected for the launch.
            closure: Resolved dependencies; ignored for the executable archive.
            project: Build metadata.
            options: User-supplied launch options.

        Returns:
            LaunchConfiguration: Immutable process specification.
        """

        artifact = application_artifact(kind, project)
        if kind is PackagingKind.EXECUTABLE_ARCHIVE:
            LOGGER.debug("executable archive %s", artifact.path)
            executable_archive: Path | None = artifact.path
            classpath: tuple[Path, ...] = ()
            main_class: str | None = None
        else:
            LOGGER.debug("application %s at %s", artifact.name, artifact.path)
            executable_archive = None
            dependency_entries = closure.classpath() if closure is not None else ()
            classpath = (*dependency_entries, project.output_directory)
            main_class = options.main_class or self._default_main_class

        properties: dict[str, str] = {APP_NAME_PROPERTY: artifact.name}
        properties.update(options.properties)
        properties[REMOTE_REPOSITORIES_PROPERTY] = ",".join(project.remote_repositories)

        readiness = ReadinessProbe()
        if options.readiness_marker is not None:
            readiness = ReadinessProbe(ready_marker=options.readiness_marker, error_markers=readiness.error_markers)
        if options.error_markers is not None:
            readiness = ReadinessProbe(ready_marker=readiness.ready_marker, error_markers=tuple(options.error_markers))

        return LaunchConfiguration(
            java_executable=self._java_executable(options),
            kind=kind,
            application=artifact,
            executable_archive=executable_archive,
            classpath=classpath,
            module_paths=tuple(project.output_directory / entry for entry in options.module_paths),
            main_class=main_class,
            jvm_arguments=tuple(options.jvm_arguments),
            arguments=tuple(options.arguments),
            properties=MappingProxyType(properties),
            environment=MappingProxyType(dict(options.environment)),
            working_directory=project.base_directory,
            debug_port=options.debug_port,
            stdout_file=options.stdout_file,
            stderr_file=options.stderr_file,
            readiness=readiness,
        )

    def _java_executable(self, options: LaunchOptions) -> str:
        if options.java_executable:
            return options.java_executable
        java_home = options.environment.get(JAVA_HOME_ENV) or self._env.get(JAVA_HOME_ENV)
        if java_home:
            return str(Path(java_home) / "bin" / "java")
        return "java"


def build_launch_configuration(
    kind: PackagingKind,
    closure: DependencyClosure | None,
    project: ProjectMetadata,
    options: LaunchOptions,
    *,
    default_main_class: str = DEFAULT_MAIN_CLASS,
) -> LaunchConfiguration:
    """Functional shortcut for :meth:`LaunchConfigurationBuilder.build`."""

    return LaunchConfigurationBuilder(default_main_class=default_main_class).build(kind, closure, project, options)


__all__ = [
    "APP_NAME_PROPERTY",
    "EXECUTABLE_ARCHIVE_SUFFIX",
    "LaunchConfigurationBuilder",
    "REMOTE_REPOSITORIES_PROPERTY",
    "application_artifact",
    "build_launch_configuration",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Orchestrate a complete launch: classpath discovery, spawn and readiness."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .analysis.usage import UsageAnalyzer
from .catalog.loader import DEFAULT_MAIN_CLASS, ModuleCatalog, load_catalog
from .config import LaunchOptions, ProjectMetadata
from .errors import ConfigError, LaunchError, LaunchPhase
from .launch.builder import LaunchConfigurationBuilder, application_artifact
from .launch.models import LaunchConfiguration, PackagingKind
from .logging import info, ok
from .resolution.closure import (
    DependencyClosure,
    DependencyClosureResolver,
    declared_closure,
    has_bootstrap_dependency,
)
from .resolution.resolver import DEFAULT_LOCAL_REPOSITORY, CoordinateResolver, LocalRepositoryResolver
from .runtime.supervisor import LifecycleState, ProcessSupervisor

LOGGER = logging.getLogger(__name__)

_KIND_LABELS = {
    PackagingKind.EXECUTABLE_ARCHIVE: "executable archive",
    PackagingKind.WEB_ARCHIVE: ".war",
    PackagingKind.PLAIN_ARCHIVE: ".jar",
}


@dataclass(slots=True)
class LaunchResult:
    """Outcome of :func:`launch_application`.

    ``error`` is populated instead of raising when any launch phase fails; the
    supervisor remains available as the live process handle.
    """

    supervisor: ProcessSupervisor
    configuration: LaunchConfiguration | None = None
    closure: DependencyClosure | None = None
    error: LaunchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def phase(self) -> LaunchPhase | None:
        """Return the phase the launch failed in, if it failed."""

        return None if self.error is None else self.error.phase

    @property
    def state(self) -> LifecycleState:
        return self.supervisor.state


class Launcher:
    """Drive one launch from project metadata to a supervised, ready process."""

    def __init__(
        self,
        *,
        catalog: ModuleCatalog | None = None,
        resolver: CoordinateResolver | None = None,
        supervisor_factory: Callable[[], ProcessSupervisor] = ProcessSupervisor,
        install_shutdown_hook: bool = True,
        use_emoji: bool = False,
    ) -> None:
        """Configure collaborators.

        Args:
            catalog: Module catalog; the packaged catalog is loaded on demand when omitted.
            resolver: Coordinate resolver; a local repository resolver is used when omitted.
            supervisor_factory: Factory for the process supervisor.
            install_shutdown_hook: Stop the child when the host interpreter exits.
            use_emoji: Decorate console output with emoji.
        """

        self._catalog = catalog
        self._resolver = resolver
        self._supervisor_factory = supervisor_factory
        self._install_shutdown_hook = install_shutdown_hook
        self._use_emoji = use_emoji

    @property
    def catalog(self) -> ModuleCatalog:
        if self._catalog is None:
            self._catalog = load_catalog()
        return self._catalog

    def prepare(
        self,
        project: ProjectMetadata,
        options: LaunchOptions,
    ) -> tuple[LaunchConfiguration, DependencyClosure | None]:
        """Compute the launch configuration without spawning anything.

        Raises:
            LaunchError: Any packaging, catalog, analysis or resolution failure.
        """

        kind = PackagingKind.select(project.packaging, use_uber_jar=options.use_uber_jar)
        info(f"Starting {_KIND_LABELS[kind]}", use_emoji=self._use_emoji)
        closure = self._closure(kind, project, options) if kind.needs_classpath else None
        builder = LaunchConfigurationBuilder(default_main_class=self._default_main_class(kind))
        return builder.build(kind, closure, project, options), closure

    def launch(self, project: ProjectMetadata, options: LaunchOptions) -> LaunchResult:
        """Run the full launch flow and report its outcome without raising."""

        supervisor = self._supervisor_factory()
        result = LaunchResult(supervisor=supervisor)
        try:
            result.configuration, result.closure = self.prepare(project, options)
            supervisor.launch(result.configuration, install_shutdown_hook=self._install_shutdown_hook)
            state = supervisor.await_readiness(options.deploy_timeout)
            if state is LifecycleState.FAILED:
                supervisor.stop(options.stop_grace_period)
                result.error = supervisor.get_error()
                return result
            if state is LifecycleState.RUNNING:
                ok("Application is ready", use_emoji=self._use_emoji)
            if options.wait_for_process:
                try:
                    if supervisor.wait_for(options.stop_grace_period) is LifecycleState.FAILED:
                        result.error = supervisor.get_error()
                finally:
                    supervisor.destroy_forcibly()
        except LaunchError as exc:
            LOGGER.debug("launch failed during %s", exc.phase.value, exc_info=True)
            result.error = exc
        return result

    def _closure(self, kind: PackagingKind, project: ProjectMetadata, options: LaunchOptions) -> DependencyClosure:
        resolver = self._resolver or LocalRepositoryResolver(options.local_repository or DEFAULT_LOCAL_REPOSITORY)
        if has_bootstrap_dependency(project.dependencies):
            return declared_closure(project.dependencies, resolver)

        info("No bootstrap dependency found - scanning for needed modules", use_emoji=self._use_emoji)
        catalog = self.catalog
        detected = UsageAnalyzer(catalog).detect(application_artifact(kind, project).path)
        info("Detected modules:", use_emoji=self._use_emoji)
        for label in detected.labels:
            info(f"    {label}", use_emoji=False)
        try:
            explicit = [catalog.parse_module(spec) for spec in options.modules]
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        closure = DependencyClosureResolver(catalog, resolver).compute_closure(project.dependencies, detected, explicit)
        info("Using modules:", use_emoji=self._use_emoji)
        for descriptor in closure.modules:
            info(f"    {descriptor.gav}", use_emoji=False)
        return closure

    def _default_main_class(self, kind: PackagingKind) -> str:
        # The executable archive names its own entry point.
        if kind.needs_classpath:
            return self.catalog.default_main_class
        return DEFAULT_MAIN_CLASS


def launch_application(
    project: ProjectMetadata,
    options: LaunchOptions,
    *,
    catalog: ModuleCatalog | None = None,
    resolver: CoordinateResolver | None = None,
    supervisor: ProcessSupervisor | None = None,
    install_shutdown_hook: bool = True,
    use_emoji: bool = False,
) -> LaunchResult:
    """Launch the application described by *project* and *options*.

    Failures never escape as exceptions; inspect :attr:`LaunchResult.error`.
    """

    factory: Callable[[], ProcessSupervisor] = ProcessSupervisor if supervisor is None else (lambda: supervisor)
    launcher = Launcher(
        catalog=catalog,
        resolver=resolver,
        supervisor_factory=factory,
        install_shutdown_hook=install_shutdown_hook,
        use_emoji=use_emoji,
    )
    return launcher.launch(project, options)


__all__ = ["LaunchResult", "Launcher", "launch_application"]

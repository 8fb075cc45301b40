# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compute the deduplicated, resolved dependency closure of a launch.

Union order is fixed: declared dependencies first, sorted by coordinate
identity, then module coordinates sorted the same way. Deduplication is keyed
on ``(group, name)`` and the entry added later in that order wins, so a module
version always replaces a conflicting declared version.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..catalog.loader import ModuleCatalog
from ..catalog.models import ModuleDescriptor
from ..coordinates import ArtifactCoordinate, CoordinateKey, DeclaredDependency
from ..errors import CatalogIntegrityError, ResolutionError
from .resolver import CoordinateResolver

LOGGER = logging.getLogger(__name__)

BOOTSTRAP_SENTINEL: Final[CoordinateKey] = CoordinateKey("org.wildfly.swarm", "bootstrap")
LOGGING_BRIDGE: Final[CoordinateKey] = CoordinateKey("org.jboss.logmanager", "jboss-logmanager")


@dataclass(frozen=True, slots=True)
class DependencyClosure:
    """Final set of artifacts required on the launch classpath.

    Attributes:
        modules: Expanded feature modules, sorted by identity.
        artifacts: Deduplicated, resolved coordinates sorted by identity.
    """

    modules: tuple[ModuleDescriptor, ...]
    artifacts: tuple[ArtifactCoordinate, ...]

    @property
    def coordinates(self) -> frozenset[ArtifactCoordinate]:
        """Return the artifacts as an order-free set for membership checks."""

        return frozenset(self.artifacts)

    def classpath(self) -> tuple[Path, ...]:
        """Return the resolved files in serialisation order."""

        return tuple(artifact.path for artifact in self.artifacts if artifact.path is not None)

    def __contains__(self, item: object) -> bool:
        return item in self.coordinates

    def __len__(self) -> int:
        return len(self.artifacts)


def has_bootstrap_dependency(declared: Iterable[DeclaredDependency]) -> bool:
    """Return ``True`` when the project already declares the runtime bootstrap."""

    return any(dependency.coordinate.key == BOOTSTRAP_SENTINEL for dependency in declared)


def runtime_dependencies(
    declared: Iterable[DeclaredDependency],
    *,
    exclude_bootstrap: bool = True,
) -> tuple[ArtifactCoordinate, ...]:
    """Return declared coordinates that ship at runtime, sorted by identity.

    Provided-only and test scoped dependencies are dropped, as is the logging
    bridge. The bootstrap sentinel is dropped unless *exclude_bootstrap* is false.
    """

    kept: list[ArtifactCoordinate] = []
    for dependency in declared:
        key = dependency.coordinate.key
        if key == LOGGING_BRIDGE:
            continue
        if exclude_bootstrap and key == BOOTSTRAP_SENTINEL:
            continue
        if not dependency.scope.shipped_at_runtime:
            continue
        kept.append(dependency.coordinate)
    return tuple(sorted(kept, key=lambda coordinate: coordinate.sort_key))


def deduplicate(coordinates: Iterable[ArtifactCoordinate]) -> tuple[ArtifactCoordinate, ...]:
    """Keep one coordinate per ``(group, name)``; later entries replace earlier ones."""

    by_key: dict[CoordinateKey, ArtifactCoordinate] = {}
    for coordinate in coordinates:
        previous = by_key.get(coordinate.key)
        if previous is not None and previous != coordinate:
            LOGGER.debug("Replacing %s with %s", previous.gav, coordinate.gav)
        by_key[coordinate.key] = coordinate
    return tuple(sorted(by_key.values(), key=lambda coordinate: coordinate.sort_key))


def resolve_coordinates(
    coordinates: Sequence[ArtifactCoordinate],
    resolver: CoordinateResolver | None,
) -> tuple[ArtifactCoordinate, ...]:
    """Attach local files to every coordinate lacking one.

    Args:
        coordinates: Deduplicated coordinates, some possibly already resolved.
        resolver: Collaborator used for the unresolved ones.

    Returns:
        tuple[ArtifactCoordinate, ...]: Resolved coordinates sorted by identity.

    Raises:
        ResolutionError: Naming every coordinate that could not be resolved.
    """

    pending = [coordinate for coordinate in coordinates if coordinate.path is None]
    located: dict[ArtifactCoordinate, Path] = {}
    if pending:
        if resolver is None:
            raise ResolutionError(pending, reason="no coordinate resolver configured")
        try:
            results = resolver.resolve_all(pending)
        except OSError as exc:
            raise ResolutionError(pending, reason=str(exc)) from exc
        for result in results:
            located[result.coordinate] = result.local_file_path
        missing = [coordinate for coordinate in pending if coordinate not in located]
        if missing:
            raise ResolutionError(missing)
    resolved = [
        coordinate if coordinate.path is not None else coordinate.resolved(located[coordinate])
        for coordinate in coordinates
    ]
    return tuple(sorted(resolved, key=lambda coordinate: coordinate.sort_key))


def declared_closure(
    existing: Iterable[DeclaredDependency],
    resolver: CoordinateResolver | None = None,
) -> DependencyClosure:
    """Build a closure straight from declared dependencies, bypassing the catalog.

    Used when the project already declares the bootstrap sentinel, in which
    case the sentinel itself stays on the classpath.
    """

    coordinates = deduplicate(runtime_dependencies(existing, exclude_bootstrap=False))
    return DependencyClosure(modules=(), artifacts=resolve_coordinates(coordinates, resolver))


class DependencyClosureResolver:
    """Expand module selections over the catalog graph and resolve the result."""

    def __init__(self, catalog: ModuleCatalog, resolver: CoordinateResolver | None = None) -> None:
        """Bind the resolver to a catalog and a coordinate resolution collaborator.

        Args:
            catalog: Catalog providing dependency edges.
            resolver: Collaborator attaching local files to coordinates.
        """

        self._catalog = catalog
        self._resolver = resolver

    def expand(self, seed: Iterable[ModuleDescriptor]) -> tuple[ModuleDescriptor, ...]:
        """Return the transitive closure of *seed* over the catalog graph.

        When the seed names a module more than once the later descriptor wins,
        and seed versions take precedence over catalog versions reached through
        dependency edges.

        Raises:
            CatalogIntegrityError: If the graph reachable from *seed* has a cycle
                or an edge to an unknown module.
        """

        pinned: dict[CoordinateKey, ModuleDescriptor] = {}
        for descriptor in seed:
            pinned[descriptor.key] = descriptor
        expanded: dict[CoordinateKey, ModuleDescriptor] = {}
        for key in sorted(pinned):
            self._visit(pinned[key], pinned=pinned, expanded=expanded, trail=[])
        return tuple(sorted(expanded.values(), key=lambda descriptor: descriptor.sort_key))

    def compute_closure(
        self,
        existing: Iterable[DeclaredDependency],
        inferred: Iterable[ModuleDescriptor],
        explicit: Iterable[ModuleDescriptor],
    ) -> DependencyClosure:
        """Return the resolved closure of declared dependencies and module selections.

        Args:
            existing: Dependencies the project already declares.
            inferred: Modules detected by usage analysis.
            explicit: Modules requested by the user.

        Returns:
            DependencyClosure: Deduplicated and resolved artifacts.

        Raises:
            CatalogIntegrityError: If module expansion hits a cycle.
            ResolutionError: If any coordinate cannot be resolved.
        """

        seed = [
            *sorted(inferred, key=lambda descriptor: descriptor.sort_key),
            *sorted(explicit, key=lambda descriptor: descriptor.sort_key),
        ]
        modules = self.expand(seed)
        union = [*runtime_dependencies(existing), *(descriptor.coordinate for descriptor in modules)]
        artifacts = resolve_coordinates(deduplicate(union), self._resolver)
        return DependencyClosure(modules=modules, artifacts=artifacts)

    def _visit(
        self,
        descriptor: ModuleDescriptor,
        *,
        pinned: dict[CoordinateKey, ModuleDescriptor],
        expanded: dict[CoordinateKey, ModuleDescriptor],
        trail: list[CoordinateKey],
    ) -> None:
        key = descriptor.key
        if key in expanded:
            return
        if key in trail:
            cycle = " -> ".join(str(entry) for entry in (*trail[trail.index(key) :], key))
            raise CatalogIntegrityError(f"module dependency cycle detected: {cycle}")
        trail.append(key)
        for dependency in self._catalog.dependencies_of(descriptor):
            self._visit(pinned.get(dependency.key, dependency), pinned=pinned, expanded=expanded, trail=trail)
        trail.pop()
        expanded[key] = descriptor


def compute_closure(
    catalog: ModuleCatalog,
    existing: Iterable[DeclaredDependency],
    inferred: Iterable[ModuleDescriptor],
    explicit: Iterable[ModuleDescriptor],
    *,
    resolver: CoordinateResolver | None = None,
) -> DependencyClosure:
    """Functional shortcut for :meth:`DependencyClosureResolver.compute_closure`."""

    return DependencyClosureResolver(catalog, resolver).compute_closure(existing, inferred, explicit)


__all__ = [
    "BOOTSTRAP_SENTINEL",
    "DependencyClosure",
    "DependencyClosureResolver",
    "LOGGING_BRIDGE",
    "compute_closure",
    "declared_closure",
    "deduplicate",
    "has_bootstrap_dependency",
    "resolve_coordinates",
    "runtime_dependencies",
]

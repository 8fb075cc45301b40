# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Artifact coordinates and declared project dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import Final, NamedTuple

DEFAULT_TYPE: Final[str] = "jar"
_MIN_PARTS: Final[int] = 3
_MAX_PARTS: Final[int] = 5


class CoordinateKey(NamedTuple):
    """Version-independent identity used to deduplicate coordinates."""

    group: str
    name: str

    def __str__(self) -> str:
        return f"{self.group}:{self.name}"


@dataclass(frozen=True, slots=True)
class ArtifactCoordinate:
    """Identify a single artifact by group, name, version, classifier and type.

    Equality and hashing ignore ``path`` so a coordinate compares equal before
    and after resolution.

    Attributes:
        group: Artifact group identifier.
        name: Artifact name (``artifactId``).
        version: Artifact version string.
        classifier: Optional classifier such as ``"sources"``.
        type: Packaging type, ``"jar"`` by default.
        path: Local file once resolved.
    """

    group: str
    name: str
    version: str
    classifier: str | None = None
    type: str = DEFAULT_TYPE
    path: Path | None = field(default=None, compare=False, hash=False)

    @classmethod
    def parse(cls, text: str) -> ArtifactCoordinate:
        """Parse ``group:name[:type[:classifier]]:version`` notation.

        Args:
            text: Coordinate text.

        Returns:
            ArtifactCoordinate: Unresolved coordinate.

        Raises:
            ValueError: If ``text`` has the wrong number of segments or empty segments.
        """

        parts = text.strip().split(":")
        if not _MIN_PARTS <= len(parts) <= _MAX_PARTS or any(not part for part in parts):
            raise ValueError(f"invalid artifact coordinate '{text}'; expected group:name[:type[:classifier]]:version")
        group, name, *middle, version = parts
        artifact_type = middle[0] if middle else DEFAULT_TYPE
        classifier = middle[1] if len(middle) > 1 else None
        return cls(group=group, name=name, version=version, classifier=classifier, type=artifact_type)

    @property
    def key(self) -> CoordinateKey:
        """Return the ``(group, name)`` identity used for deduplication."""

        return CoordinateKey(self.group, self.name)

    @property
    def gav(self) -> str:
        """Return the canonical ``group:name[:type[:classifier]]:version`` text."""

        if self.classifier:
            return f"{self.group}:{self.name}:{self.type}:{self.classifier}:{self.version}"
        if self.type != DEFAULT_TYPE:
            return f"{self.group}:{self.name}:{self.type}:{self.version}"
        return f"{self.group}:{self.name}:{self.version}"

    @property
    def sort_key(self) -> tuple[str, str, str, str, str]:
        """Return a total ordering key over the identity tuple."""

        return (self.group, self.name, self.version, self.classifier or "", self.type)

    @property
    def is_resolved(self) -> bool:
        """Return ``True`` when a local file has been attached."""

        return self.path is not None

    def resolved(self, path: Path) -> ArtifactCoordinate:
        """Return a copy of the coordinate with ``path`` attached."""

        return replace(self, path=path)

    def __str__(self) -> str:
        return self.gav


class DependencyScope(StrEnum):
    """Scope tags carried by declared project dependencies."""

    COMPILE = "compile"
    RUNTIME = "runtime"
    PROVIDED = "provided"
    TEST = "test"

    @property
    def shipped_at_runtime(self) -> bool:
        """Return ``True`` when artifacts of this scope belong on a runtime classpath."""

        return self in {DependencyScope.COMPILE, DependencyScope.RUNTIME}


@dataclass(frozen=True, slots=True)
class DeclaredDependency:
    """A dependency the project build already declares."""

    coordinate: ArtifactCoordinate
    scope: DependencyScope = DependencyScope.COMPILE

    @classmethod
    def parse(cls, text: str, *, scope: str | DependencyScope = DependencyScope.COMPILE, path: Path | None = None) -> DeclaredDependency:
        """Build a declared dependency from coordinate text.

        Args:
            text: Coordinate in ``group:name[:type[:classifier]]:version`` notation.
            scope: Scope tag of the dependency.
            path: Local file the build tool already resolved, if any.

        Returns:
            DeclaredDependency: Parsed dependency.
        """

        coordinate = ArtifactCoordinate.parse(text)
        if path is not None:
            coordinate = coordinate.resolved(path)
        return cls(coordinate=coordinate, scope=DependencyScope(scope))


@dataclass(frozen=True, slots=True)
class ResolvedArtifact:
    """Result entry produced by a coordinate resolver."""

    coordinate: ArtifactCoordinate
    local_file_path: Path


__all__ = [
    "ArtifactCoordinate",
    "CoordinateKey",
    "DEFAULT_TYPE",
    "DeclaredDependency",
    "DependencyScope",
    "ResolvedArtifact",
]

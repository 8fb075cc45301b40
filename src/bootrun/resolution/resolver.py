# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Coordinate resolution collaborators."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from ..coordinates import ArtifactCoordinate, ResolvedArtifact
from ..errors import ResolutionError

LOGGER = logging.getLogger(__name__)

DEFAULT_LOCAL_REPOSITORY: Final[Path] = Path.home() / ".m2" / "repository"


@runtime_checkable
class CoordinateResolver(Protocol):
    """Resolve artifact coordinates to local files."""

    def resolve_all(self, coordinates: Iterable[ArtifactCoordinate]) -> set[ResolvedArtifact]:
        """Return a resolved artifact for each coordinate.

        Implementations may return a partial result or raise
        :class:`ResolutionError` naming the coordinates they could not resolve.
        """
        ...


@dataclass(frozen=True, slots=True)
class LocalRepositoryResolver:
    """Resolve coordinates against a Maven-layout repository directory."""

    root: Path = DEFAULT_LOCAL_REPOSITORY

    def artifact_path(self, coordinate: ArtifactCoordinate) -> Path:
        """Return the expected repository path of *coordinate*."""

        suffix = f"-{coordinate.classifier}" if coordinate.classifier else ""
        filename = f"{coordinate.name}-{coordinate.version}{suffix}.{coordinate.type}"
        return self.root.joinpath(*coordinate.group.split("."), coordinate.name, coordinate.version, filename)

    def resolve_all(self, coordinates: Iterable[ArtifactCoordinate]) -> set[ResolvedArtifact]:
        """Resolve every coordinate or raise a single aggregated error.

        Raises:
            ResolutionError: Naming every coordinate missing from the repository.
        """

        resolved: set[ResolvedArtifact] = set()
        missing: list[ArtifactCoordinate] = []
        for coordinate in coordinates:
            candidate = self.artifact_path(coordinate)
            if candidate.is_file():
                resolved.add(ResolvedArtifact(coordinate=coordinate, local_file_path=candidate))
            else:
                LOGGER.debug("Artifact %s not found at %s", coordinate.gav, candidate)
                missing.append(coordinate)
        if missing:
            raise ResolutionError(missing, reason=f"not present in {self.root}")
        return resolved


__all__ = ["CoordinateResolver", "DEFAULT_LOCAL_REPOSITORY", "LocalRepositoryResolver"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the local repository coordinate resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from bootrun.coordinates import ArtifactCoordinate, ResolvedArtifact
from bootrun.errors import ResolutionError
from bootrun.resolution import LocalRepositoryResolver


def _install(root: Path, relative: str) -> Path:
    target = root / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(b"PK")
    return target


def test_artifact_path_follows_repository_layout(tmp_path: Path) -> None:
    resolver = LocalRepositoryResolver(tmp_path)
    coordinate = ArtifactCoordinate("org.wildfly.swarm", "cdi", "2017.1.1")
    assert resolver.artifact_path(coordinate) == tmp_path / "org/wildfly/swarm/cdi/2017.1.1/cdi-2017.1.1.jar"

    classified = ArtifactCoordinate.parse("com.example:tool:zip:dist:1.0")
    assert resolver.artifact_path(classified) == tmp_path / "com/example/tool/1.0/tool-1.0-dist.zip"


def test_resolve_all_returns_local_files(tmp_path: Path) -> None:
    jar = _install(tmp_path, "org/acme/core/2.0/core-2.0.jar")
    coordinate = ArtifactCoordinate("org.acme", "core", "2.0")

    resolved = LocalRepositoryResolver(tmp_path).resolve_all([coordinate])

    assert resolved == {ResolvedArtifact(coordinate=coordinate, local_file_path=jar)}


def test_resolve_all_reports_every_missing_coordinate(tmp_path: Path) -> None:
    _install(tmp_path, "org/acme/core/2.0/core-2.0.jar")
    coordinates = [
        ArtifactCoordinate("org.acme", "web", "1.0"),
        ArtifactCoordinate("org.acme", "core", "2.0"),
        ArtifactCoordinate("org.acme", "api", "1.0"),
    ]

    with pytest.raises(ResolutionError) as excinfo:
        LocalRepositoryResolver(tmp_path).resolve_all(coordinates)

    assert [coordinate.name for coordinate in excinfo.value.unresolved] == ["api", "web"]
    assert str(tmp_path) in str(excinfo.value)

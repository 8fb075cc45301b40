# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import sys
import zipfile
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path

import pytest

from bootrun.catalog import ModuleCatalog, clear_catalog_cache
from bootrun.coordinates import ArtifactCoordinate, ResolvedArtifact
from bootrun.errors import ResolutionError
from bootrun.launch.models import LaunchConfiguration, ReadinessProbe

ArchiveFactory = Callable[..., Path]


class FakeResolver:
    """Resolve coordinates to files under a temporary directory, recording every call."""

    def __init__(self, root: Path, *, missing: set[str] | None = None) -> None:
        self.root = root
        self.missing = missing or set()
        self.calls: list[tuple[ArtifactCoordinate, ...]] = []

    def resolve_all(self, coordinates):  # type: ignore[no-untyped-def]
        requested = tuple(coordinates)
        self.calls.append(requested)
        unresolved = [coordinate for coordinate in requested if coordinate.name in self.missing]
        if unresolved:
            raise ResolutionError(unresolved)
        return {
            ResolvedArtifact(coordinate=coordinate, local_file_path=self.root / f"{coordinate.name}-{coordinate.version}.jar")
            for coordinate in requested
        }


@pytest.fixture(autouse=True)
def _reset_catalog_cache() -> Iterator[None]:
    clear_catalog_cache()
    yield
    clear_catalog_cache()


def build_catalog_document(modules: list[Mapping[str, object]], *, group: str = "org.acme") -> dict[str, object]:
    return {"groupId": group, "launcher": {"mainClass": "org.acme.Main"}, "modules": list(modules)}


@pytest.fixture
def web_catalog() -> ModuleCatalog:
    """Catalog with ``web`` (1.0) depending on ``core`` (2.0)."""

    return ModuleCatalog.from_document(
        build_catalog_document(
            [
                {"artifactId": "core", "version": "2.0"},
                {
                    "artifactId": "web",
                    "version": "1.0",
                    "dependencies": ["core"],
                    "detect": {"packages": ["javax.servlet"], "resources": ["WEB-INF/web.xml"]},
                },
                {
                    "artifactId": "rest",
                    "version": "1.0",
                    "dependencies": ["web"],
                    "detect": {"packages": ["javax.ws.rs"]},
                },
            ]
        )
    )


@pytest.fixture
def fake_resolver(tmp_path: Path) -> FakeResolver:
    return FakeResolver(tmp_path / "repo")


@pytest.fixture
def make_archive(tmp_path: Path) -> ArchiveFactory:
    """Return a factory writing zip archives with the given entries."""

    def _make(name: str, entries: Mapping[str, bytes], *, directory: Path | None = None) -> Path:
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(target, "w") as archive:
            for entry, data in entries.items():
                archive.writestr(entry, data)
        return target

    return _make


def build_python_configuration(script: str, **overrides: object) -> LaunchConfiguration:
    values: dict[str, object] = {
        "java_executable": sys.executable,
        "jvm_arguments": ("-u", "-c", script),
        "readiness": ReadinessProbe(),
    }
    values.update(overrides)
    return LaunchConfiguration(**values)  # type: ignore[arg-type]


@pytest.fixture
def catalog_document() -> Callable[..., dict[str, object]]:
    """Return a factory for minimal catalog documents."""

    return build_catalog_document


@pytest.fixture
def python_configuration() -> Callable[..., LaunchConfiguration]:
    """Return a factory for configurations that run a script with the current interpreter."""

    return build_python_configuration

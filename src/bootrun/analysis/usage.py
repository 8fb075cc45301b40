# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Infer which catalog modules an application exercises.

A module is considered *used* when at least one of its trigger signatures
matches the artifact:

* package signatures match compiled ``.class`` entries whose bytes contain the
  package's internal (slash separated) name, which is how class references are
  recorded in the constant pool;
* resource signatures match entries whose path equals the marker or ends with
  ``/`` followed by the marker, covering resources inside nested archives.

Analysis is a pure function of the catalog and the artifact bytes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..catalog.loader import ModuleCatalog
from ..catalog.models import ModuleDescriptor
from .contents import ArtifactContents, ContentEntry, open_contents

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ModuleUsageSet:
    """Modules inferred as directly used by an artifact."""

    modules: frozenset[ModuleDescriptor] = frozenset()

    def sorted(self) -> tuple[ModuleDescriptor, ...]:
        """Return the used modules ordered by identity."""

        return tuple(sorted(self.modules, key=lambda descriptor: descriptor.sort_key))

    @property
    def labels(self) -> tuple[str, ...]:
        """Return sorted ``name:version`` labels for console output."""

        return tuple(sorted(descriptor.av for descriptor in self.modules))

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self.sorted())

    def __len__(self) -> int:
        return len(self.modules)

    def __contains__(self, item: object) -> bool:
        return item in self.modules


@dataclass(frozen=True, slots=True)
class _Signature:
    descriptor: ModuleDescriptor
    packages: tuple[bytes, ...]
    resources: tuple[str, ...]

    def matches(self, entry: ContentEntry) -> bool:
        if entry.is_class and any(package in entry.data for package in self.packages):
            return True
        return any(entry.name == marker or entry.name.endswith(f"/{marker}") for marker in self.resources)


class UsageAnalyzer:
    """Scan artifact contents against the trigger signatures of a catalog."""

    def __init__(self, catalog: ModuleCatalog) -> None:
        """Precompute byte signatures for every detectable catalog module.

        Args:
            catalog: Catalog providing modules and their detection rules.
        """

        self._catalog = catalog
        self._signatures = tuple(
            _Signature(
                descriptor=descriptor,
                packages=tuple(_internal_name(package) for package in descriptor.detection.packages),
                resources=tuple(marker.strip("/") for marker in descriptor.detection.resources),
            )
            for descriptor in catalog.sorted()
            if not descriptor.detection.empty
        )

    def detect(self, contents: ArtifactContents | Path) -> ModuleUsageSet:
        """Return the modules whose signatures match *contents*.

        Args:
            contents: Contents view, or a path handed to :func:`open_contents`.

        Returns:
            ModuleUsageSet: Possibly empty set of used modules.

        Raises:
            AnalysisError: If the contents are missing or corrupt.
        """

        source = open_contents(contents) if isinstance(contents, Path) else contents
        pending = list(self._signatures)
        used: set[ModuleDescriptor] = set()
        for entry in source.entries():
            if not pending:
                break
            remaining: list[_Signature] = []
            for signature in pending:
                if signature.matches(entry):
                    used.add(signature.descriptor)
                else:
                    remaining.append(signature)
            pending = remaining
        LOGGER.debug("Detected %d modules in %s", len(used), source.location)
        return ModuleUsageSet(frozenset(used))


def detect_used_modules(catalog: ModuleCatalog, contents: ArtifactContents | Path) -> ModuleUsageSet:
    """Return the modules of *catalog* used by *contents*."""

    return UsageAnalyzer(catalog).detect(contents)


def _internal_name(package: str) -> bytes:
    return (package.strip(".").replace(".", "/") + "/").encode("utf-8")


__all__ = ["ModuleUsageSet", "UsageAnalyzer", "detect_used_modules"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Immutable descriptors for feature modules known to the catalog."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..coordinates import ArtifactCoordinate, CoordinateKey


@dataclass(frozen=True, slots=True)
class DetectionRules:
    """Trigger signatures used to decide whether an application uses a module.

    Attributes:
        packages: Java packages (dotted) whose references imply the module.
        resources: Archive resource paths whose presence implies the module.
    """

    packages: tuple[str, ...] = ()
    resources: tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        """Return ``True`` when the module can only be selected explicitly."""

        return not self.packages and not self.resources


@dataclass(frozen=True, slots=True)
class ModuleDescriptor:
    """Describe one feature module and its direct dependency edges.

    Identity is ``(group, name, version)``; the human-facing fields and the
    edges do not take part in equality.
    """

    group: str
    name: str
    version: str
    display_name: str = field(default="", compare=False)
    description: str = field(default="", compare=False)
    dependencies: tuple[CoordinateKey, ...] = field(default=(), compare=False)
    detection: DetectionRules = field(default_factory=DetectionRules, compare=False)

    @property
    def key(self) -> CoordinateKey:
        """Return the version-independent ``(group, name)`` key."""

        return CoordinateKey(self.group, self.name)

    @property
    def coordinate(self) -> ArtifactCoordinate:
        """Return the resolvable artifact coordinate for the module."""

        return ArtifactCoordinate(group=self.group, name=self.name, version=self.version)

    @property
    def av(self) -> str:
        """Return the short ``name:version`` label used in console output."""

        return f"{self.name}:{self.version}"

    @property
    def gav(self) -> str:
        """Return the ``group:name:version`` label."""

        return f"{self.group}:{self.name}:{self.version}"

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.group, self.name, self.version)

    def with_version(self, version: str) -> ModuleDescriptor:
        """Return a copy of the descriptor pinned to ``version``."""

        if version == self.version:
            return self
        return replace(self, version=version)


__all__ = ["DetectionRules", "ModuleDescriptor"]

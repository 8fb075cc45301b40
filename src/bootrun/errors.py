# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Error taxonomy shared by every launch phase."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .coordinates import ArtifactCoordinate


class LaunchPhase(StrEnum):
    """Enumerate the phases a launch failure can be attributed to."""

    CONFIGURATION = "configuration"
    CATALOG = "catalog"
    ANALYSIS = "analysis"
    RESOLUTION = "resolution"
    PACKAGING = "packaging"
    SPAWN = "spawn"
    READINESS = "readiness"
    SHUTDOWN = "shutdown"


class LaunchError(RuntimeError):
    """Base class for failures surfaced to the hosting program."""

    phase: ClassVar[LaunchPhase] = LaunchPhase.CONFIGURATION

    def describe(self) -> str:
        """Return the message prefixed with the phase it occurred in.

        Returns:
            str: Human-readable description such as ``"spawn: java not found"``.
        """

        return f"{self.phase.value}: {self}"


class ConfigError(LaunchError):
    """Raised when launch settings are missing or invalid."""

    phase = LaunchPhase.CONFIGURATION


class CatalogLoadError(LaunchError):
    """Raised when the module catalog document is missing or malformed."""

    phase = LaunchPhase.CATALOG


class CatalogIntegrityError(LaunchError):
    """Raised when the catalog is well formed but semantically broken (unknown edges, cycles)."""

    phase = LaunchPhase.CATALOG


class NotFoundError(LaunchError):
    """Raised when a module lookup misses the catalog."""

    phase = LaunchPhase.CATALOG


class AnalysisError(LaunchError):
    """Raised when application contents cannot be read for usage analysis."""

    phase = LaunchPhase.ANALYSIS


class ResolutionError(LaunchError):
    """Raised when one or more coordinates cannot be resolved to local files."""

    phase = LaunchPhase.RESOLUTION

    def __init__(self, unresolved: Iterable[ArtifactCoordinate], *, reason: str | None = None) -> None:
        """Initialise the error with every coordinate that failed to resolve.

        Args:
            unresolved: Coordinates the resolution collaborator could not locate.
            reason: Optional detail appended to the message.
        """

        self.unresolved = tuple(sorted(set(unresolved), key=lambda coordinate: coordinate.sort_key))
        listing = ", ".join(coordinate.gav for coordinate in self.unresolved) or "<none>"
        message = f"could not resolve runtime dependencies: {listing}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnsupportedPackagingError(LaunchError):
    """Raised when the project packaging is not one of the supported kinds."""

    phase = LaunchPhase.PACKAGING


class SpawnError(LaunchError):
    """Raised when the child process could not be created."""

    phase = LaunchPhase.SPAWN


class SupervisorStateError(LaunchError):
    """Raised when a supervisor operation is invoked from an invalid lifecycle state."""

    phase = LaunchPhase.SPAWN


class DeployTimeoutError(LaunchError):
    """Raised when the process started but never reported readiness."""

    phase = LaunchPhase.READINESS

    def __init__(self, timeout: float) -> None:
        """Record the readiness window that elapsed.

        Args:
            timeout: Length of the readiness window in seconds.
        """

        super().__init__(f"process did not become ready within the timeout window ({timeout:.1f}s)")
        self.timeout = timeout


class InternalProcessError(LaunchError):
    """Captured from the child process: an error line or an unexpected exit."""

    phase = LaunchPhase.READINESS

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        """Initialise the error with the captured detail.

        Args:
            message: Text captured from the child or describing its exit.
            returncode: Exit status of the child when it already terminated.
        """

        super().__init__(message)
        self.returncode = returncode


class InterruptedWaitError(LaunchError):
    """Raised when the caller's wait on the supervised process was interrupted."""

    phase = LaunchPhase.SHUTDOWN


__all__ = [
    "AnalysisError",
    "CatalogIntegrityError",
    "CatalogLoadError",
    "ConfigError",
    "DeployTimeoutError",
    "InternalProcessError",
    "InterruptedWaitError",
    "LaunchError",
    "LaunchPhase",
    "NotFoundError",
    "ResolutionError",
    "SpawnError",
    "SupervisorStateError",
    "UnsupportedPackagingError",
]

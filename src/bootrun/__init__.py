# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Launch packaged applications on a classpath inferred from the modules they use."""

from __future__ import annotations

from .catalog import ModuleCatalog, ModuleDescriptor, load_catalog
from .config import LaunchOptions, LaunchSettings, ProjectMetadata, load_settings
from .coordinates import ArtifactCoordinate, DeclaredDependency, DependencyScope, ResolvedArtifact
from .errors import LaunchError, LaunchPhase
from .launch import LaunchConfiguration, PackagingKind
from .launcher import LaunchResult, Launcher, launch_application
from .runtime import LifecycleState, ProcessSupervisor

__version__ = "0.1.0"

__all__ = [
    "ArtifactCoordinate",
    "DeclaredDependency",
    "DependencyScope",
    "LaunchConfiguration",
    "LaunchError",
    "LaunchOptions",
    "LaunchPhase",
    "LaunchResult",
    "LaunchSettings",
    "Launcher",
    "LifecycleState",
    "ModuleCatalog",
    "ModuleDescriptor",
    "PackagingKind",
    "ProcessSupervisor",
    "ProjectMetadata",
    "ResolvedArtifact",
    "__version__",
    "launch_application",
    "load_catalog",
    "load_settings",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Dependency closure computation and coordinate resolution."""

from __future__ import annotations

from .closure import (
    BOOTSTRAP_SENTINEL,
    LOGGING_BRIDGE,
    DependencyClosure,
    DependencyClosureResolver,
    compute_closure,
    declared_closure,
    has_bootstrap_dependency,
)
from .resolver import DEFAULT_LOCAL_REPOSITORY, CoordinateResolver, LocalRepositoryResolver

__all__ = [
    "BOOTSTRAP_SENTINEL",
    "CoordinateResolver",
    "DEFAULT_LOCAL_REPOSITORY",
    "DependencyClosure",
    "DependencyClosureResolver",
    "LOGGING_BRIDGE",
    "LocalRepositoryResolver",
    "compute_closure",
    "declared_closure",
    "has_bootstrap_dependency",
]

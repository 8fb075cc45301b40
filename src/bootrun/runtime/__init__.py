# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Process spawning and lifecycle supervision."""

from __future__ import annotations

from .process import SpawnOptions, normalize_args, spawn_process
from .supervisor import LifecycleState, ProcessSupervisor, SupervisedProcess

__all__ = [
    "LifecycleState",
    "ProcessSupervisor",
    "SpawnOptions",
    "SupervisedProcess",
    "normalize_args",
    "spawn_process",
]

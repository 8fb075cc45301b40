# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Launch configuration models and builder."""

from __future__ import annotations

from .builder import (
    APP_NAME_PROPERTY,
    REMOTE_REPOSITORIES_PROPERTY,
    LaunchConfigurationBuilder,
    application_artifact,
    build_launch_configuration,
)
from .models import ApplicationArtifact, LaunchConfiguration, PackagingKind, ReadinessProbe

__all__ = [
    "APP_NAME_PROPERTY",
    "ApplicationArtifact",
    "LaunchConfiguration",
    "LaunchConfigurationBuilder",
    "PackagingKind",
    "REMOTE_REPOSITORIES_PROPERTY",
    "ReadinessProbe",
    "application_artifact",
    "build_launch_configuration",
]

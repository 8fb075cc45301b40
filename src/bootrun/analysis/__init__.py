# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Static analysis of packaged applications."""

from __future__ import annotations

from .contents import ArchiveContents, ArtifactContents, ContentEntry, DirectoryContents, open_contents
from .usage import ModuleUsageSet, UsageAnalyzer, detect_used_modules

__all__ = [
    "ArchiveContents",
    "ArtifactContents",
    "ContentEntry",
    "DirectoryContents",
    "ModuleUsageSet",
    "UsageAnalyzer",
    "detect_used_modules",
    "open_contents",
]

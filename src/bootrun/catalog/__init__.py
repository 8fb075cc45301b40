# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Feature module catalog."""

from __future__ import annotations

from .loader import DEFAULT_MAIN_CLASS, ModuleCatalog, clear_catalog_cache, load_catalog, read_catalog
from .models import DetectionRules, ModuleDescriptor

__all__ = [
    "DEFAULT_MAIN_CLASS",
    "DetectionRules",
    "ModuleCatalog",
    "ModuleDescriptor",
    "clear_catalog_cache",
    "load_catalog",
    "read_catalog",
]

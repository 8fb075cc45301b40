# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared type aliases and constants for the module catalog."""

from __future__ import annotations

from typing import Final, Mapping, Sequence, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]

CATALOG_DOCUMENT: Final[str] = "modules.json"
CATALOG_SCHEMA: Final[str] = "module_catalog.schema.json"

__all__ = [
    "CATALOG_DOCUMENT",
    "CATALOG_SCHEMA",
    "JSONPrimitive",
    "JSONValue",
]

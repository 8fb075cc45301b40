# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""I/O helpers for reading the module catalog document and its schema."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from jsonschema import Draft202012Validator
from jsonschema import exceptions as jsonschema_exceptions

from ..errors import CatalogLoadError
from .types import JSONValue


def load_document(path: Path) -> JSONValue:
    """Return the JSON document stored at *path*."""

    if not path.exists():
        raise CatalogLoadError(f"{path}: catalog document not found")
    with path.open("r", encoding="utf-8") as stream:
        try:
            return json.load(stream)
        except json.JSONDecodeError as exc:
            raise CatalogLoadError(f"{path}: failed to parse catalog JSON ({exc.msg})") from exc


def load_validator(path: Path) -> Draft202012Validator:
    """Return a schema validator for the JSON schema at *path*."""

    payload = load_document(path)
    if not isinstance(payload, Mapping):
        raise CatalogLoadError(f"{path}: schema must be a JSON object at the root level")
    return Draft202012Validator(payload)


def validate_document(document: JSONValue, validator: Draft202012Validator, *, context: str) -> None:
    """Validate *document* raising :class:`CatalogLoadError` on the first violation."""

    try:
        validator.validate(document)
    except jsonschema_exceptions.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise CatalogLoadError(f"{context}: {location}: {exc.message}") from exc


__all__ = ["load_document", "load_validator", "validate_document"]

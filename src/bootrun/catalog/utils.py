# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shape checks for decoded catalog JSON, reported as :class:`CatalogLoadError`."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import NoReturn

from ..errors import CatalogLoadError
from .types import JSONValue


def _reject(context: str, key: str, expected: str) -> NoReturn:
    raise CatalogLoadError(f"{context}: '{key}' must be {expected}")


def _is_array(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def expect_string(value: object | None, *, key: str, context: str) -> str:
    if isinstance(value, str) and value:
        return value
    _reject(context, key, "a non-empty string")


def optional_string(value: object | None, *, key: str, context: str, default: str = "") -> str:
    """Return *value*, or *default* when the key is absent from the document."""

    if value is None:
        return default
    if isinstance(value, str):
        return value
    _reject(context, key, "a string when present")


def string_array(value: object | None, *, key: str, context: str) -> tuple[str, ...]:
    """Return the entries of a JSON string array; a missing array reads as empty."""

    if value is None:
        return ()
    if not _is_array(value):
        _reject(context, key, "an array of strings")
    items = tuple(value)  # type: ignore[arg-type]
    for position, item in enumerate(items):
        if not isinstance(item, str):
            _reject(context, f"{key}[{position}]", "a string")
    return items


def expect_mapping(value: object | None, *, key: str, context: str) -> Mapping[str, JSONValue]:
    if isinstance(value, Mapping):
        return value
    _reject(context, key, "an object")


def optional_mapping(value: object | None, *, key: str, context: str) -> Mapping[str, JSONValue]:
    return {} if value is None else expect_mapping(value, key=key, context=context)


def expect_sequence(value: object | None, *, key: str, context: str) -> Sequence[JSONValue]:
    if _is_array(value):
        return value  # type: ignore[return-value]
    _reject(context, key, "an array")


__all__ = [
    "expect_mapping",
    "expect_sequence",
    "expect_string",
    "optional_mapping",
    "optional_string",
    "string_array",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Byte-level views over packaged application contents."""

from __future__ import annotations

import io
import zipfile
import zlib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from ..errors import AnalysisError

NESTED_ARCHIVE_ROOTS: Final[tuple[str, ...]] = ("WEB-INF/lib/", "lib/")
NESTED_ARCHIVE_SEPARATOR: Final[str] = "!/"
_ARCHIVE_READ_ERRORS: Final[tuple[type[Exception], ...]] = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    OSError,
)


@dataclass(frozen=True, slots=True)
class ContentEntry:
    """A single file inside an application artifact.

    Attributes:
        name: POSIX path relative to the artifact root. Entries of nested
            archives are prefixed with ``<archive>!/``.
        data: Raw entry bytes.
    """

    name: str
    data: bytes

    @property
    def is_class(self) -> bool:
        """Return ``True`` for compiled class entries."""

        return self.name.endswith(".class")


@runtime_checkable
class ArtifactContents(Protocol):
    """Source of artifact entries for signature scanning."""

    @property
    def location(self) -> Path:
        """Return the file or directory backing the contents."""
        ...

    def entries(self) -> Iterator[ContentEntry]:
        """Yield every file entry in a stable order.

        Raises:
            AnalysisError: If the contents are absent or corrupt.
        """
        ...


@dataclass(frozen=True, slots=True)
class ArchiveContents:
    """Entries of a zip-based archive such as a ``.jar`` or ``.war``."""

    location: Path

    def entries(self) -> Iterator[ContentEntry]:
        try:
            with zipfile.ZipFile(self.location) as archive:
                yield from _archive_entries(archive, prefix="")
        except _ARCHIVE_READ_ERRORS as exc:
            raise AnalysisError(f"{self.location}: unreadable archive ({exc})") from exc


@dataclass(frozen=True, slots=True)
class DirectoryContents:
    """Entries of an exploded application directory."""

    location: Path

    def entries(self) -> Iterator[ContentEntry]:
        try:
            paths = sorted(path for path in self.location.rglob("*") if path.is_file())
            for path in paths:
                name = path.relative_to(self.location).as_posix()
                data = path.read_bytes()
                yield ContentEntry(name=name, data=data)
                if _is_nested_archive(name):
                    yield from _nested_entries(name, data)
        except _ARCHIVE_READ_ERRORS as exc:
            raise AnalysisError(f"{self.location}: unreadable application contents ({exc})") from exc


def open_contents(location: Path) -> ArtifactContents:
    """Return a contents view appropriate for *location*.

    Args:
        location: Packaged archive or exploded output directory.

    Returns:
        ArtifactContents: Archive or directory view.

    Raises:
        AnalysisError: If *location* is missing or is neither a directory nor a zip archive.
    """

    if location.is_dir():
        return DirectoryContents(location)
    if not location.is_file():
        raise AnalysisError(f"{location}: application contents not found")
    if not zipfile.is_zipfile(location):
        raise AnalysisError(f"{location}: not a zip archive")
    return ArchiveContents(location)


def _archive_entries(archive: zipfile.ZipFile, *, prefix: str) -> Iterator[ContentEntry]:
    for info in sorted(archive.infolist(), key=lambda item: item.filename):
        if info.is_dir():
            continue
        data = archive.read(info)
        name = f"{prefix}{info.filename}"
        yield ContentEntry(name=name, data=data)
        if not prefix and _is_nested_archive(info.filename):
            yield from _nested_entries(name, data)


def _nested_entries(name: str, data: bytes) -> Iterator[ContentEntry]:
    with zipfile.ZipFile(io.BytesIO(data)) as nested:
        yield from _archive_entries(nested, prefix=f"{name}{NESTED_ARCHIVE_SEPARATOR}")


def _is_nested_archive(name: str) -> bool:
    return name.endswith(".jar") and name.startswith(NESTED_ARCHIVE_ROOTS)


__all__ = [
    "ArchiveContents",
    "ArtifactContents",
    "ContentEntry",
    "DirectoryContents",
    "open_contents",
]

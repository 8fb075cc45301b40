# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Process-wide module catalog with one-time, thread-safe initialisation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Final

from jsonschema import Draft202012Validator

from ..coordinates import CoordinateKey
from ..errors import CatalogIntegrityError, NotFoundError
from .io import load_document, load_validator, validate_document
from .models import DetectionRules, ModuleDescriptor
from .types import CATALOG_DOCUMENT, CATALOG_SCHEMA, JSONValue
from .utils import expect_mapping, expect_sequence, expect_string, optional_mapping, optional_string, string_array

LOGGER = logging.getLogger(__name__)

DATA_ROOT: Final[Path] = Path(__file__).resolve().parent / "data"
DEFAULT_MAIN_CLASS: Final[str] = "org.wildfly.swarm.Swarm"

_CATALOG_LOCK = threading.Lock()
_catalog: ModuleCatalog | None = None


@dataclass(frozen=True, slots=True)
class ModuleCatalog:
    """Read-only index of feature modules keyed by ``(group, name)``."""

    default_group: str
    default_main_class: str
    modules: Mapping[CoordinateKey, ModuleDescriptor]
    source: Path | None = None

    @classmethod
    def load(cls) -> ModuleCatalog:
        """Return the process-wide catalog, loading it on first use."""

        return load_catalog()

    @classmethod
    def from_document(
        cls,
        document: JSONValue,
        *,
        context: str = "<memory>",
        validator: Draft202012Validator | None = None,
        source: Path | None = None,
    ) -> ModuleCatalog:
        """Build a catalog from a decoded catalog document.

        Args:
            document: Decoded JSON document.
            context: Label used in error messages.
            validator: Optional schema validator applied before parsing.
            source: File the document was read from, if any.

        Returns:
            ModuleCatalog: Catalog whose dependency edges all reference known modules.

        Raises:
            CatalogLoadError: If the document is structurally malformed.
            CatalogIntegrityError: If modules are duplicated or reference unknown modules.
        """

        if validator is not None:
            validate_document(document, validator, context=context)
        root = expect_mapping(document, key="<root>", context=context)
        default_group = expect_string(root.get("groupId"), key="groupId", context=context)
        launcher = optional_mapping(root.get("launcher"), key="launcher", context=context)
        main_class = optional_string(
            launcher.get("mainClass"),
            key="launcher.mainClass",
            context=context,
            default=DEFAULT_MAIN_CLASS,
        )

        entries = expect_sequence(root.get("modules"), key="modules", context=context)
        raw_edges: dict[CoordinateKey, tuple[str, ...]] = {}
        parsed: dict[CoordinateKey, ModuleDescriptor] = {}
        for index, entry in enumerate(entries):
            entry_context = f"{context}.modules[{index}]"
            descriptor, edges = _parse_module(entry, default_group=default_group, context=entry_context)
            if descriptor.key in parsed:
                raise CatalogIntegrityError(f"{entry_context}: duplicate module '{descriptor.key}'")
            parsed[descriptor.key] = descriptor
            raw_edges[descriptor.key] = edges

        linked: dict[CoordinateKey, ModuleDescriptor] = {}
        for key, descriptor in parsed.items():
            dependencies: list[CoordinateKey] = []
            for reference in raw_edges[key]:
                target = _reference_key(reference, default_group=default_group)
                if target not in parsed:
                    raise CatalogIntegrityError(
                        f"{context}: module '{key}' depends on unknown module '{target}'",
                    )
                dependencies.append(target)
            linked[key] = ModuleDescriptor(
                group=descriptor.group,
                name=descriptor.name,
                version=descriptor.version,
                display_name=descriptor.display_name,
                description=descriptor.description,
                dependencies=tuple(dependencies),
                detection=descriptor.detection,
            )
        return cls(
            default_group=default_group,
            default_main_class=main_class,
            modules=MappingProxyType(linked),
            source=source,
        )

    def lookup(self, group: str, name: str) -> ModuleDescriptor:
        """Return the descriptor registered under ``group:name``.

        Raises:
            NotFoundError: If the catalog has no such module.
        """

        descriptor = self.modules.get(CoordinateKey(group, name))
        if descriptor is None:
            raise NotFoundError(f"module '{group}:{name}' is not in the catalog")
        return descriptor

    def get(self, key: CoordinateKey) -> ModuleDescriptor | None:
        return self.modules.get(key)

    def all(self) -> frozenset[ModuleDescriptor]:
        """Return every descriptor in the catalog."""

        return frozenset(self.modules.values())

    def sorted(self) -> tuple[ModuleDescriptor, ...]:
        """Return every descriptor ordered by identity."""

        return tuple(sorted(self.modules.values(), key=lambda descriptor: descriptor.sort_key))

    def dependencies_of(self, descriptor: ModuleDescriptor) -> tuple[ModuleDescriptor, ...]:
        """Return the direct dependencies of *descriptor* as catalog descriptors."""

        resolved: list[ModuleDescriptor] = []
        for key in descriptor.dependencies:
            target = self.modules.get(key)
            if target is None:
                raise CatalogIntegrityError(f"module '{descriptor.key}' depends on unknown module '{key}'")
            resolved.append(target)
        return tuple(resolved)

    def parse_module(self, spec: str) -> ModuleDescriptor:
        """Resolve an explicit module selection such as ``cdi`` or ``org.acme:cdi:1.2``.

        Args:
            spec: ``name``, ``group:name`` or ``group:name:version``.

        Returns:
            ModuleDescriptor: Catalog descriptor, pinned to the requested version
            when one is given. Fully qualified coordinates unknown to the catalog
            yield a descriptor without dependency edges.

        Raises:
            NotFoundError: If an unversioned selection is not in the catalog.
            ValueError: If *spec* has more than three segments.
        """

        parts = [part.strip() for part in spec.strip().split(":")]
        if not parts or len(parts) > 3 or any(not part for part in parts):
            raise ValueError(f"invalid module selection '{spec}'; expected name, group:name or group:name:version")
        if len(parts) == 1:
            group, name, version = self.default_group, parts[0], None
        elif len(parts) == 2:
            group, name, version = parts[0], parts[1], None
        else:
            group, name, version = parts
        known = self.modules.get(CoordinateKey(group, name))
        if known is None:
            if version is None:
                raise NotFoundError(f"module '{group}:{name}' is not in the catalog")
            return ModuleDescriptor(group=group, name=name, version=version, display_name=name)
        return known if version is None else known.with_version(version)

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self.sorted())

    def __len__(self) -> int:
        return len(self.modules)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, ModuleDescriptor):
            return item.key in self.modules
        return item in self.modules


def read_catalog(document_path: Path, schema_path: Path | None = None) -> ModuleCatalog:
    """Read and validate a catalog document from disk.

    Args:
        document_path: Path to the catalog JSON document.
        schema_path: Optional JSON schema; defaults to the packaged schema.

    Returns:
        ModuleCatalog: Parsed catalog.
    """

    validator = load_validator(schema_path or DATA_ROOT / CATALOG_SCHEMA)
    document = load_document(document_path)
    return ModuleCatalog.from_document(
        document,
        context=str(document_path),
        validator=validator,
        source=document_path,
    )


def load_catalog() -> ModuleCatalog:
    """Return the packaged catalog, reading it exactly once per process.

    Concurrent first callers block on a lock; exactly one performs the read
    and every caller receives the same instance.
    """

    global _catalog
    catalog = _catalog
    if catalog is not None:
        return catalog
    with _CATALOG_LOCK:
        if _catalog is None:
            _catalog = read_catalog(DATA_ROOT / CATALOG_DOCUMENT)
            LOGGER.debug("Loaded %d catalog modules from %s", len(_catalog), _catalog.source)
        return _catalog


def clear_catalog_cache() -> None:
    """Forget the process-wide catalog so the next load re-reads it."""

    global _catalog
    with _CATALOG_LOCK:
        _catalog = None


def _parse_module(
    entry: JSONValue,
    *,
    default_group: str,
    context: str,
) -> tuple[ModuleDescriptor, tuple[str, ...]]:
    mapping = expect_mapping(entry, key="<module>", context=context)
    group = optional_string(mapping.get("groupId"), key="groupId", context=context, default=default_group)
    name = expect_string(mapping.get("artifactId"), key="artifactId", context=context)
    version = expect_string(mapping.get("version"), key="version", context=context)
    detect = optional_mapping(mapping.get("detect"), key="detect", context=context)
    descriptor = ModuleDescriptor(
        group=group,
        name=name,
        version=version,
        display_name=optional_string(mapping.get("name"), key="name", context=context, default=name),
        description=optional_string(mapping.get("description"), key="description", context=context),
        detection=DetectionRules(
            packages=string_array(detect.get("packages"), key="detect.packages", context=context),
            resources=string_array(detect.get("resources"), key="detect.resources", context=context),
        ),
    )
    edges = string_array(mapping.get("dependencies"), key="dependencies", context=context)
    return descriptor, edges


def _reference_key(reference: str, *, default_group: str) -> CoordinateKey:
    group, _, name = reference.rpartition(":")
    return CoordinateKey(group or default_group, name)


__all__ = [
    "DATA_ROOT",
    "DEFAULT_MAIN_CLASS",
    "ModuleCatalog",
    "clear_catalog_cache",
    "load_catalog",
    "read_catalog",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project metadata, user launch options and the settings file loader."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .coordinates import DeclaredDependency, DependencyScope
from .errors import ConfigError

DEFAULT_SETTINGS_FILE: Final[str] = "bootrun.toml"
DEFAULT_DEPLOY_TIMEOUT: Final[float] = 120.0
DEFAULT_GRACE_PERIOD: Final[float] = 10.0
PROJECT_SECTION: Final[str] = "project"
LAUNCH_SECTION: Final[str] = "launch"
USE_UBER_JAR_ENV: Final[str] = "BOOTRUN_USE_UBER_JAR"
DEBUG_PORT_ENV: Final[str] = "BOOTRUN_DEBUG_PORT"
_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_MAX_PORT: Final[int] = 65535


class ProjectMetadata(BaseModel):
    """Build metadata describing the packaged application."""

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    final_name: str = Field(min_length=1)
    packaging: str = "jar"
    base_directory: Path = Field(default_factory=Path)
    build_directory: Path = Field(default_factory=lambda: Path("target"))
    output_directory: Path = Field(default_factory=lambda: Path("target") / "classes")
    dependencies: tuple[DeclaredDependency, ...] = ()
    remote_repositories: list[str] = Field(default_factory=list)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _coerce_dependencies(cls, value: object) -> tuple[DeclaredDependency, ...]:
        """Accept coordinate strings or ``{coordinate, scope, path}`` tables."""

        if value is None:
            return ()
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
            raise ValueError("dependencies must be a list")
        coerced: list[DeclaredDependency] = []
        for entry in value:
            if isinstance(entry, DeclaredDependency):
                coerced.append(entry)
            elif isinstance(entry, str):
                coerced.append(DeclaredDependency.parse(entry))
            elif isinstance(entry, Mapping):
                coordinate = entry.get("coordinate")
                if not isinstance(coordinate, str):
                    raise ValueError("dependency tables require a 'coordinate' string")
                raw_path = entry.get("path")
                coerced.append(
                    DeclaredDependency.parse(
                        coordinate,
                        scope=DependencyScope(entry.get("scope", DependencyScope.COMPILE)),
                        path=Path(raw_path) if raw_path is not None else None,
                    )
                )
            else:
                raise ValueError(f"unsupported dependency entry: {entry!r}")
        return tuple(coerced)

    @model_validator(mode="before")
    @classmethod
    def _default_directories(cls, data: object) -> object:
        """Derive the build and output directories from the base directory when absent."""

        if not isinstance(data, Mapping):
            return data
        resolved = dict(data)
        base = Path(resolved.get("base_directory") or ".")
        if resolved.get("build_directory") is None:
            resolved["build_directory"] = base / "target"
        if resolved.get("output_directory") is None:
            resolved["output_directory"] = Path(resolved["build_directory"]) / "classes"
        return resolved


class LaunchOptions(BaseModel):
    """User-supplied options shaping the launch."""

    model_config = ConfigDict(validate_assignment=True)

    modules: list[str] = Field(default_factory=list)
    module_paths: list[str] = Field(default_factory=list)
    jvm_arguments: list[str] = Field(default_factory=list)
    arguments: list[str] = Field(default_factory=list)
    properties: dict[str, str] = Field(default_factory=dict)
    environment: dict[str, str] = Field(default_factory=dict)
    debug_port: int | None = Field(default=None, ge=1, le=_MAX_PORT)
    stdout_file: Path | None = None
    stderr_file: Path | None = None
    main_class: str | None = None
    java_executable: str | None = None
    use_uber_jar: bool = False
    wait_for_process: bool = False
    deploy_timeout: float = Field(default=DEFAULT_DEPLOY_TIMEOUT, gt=0)
    stop_grace_period: float = Field(default=DEFAULT_GRACE_PERIOD, ge=0)
    local_repository: Path | None = None
    readiness_marker: str | None = None
    error_markers: list[str] | None = None


@dataclass(frozen=True, slots=True)
class LaunchSettings:
    """Project metadata and launch options loaded together from a settings file."""

    project: ProjectMetadata
    options: LaunchOptions
    source: Path | None = None


def load_settings(path: Path, *, env: Mapping[str, str] | None = None) -> LaunchSettings:
    """Load ``[project]`` and ``[launch]`` tables from a TOML settings file.

    Relative paths inside the file are resolved against the file's directory.

    Args:
        path: Settings file location.
        env: Environment consulted for overrides; defaults to ``os.environ``.

    Returns:
        LaunchSettings: Validated project metadata and options.

    Raises:
        ConfigError: If the file is missing, unparsable or fails validation.
    """

    environment = os.environ if env is None else env
    if not path.is_file():
        raise ConfigError(f"settings file not found: {path}")
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML ({exc})") from exc

    base_dir = path.resolve().parent
    project_data = _section(document, PROJECT_SECTION, path)
    launch_data = _section(document, LAUNCH_SECTION, path)
    project_data.setdefault("base_directory", ".")
    for key in ("base_directory", "build_directory", "output_directory"):
        if key in project_data:
            project_data[key] = _anchor(project_data[key], base_dir)
    if isinstance(project_data.get("dependencies"), list):
        project_data["dependencies"] = [
            {**entry, "path": _anchor(entry["path"], base_dir)} if isinstance(entry, Mapping) and "path" in entry else entry
            for entry in project_data["dependencies"]
        ]
    for key in ("stdout_file", "stderr_file", "local_repository"):
        if key in launch_data:
            launch_data[key] = _anchor(launch_data[key], base_dir)
    _apply_env_overrides(launch_data, environment)

    try:
        project = ProjectMetadata.model_validate(project_data)
        options = LaunchOptions.model_validate(launch_data)
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    return LaunchSettings(project=project, options=options, source=path)


def _section(document: Mapping[str, Any], name: str, path: Path) -> dict[str, Any]:
    section = document.get(name, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"{path}: [{name}] must be a table")
    return dict(section)


def _anchor(value: object, base_dir: Path) -> object:
    if not isinstance(value, str):
        return value
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else base_dir / candidate


def _apply_env_overrides(launch_data: dict[str, Any], env: Mapping[str, str]) -> None:
    uber = env.get(USE_UBER_JAR_ENV)
    if uber is not None and uber.strip():
        launch_data["use_uber_jar"] = uber.strip().lower() in _TRUTHY
    port = env.get(DEBUG_PORT_ENV)
    if port is not None and port.strip():
        try:
            launch_data["debug_port"] = int(port)
        except ValueError as exc:
            raise ConfigError(f"{DEBUG_PORT_ENV} must be an integer, got {port!r}") from exc


__all__ = [
    "DEFAULT_DEPLOY_TIMEOUT",
    "DEFAULT_GRACE_PERIOD",
    "DEFAULT_SETTINGS_FILE",
    "DEBUG_PORT_ENV",
    "LaunchOptions",
    "LaunchSettings",
    "ProjectMetadata",
    "USE_UBER_JAR_ENV",
    "load_settings",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for settings loading and project metadata models."""

from __future__ import annotations

from pathlib import Path

import pytest

from bootrun.config import (
    DEBUG_PORT_ENV,
    DEFAULT_DEPLOY_TIMEOUT,
    USE_UBER_JAR_ENV,
    LaunchOptions,
    ProjectMetadata,
    load_settings,
)
from bootrun.coordinates import DependencyScope
from bootrun.errors import ConfigError


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "bootrun.toml"
    path.write_text(body.strip(), encoding="utf-8")
    return path


def test_load_settings_resolves_relative_paths(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[project]
final_name = "shop.war"
packaging = "war"
base_directory = "app"
remote_repositories = ["https://repo.example/maven2"]
dependencies = [
    "org.acme:util:1.0",
    { coordinate = "javax:javaee-api:7.0", scope = "provided" },
    { coordinate = "org.acme:local:2.0", path = "libs/local.jar" },
]

[launch]
modules = ["jaxrs"]
stdout_file = "logs/out.log"
local_repository = "repo"
deploy_timeout = 30
properties = { "swarm.http.port" = "8081" }
""",
    )

    settings = load_settings(path, env={})

    project = settings.project
    assert settings.source == path
    assert project.base_directory == tmp_path.resolve() / "app"
    assert project.build_directory == tmp_path.resolve() / "app" / "target"
    assert project.output_directory == tmp_path.resolve() / "app" / "target" / "classes"
    assert [dependency.coordinate.gav for dependency in project.dependencies] == [
        "org.acme:util:1.0",
        "javax:javaee-api:7.0",
        "org.acme:local:2.0",
    ]
    assert project.dependencies[1].scope is DependencyScope.PROVIDED
    assert project.dependencies[2].coordinate.path == tmp_path.resolve() / "libs" / "local.jar"

    options = settings.options
    assert options.modules == ["jaxrs"]
    assert options.stdout_file == tmp_path.resolve() / "logs" / "out.log"
    assert options.local_repository == tmp_path.resolve() / "repo"
    assert options.deploy_timeout == 30
    assert options.properties == {"swarm.http.port": "8081"}
    assert options.wait_for_process is False


def test_defaults_when_launch_table_absent(tmp_path: Path) -> None:
    settings = load_settings(_write(tmp_path, '[project]\nfinal_name = "app"\n'), env={})

    assert settings.project.packaging == "jar"
    assert settings.options.deploy_timeout == DEFAULT_DEPLOY_TIMEOUT
    assert settings.options.debug_port is None


def test_environment_overrides(tmp_path: Path) -> None:
    path = _write(tmp_path, '[project]\nfinal_name = "app"\n[launch]\nuse_uber_jar = false\n')

    settings = load_settings(path, env={USE_UBER_JAR_ENV: "yes", DEBUG_PORT_ENV: "8787"})

    assert settings.options.use_uber_jar is True
    assert settings.options.debug_port == 8787


def test_non_numeric_debug_port_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, '[project]\nfinal_name = "app"\n')
    with pytest.raises(ConfigError, match=DEBUG_PORT_ENV):
        load_settings(path, env={DEBUG_PORT_ENV: "debug"})


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "absent.toml")


def test_invalid_toml(tmp_path: Path) -> None:
    path = _write(tmp_path, "[project\nfinal_name = 'app'")
    with pytest.raises(ConfigError, match="invalid TOML"):
        load_settings(path, env={})


@pytest.mark.parametrize(
    "body",
    [
        '[project]\nfinal_name = ""\n',
        '[project]\nfinal_name = "app"\n[launch]\ndebug_port = 0\n',
        '[project]\nfinal_name = "app"\n[launch]\ndeploy_timeout = -1\n',
        '[project]\nfinal_name = "app"\ndependencies = ["not-a-coordinate"]\n',
        'project = "app"\n',
    ],
)
def test_invalid_values_raise_config_error(tmp_path: Path, body: str) -> None:
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path, body), env={})


def test_project_metadata_derives_directories() -> None:
    project = ProjectMetadata(final_name="app", base_directory=Path("/srv/app"))

    assert project.build_directory == Path("/srv/app/target")
    assert project.output_directory == Path("/srv/app/target/classes")


def test_launch_options_reject_out_of_range_port() -> None:
    with pytest.raises(ValueError):
        LaunchOptions(debug_port=65536)

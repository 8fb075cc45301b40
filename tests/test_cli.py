# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the start, modules and analyze commands."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bootrun.cli.app import app
from bootrun.cli.options import StartCLIOptions, normalize_cli_values
from bootrun.cli.shared import EXIT_INTERRUPTED, exit_code_for
from bootrun.config import LaunchOptions
from bootrun.errors import (
    ConfigError,
    DeployTimeoutError,
    InterruptedWaitError,
    NotFoundError,
    SpawnError,
    UnsupportedPackagingError,
)


def test_modules_lists_packaged_catalog() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["modules", "--no-emoji"])

    assert result.exit_code == 0
    assert "org.wildfly.swarm" in result.stdout
    assert "undertow" in result.stdout


def test_analyze_reports_detected_modules(tmp_path: Path, make_archive) -> None:
    archive = make_archive("shop.war", {"WEB-INF/web.xml": b"<web-app/>"})
    runner = CliRunner()

    result = runner.invoke(app, ["analyze", str(archive), "--no-emoji"])

    assert result.exit_code == 0
    assert "Modules used by shop.war" in result.stdout
    assert "undertow:2017.1.1" in result.stdout


def test_analyze_missing_artifact_exits_with_analysis_code(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["analyze", str(tmp_path / "absent.war"), "--no-emoji"])

    assert result.exit_code == 3


def test_start_without_settings_file_is_configuration_error(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["start", "--config", str(tmp_path / "missing.toml"), "--no-emoji"])

    assert result.exit_code == 2
    assert "settings file not found" in result.stdout


def test_start_rejects_unsupported_packaging(tmp_path: Path) -> None:
    settings = tmp_path / "bootrun.toml"
    settings.write_text(
        """
[project]
final_name = "app"
packaging = "pom"
""".strip(),
        encoding="utf-8",
    )
    runner = CliRunner()

    result = runner.invoke(app, ["start", "--config", str(settings), "--no-emoji"])

    assert result.exit_code == 4
    assert "Unsupported packaging: pom" in result.stdout


@pytest.mark.skipif(sys.platform == "win32", reason="relies on POSIX signal delivery")
def test_start_runs_bootstrapped_application(tmp_path: Path) -> None:
    settings = tmp_path / "bootrun.toml"
    settings.write_text(
        f"""
[project]
final_name = "app"
packaging = "jar"
dependencies = ["org.wildfly.swarm:bootstrap:2017.1.1"]

[launch]
java_executable = {str(sys.executable)!r}
jvm_arguments = ["-u", "-c", "print('WFSWARM99999', flush=True)"]
local_repository = "m2"
deploy_timeout = 10
""".strip(),
        encoding="utf-8",
    )
    jar = tmp_path / "m2" / "org" / "wildfly" / "swarm" / "bootstrap" / "2017.1.1" / "bootstrap-2017.1.1.jar"
    jar.parent.mkdir(parents=True)
    jar.write_bytes(b"PK")
    runner = CliRunner()

    result = runner.invoke(app, ["start", "--config", str(settings), "--no-emoji"])

    assert result.exit_code == 0, result.stdout
    assert "Application is ready" in result.stdout
    assert "Application exited (stopped)" in result.stdout


def test_cli_overrides_extend_configured_values() -> None:
    options = LaunchOptions(jvm_arguments=["-Xmx1g"], modules=["cdi"], wait_for_process=False)
    cli = StartCLIOptions(
        uber_jar=True,
        debug_port=8787,
        jvm_arguments=normalize_cli_values(["  -ea ", "", " "]),
        modules=("jaxrs",),
        main_class="org.acme.Main",
    )

    merged = cli.apply(options)

    assert merged.jvm_arguments == ["-Xmx1g", "-ea"]
    assert merged.modules == ["cdi", "jaxrs"]
    assert merged.use_uber_jar is True
    assert merged.debug_port == 8787
    assert merged.main_class == "org.acme.Main"
    assert merged.wait_for_process is True


def test_invalid_cli_override_is_configuration_error() -> None:
    with pytest.raises(ConfigError):
        StartCLIOptions(debug_port=70000).apply(LaunchOptions())


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigError("bad"), 2),
        (NotFoundError("missing"), 3),
        (UnsupportedPackagingError("Unsupported packaging: pom"), 4),
        (SpawnError("no java"), 5),
        (DeployTimeoutError(1.0), 6),
        (InterruptedWaitError("interrupted"), EXIT_INTERRUPTED),
    ],
)
def test_exit_codes_follow_failure_phase(error, code: int) -> None:  # type: ignore[no-untyped-def]
    assert exit_code_for(error) == code

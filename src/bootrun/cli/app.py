# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the launch, catalog and analysis commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.table import Table

from ..analysis.usage import UsageAnalyzer
from ..catalog.loader import load_catalog
from ..config import DEFAULT_SETTINGS_FILE, load_settings
from ..errors import LaunchError
from ..launcher import launch_application
from ..logging import section
from .options import (
    CONFIG_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    JVM_ARG_OPTION,
    MAIN_CLASS_OPTION,
    MODULE_OPTION,
    MODULE_PATH_OPTION,
    STDERR_FILE_OPTION,
    STDOUT_FILE_OPTION,
    UBER_JAR_OPTION,
    VERBOSE_OPTION,
    WAIT_OPTION,
    StartCLIOptions,
    normalize_cli_values,
)
from .shared import CLILogger, build_cli_logger, exit_code_for

app = typer.Typer(
    name="bootrun",
    help="Launch packaged applications with an inferred module classpath.",
    no_args_is_help=True,
    add_completion=False,
)


@app.command("start")
def start(
    config: CONFIG_OPTION = Path(DEFAULT_SETTINGS_FILE),
    uber_jar: UBER_JAR_OPTION = None,
    debug: DEBUG_OPTION = None,
    jvm_arg: JVM_ARG_OPTION = None,
    module: MODULE_OPTION = None,
    module_path: MODULE_PATH_OPTION = None,
    stdout_file: STDOUT_FILE_OPTION = None,
    stderr_file: STDERR_FILE_OPTION = None,
    main_class: MAIN_CLASS_OPTION = None,
    wait: WAIT_OPTION = True,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Build the classpath, start the application and wait for it to deploy."""

    cli_options = StartCLIOptions(
        config=config,
        uber_jar=uber_jar,
        debug_port=debug,
        jvm_arguments=normalize_cli_values(jvm_arg),
        modules=normalize_cli_values(module),
        module_paths=normalize_cli_values(module_path),
        stdout_file=stdout_file,
        stderr_file=stderr_file,
        main_class=main_class,
        wait=wait,
        emoji=emoji,
        verbose=verbose,
    )
    logger = build_cli_logger(emoji=emoji, debug=verbose)
    try:
        settings = load_settings(cli_options.config)
        options = cli_options.apply(settings.options)
    except LaunchError as exc:
        _abort(logger, exc)

    logger.debug(f"settings loaded from {settings.source}")
    result = launch_application(settings.project, options, use_emoji=emoji)
    if result.error is not None:
        _abort(logger, result.error)
    if options.wait_for_process:
        logger.ok(f"Application exited ({result.state.value})")
    else:
        logger.ok(f"Application running ({result.state.value})")


@app.command("modules")
def modules(
    emoji: EMOJI_OPTION = True,
) -> None:
    """List the modules known to the catalog."""

    logger = build_cli_logger(emoji=emoji)
    try:
        catalog = load_catalog()
    except LaunchError as exc:
        _abort(logger, exc)

    table = Table(title=f"Modules ({catalog.default_group})")
    table.add_column("Module", style="bold")
    table.add_column("Version")
    table.add_column("Name")
    table.add_column("Depends on")
    for descriptor in catalog.sorted():
        table.add_row(
            descriptor.name,
            descriptor.version,
            descriptor.display_name,
            ", ".join(dependency.name for dependency in catalog.dependencies_of(descriptor)),
        )
    logger.console.print(table)


@app.command("analyze")
def analyze(
    artifact: Annotated[Path, typer.Argument(help="Archive (.war/.jar) or exploded directory to scan.")],
    emoji: EMOJI_OPTION = True,
) -> None:
    """Print the modules an application artifact uses."""

    logger = build_cli_logger(emoji=emoji)
    try:
        usage = UsageAnalyzer(load_catalog()).detect(artifact)
    except LaunchError as exc:
        _abort(logger, exc)

    section(f"Modules used by {artifact.name}", use_color=False)
    if not usage:
        logger.warn("No modules detected")
        return
    for label in usage.labels:
        logger.echo(label)


def _abort(logger: CLILogger, error: LaunchError) -> NoReturn:
    logger.fail(error.describe())
    raise typer.Exit(code=exit_code_for(error)) from error


def main() -> None:
    """Run the CLI application."""

    app()


__all__ = ["app", "main"]

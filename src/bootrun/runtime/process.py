# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell-free wrapper used to spawn the supervised child process."""

from __future__ import annotations

import os
import shutil

# Bandit: the launcher starts a single child from a fully normalised argument
# vector and never uses ``shell=True``.
import subprocess  # nosec B404 suppression_valid: Shell-free spawn wrapper.
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..errors import SpawnError


@dataclass(frozen=True, slots=True)
class SpawnOptions:
    """Immutable spawn options for the supervised child."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    inherit_env: bool = True

    def environment(self) -> dict[str, str] | None:
        """Return the child environment, overlaying ``env`` on the host's when inheriting."""

        if self.env is None:
            return None
        if not self.inherit_env:
            return dict(self.env)
        merged = dict(os.environ)
        merged.update(self.env)
        return merged


def normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the argument vector so the executable is an absolute path.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Argument list with the executable resolved.

    Raises:
        SpawnError: If no arguments are provided or the executable cannot be found.
    """

    if not args:
        raise SpawnError("spawn requires at least one argument")

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        if not head_path.exists():
            raise SpawnError(f"Executable '{head}' does not exist")
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        raise SpawnError(f"Executable '{head}' was not found on PATH")
    return [resolved, *rest]


def spawn_process(args: Sequence[str], *, options: SpawnOptions | None = None) -> subprocess.Popen[str]:
    """Start ``args`` with piped line-buffered text output.

    Args:
        args: Command and argument sequence to execute.
        options: Working directory and environment for the child.

    Returns:
        subprocess.Popen[str]: Handle to the running child.

    Raises:
        SpawnError: If the executable or working directory is missing, or the
            operating system refuses to start the process.
    """

    resolved_options = options or SpawnOptions()
    normalized = normalize_args(args)
    if resolved_options.cwd is not None and not resolved_options.cwd.is_dir():
        raise SpawnError(f"working directory does not exist: {resolved_options.cwd}")
    try:
        return subprocess.Popen(  # nosec B603 - argument vector, no shell
            normalized,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            env=resolved_options.environment(),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
            errors="replace",
        )
    except OSError as exc:
        raise SpawnError(f"failed to start '{normalized[0]}': {exc}") from exc


__all__ = ["SpawnOptions", "normalize_args", "spawn_process"]

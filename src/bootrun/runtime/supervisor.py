# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lifecycle supervision for the launched application process.

The supervisor owns exactly one child process and drives it through
``idle -> spawning -> awaiting-readiness -> running -> stopping ->
{stopped | failed}``. Every transition happens under a single
:class:`threading.Condition`; explicit callers and the host shutdown hook
share the same :meth:`ProcessSupervisor.stop` entry point so concurrent
stop attempts converge to one teardown.
"""

from __future__ import annotations

import atexit
import logging
import signal
import subprocess  # nosec B404 suppression_valid: Popen handles only, spawning lives in process.py.
import sys
import threading
import time
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import FrameType
from typing import Final, TextIO

from ..config import DEFAULT_DEPLOY_TIMEOUT, DEFAULT_GRACE_PERIOD
from ..errors import (
    DeployTimeoutError,
    InternalProcessError,
    InterruptedWaitError,
    LaunchError,
    SpawnError,
    SupervisorStateError,
)
from ..launch.models import LaunchConfiguration
from .process import SpawnOptions, spawn_process

LOGGER = logging.getLogger(__name__)

SHUTDOWN_HOOK_DELAY: Final[float] = 0.1
_WAIT_SLICE: Final[float] = 0.5
_PUMP_JOIN_TIMEOUT: Final[float] = 1.0
_SETTLE_TIMEOUT: Final[float] = 3.0


class LifecycleState(StrEnum):
    """States a supervised process moves through."""

    IDLE = "idle"
    SPAWNING = "spawning"
    AWAITING_READINESS = "awaiting-readiness"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` for states the supervisor never leaves."""

        return self in (LifecycleState.STOPPED, LifecycleState.FAILED)


@dataclass(slots=True)
class SupervisedProcess:
    """Handles for one live child process."""

    handle: subprocess.Popen[str]
    command: tuple[str, ...]
    configuration: LaunchConfiguration
    sinks: list[TextIO] = field(default_factory=list)
    threads: list[threading.Thread] = field(default_factory=list)

    @property
    def pid(self) -> int:
        """Return the operating system process id of the child."""

        return self.handle.pid

    def is_alive(self) -> bool:
        """Return ``True`` until the child has been reaped."""

        return self.handle.poll() is None


class ProcessSupervisor:
    """Spawn, observe and stop a single application process."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._state = LifecycleState.IDLE
        self._process: SupervisedProcess | None = None
        self._error: LaunchError | None = None
        self._captured: InternalProcessError | None = None
        self._pending_error: InternalProcessError | None = None
        self._ready_seen = False
        self._returncode: int | None = None
        self._tearing_down = False
        self._forced_kill = False
        self._hook_installed = False
        self._previous_sigterm: object = None
        self._output_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Observers

    @property
    def state(self) -> LifecycleState:
        with self._condition:
            return self._state

    @property
    def forced_kill(self) -> bool:
        """Return ``True`` when teardown had to escalate to a forced kill."""

        with self._condition:
            return self._forced_kill

    @property
    def returncode(self) -> int | None:
        with self._condition:
            return self._returncode

    @property
    def process(self) -> SupervisedProcess | None:
        return self._process

    def is_alive(self) -> bool:
        """Return ``True`` while the child process has not exited."""

        process = self._process
        return process is not None and process.is_alive()

    def get_error(self) -> LaunchError | None:
        """Return the failure, or a non-fatal error captured from the child output."""

        with self._condition:
            return self._error if self._error is not None else self._captured

    # ------------------------------------------------------------------
    # Spawn

    def launch(self, configuration: LaunchConfiguration, *, install_shutdown_hook: bool = True) -> SupervisedProcess:
        """Spawn the process described by *configuration*.

        Args:
            configuration: Immutable process specification.
            install_shutdown_hook: Stop the child when the host interpreter exits.

        Returns:
            SupervisedProcess: Handles for the spawned child.

        Raises:
            SupervisorStateError: If this supervisor already launched a process.
            SpawnError: If the archive or executable is missing, or the OS refuses
                to create the process.
        """

        with self._condition:
            if self._state is not LifecycleState.IDLE:
                raise SupervisorStateError(f"cannot launch from state {self._state.value}")
            self._state = LifecycleState.SPAWNING
            sinks: list[TextIO] = []
            try:
                archive = configuration.executable_archive
                if archive is not None and not archive.is_file():
                    raise SpawnError(f"executable archive not found: {archive}")
                command = configuration.command_line()
                stdout_sink = _open_sink(configuration.stdout_file, sinks)
                if _same_target(configuration.stdout_file, configuration.stderr_file):
                    stderr_sink = stdout_sink
                else:
                    stderr_sink = _open_sink(configuration.stderr_file, sinks)
                handle = spawn_process(
                    command,
                    options=SpawnOptions(cwd=configuration.working_directory, env=configuration.environment),
                )
            except SpawnError as exc:
                _close_all(sinks)
                self._fail_locked(exc)
                raise

            process = SupervisedProcess(handle=handle, command=command, configuration=configuration, sinks=sinks)
            self._process = process
            self._state = LifecycleState.AWAITING_READINESS
            LOGGER.debug("spawned pid %s: %s", handle.pid, " ".join(command))

            pumps = [
                threading.Thread(
                    target=self._pump,
                    args=(handle.stdout, stdout_sink, "stdout"),
                    name=f"bootrun-stdout-{handle.pid}",
                    daemon=True,
                ),
                threading.Thread(
                    target=self._pump,
                    args=(handle.stderr, stderr_sink, "stderr"),
                    name=f"bootrun-stderr-{handle.pid}",
                    daemon=True,
                ),
            ]
            watcher = threading.Thread(
                target=self._watch_exit,
                args=(handle, pumps, sinks),
                name=f"bootrun-exit-{handle.pid}",
                daemon=True,
            )
            process.threads.extend((*pumps, watcher))
            for thread in process.threads:
                thread.start()
            self._condition.notify_all()

        if install_shutdown_hook:
            self._install_shutdown_hook()
        return process

    # ------------------------------------------------------------------
    # Blocking operations

    def await_readiness(self, timeout: float = DEFAULT_DEPLOY_TIMEOUT) -> LifecycleState:
        """Block until the child reports readiness, fails, or *timeout* elapses.

        Returns:
            LifecycleState: ``RUNNING`` on success; ``FAILED`` with
            :class:`DeployTimeoutError` or :class:`InternalProcessError` recorded
            otherwise. A concurrent stop ends the wait early.

        Raises:
            SupervisorStateError: If no process has been launched.
        """

        deadline = time.monotonic() + timeout
        with self._condition:
            if self._state is LifecycleState.IDLE:
                raise SupervisorStateError("await_readiness called before launch")
            while self._state is LifecycleState.AWAITING_READINESS:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self._fail_locked(DeployTimeoutError(timeout))
                    break
                self._condition.wait(remaining)
            return self._state

    def stop(self, grace_period: float = DEFAULT_GRACE_PERIOD) -> LifecycleState:
        """Request a graceful stop, escalating to a forced kill after *grace_period*.

        Safe to call repeatedly and from several threads; later callers wait
        for the teardown already in progress and return its outcome. A child
        that already exited is classified from its exit code, so a crash
        still ends in ``FAILED``.
        """

        with self._condition:
            if self._process is None:
                return self._state
            handle = self._process.handle
            self._await_teardown_locked(handle)
            finished = self._state is LifecycleState.STOPPED or (
                self._state is LifecycleState.FAILED and handle.poll() is not None
            )
            if not finished:
                if not self._state.is_terminal:
                    self._state = LifecycleState.STOPPING
                self._tearing_down = True
                self._condition.notify_all()
        if finished:
            self._release_shutdown_hook()
            return self.state

        forced = False
        try:
            forced = _terminate(handle, grace_period)
        finally:
            if handle.poll() is None:
                handle.kill()
                handle.wait()
                forced = True
            with self._condition:
                self._tearing_down = False
                self._forced_kill = self._forced_kill or forced
                self._returncode = handle.returncode
                if self._state is LifecycleState.STOPPING:
                    self._state = LifecycleState.STOPPED
                self._condition.notify_all()
            self._release_shutdown_hook()
        return self.state

    def wait_for(self, grace_period: float = DEFAULT_GRACE_PERIOD) -> LifecycleState:
        """Block until the process reaches a terminal state.

        An interrupted wait stops the child (graceful, then forced) before
        :class:`InterruptedWaitError` propagates.
        """

        try:
            with self._condition:
                if self._state is LifecycleState.IDLE:
                    raise SupervisorStateError("wait_for called before launch")
                while not self._state.is_terminal or self._tearing_down:
                    self._condition.wait(_WAIT_SLICE)
                return self._state
        except KeyboardInterrupt as exc:
            LOGGER.info("wait interrupted, stopping process")
            self.stop(grace_period)
            raise InterruptedWaitError("wait for process interrupted; process was stopped") from exc

    def destroy_forcibly(self) -> None:
        """Kill the child immediately if it is still running.

        The kill runs as a teardown, so the exit watcher does not report the
        killed child as a crash; a running supervisor ends in ``STOPPED``.
        """

        process = self._process
        if process is None:
            return
        handle = process.handle
        with self._condition:
            owns_teardown = handle.poll() is None and not self._tearing_down
            if owns_teardown:
                self._tearing_down = True
                if not self._state.is_terminal:
                    self._state = LifecycleState.STOPPING
        try:
            if handle.poll() is None:
                handle.kill()
                handle.wait()
                with self._condition:
                    self._forced_kill = True
                    self._returncode = handle.returncode
        finally:
            with self._condition:
                if owns_teardown:
                    self._tearing_down = False
                    if self._state is LifecycleState.STOPPING:
                        self._state = LifecycleState.STOPPED
                self._condition.notify_all()
            self._release_shutdown_hook()

    def _await_teardown_locked(self, handle: subprocess.Popen[str]) -> None:
        """Wait out a teardown in progress and classify a child that already exited."""

        while True:
            while self._tearing_down:
                self._condition.wait()
            if self._state.is_terminal or handle.poll() is None:
                return
            # exited but not yet classified by the exit watcher
            self._condition.wait_for(lambda: self._state.is_terminal or self._tearing_down, timeout=_SETTLE_TIMEOUT)
            if self._tearing_down:
                continue
            if not self._state.is_terminal:
                self._returncode = handle.returncode
                self._settle_locked()
            return

    # ------------------------------------------------------------------
    # Background activity

    def _pump(self, stream: TextIO | None, sink: TextIO | None, channel: str) -> None:
        if stream is None:
            return
        try:
            for line in stream:
                target = sink if sink is not None else (sys.stdout if channel == "stdout" else sys.stderr)
                with self._output_lock:
                    try:
                        target.write(line)
                        target.flush()
                    except (OSError, ValueError) as exc:
                        LOGGER.debug("dropping %s output: %s", channel, exc)
                self._observe_line(line)
        finally:
            stream.close()

    def _observe_line(self, line: str) -> None:
        process = self._process
        if process is None:
            return
        probe = process.configuration.readiness
        with self._condition:
            if probe.is_error(line):
                error = InternalProcessError(line.strip())
                if self._state is LifecycleState.AWAITING_READINESS:
                    self._pending_error = self._pending_error or error
                elif self._captured is None:
                    self._captured = error
            elif probe.is_ready(line):
                self._ready_seen = True
            self._settle_locked()

    def _watch_exit(
        self,
        handle: subprocess.Popen[str],
        pumps: list[threading.Thread],
        sinks: list[TextIO],
    ) -> None:
        returncode = handle.wait()
        for pump in pumps:
            pump.join(_PUMP_JOIN_TIMEOUT)
        with self._output_lock:
            _close_all(sinks)
        with self._condition:
            self._returncode = returncode
            LOGGER.debug("pid %s exited with %s", handle.pid, returncode)
            self._settle_locked()

    def _settle_locked(self) -> None:
        # STOPPING is owned by the teardown in progress and left alone here.
        if self._state is LifecycleState.AWAITING_READINESS:
            if self._pending_error is not None:
                self._fail_locked(self._pending_error)
            elif self._ready_seen:
                self._state = LifecycleState.RUNNING
            elif self._returncode is not None:
                self._fail_locked(
                    InternalProcessError(
                        f"process exited with code {self._returncode} before becoming ready",
                        returncode=self._returncode,
                    )
                )
        if self._state is LifecycleState.RUNNING and self._returncode is not None:
            if self._returncode == 0:
                self._state = LifecycleState.STOPPED
            else:
                self._fail_locked(
                    InternalProcessError(f"process exited with code {self._returncode}", returncode=self._returncode)
                )
        self._condition.notify_all()

    def _fail_locked(self, error: LaunchError) -> None:
        self._state = LifecycleState.FAILED
        self._error = error
        LOGGER.debug("supervisor failed: %s", error.describe())
        self._condition.notify_all()

    # ------------------------------------------------------------------
    # Host shutdown hook

    def _install_shutdown_hook(self) -> None:
        with self._condition:
            if self._hook_installed:
                return
            self._hook_installed = True
        atexit.register(self._on_host_shutdown)
        # Signal handlers can only be installed from the main thread.
        if threading.current_thread() is not threading.main_thread():
            return
        previous = signal.getsignal(signal.SIGTERM)
        if previous == signal.SIG_IGN:
            return
        self._previous_sigterm = previous
        signal.signal(signal.SIGTERM, self._on_host_signal)

    def _release_shutdown_hook(self) -> None:
        with self._condition:
            if not self._hook_installed:
                return
            self._hook_installed = False
        atexit.unregister(self._on_host_shutdown)
        if threading.current_thread() is not threading.main_thread():
            return
        if signal.getsignal(signal.SIGTERM) == self._on_host_signal:
            previous = self._previous_sigterm
            signal.signal(signal.SIGTERM, previous if previous is not None else signal.SIG_DFL)  # type: ignore[arg-type]
            self._previous_sigterm = None

    def _on_host_shutdown(self) -> None:
        time.sleep(SHUTDOWN_HOOK_DELAY)
        self.stop(DEFAULT_GRACE_PERIOD)

    def _on_host_signal(self, signum: int, frame: FrameType | None) -> None:
        """Stop the child when the host is asked to terminate, then hand the signal on.

        A previous Python-level handler is chained; otherwise the host exits
        with ``128 + signum`` so interpreter exit handlers still run.
        """

        previous = self._previous_sigterm
        LOGGER.info("host received signal %s, stopping process", signum)
        if not self._tearing_down:
            self.stop(DEFAULT_GRACE_PERIOD)
        if callable(previous):
            previous(signum, frame)
            return
        raise SystemExit(128 + signum)


def _terminate(handle: subprocess.Popen[str], grace_period: float) -> bool:
    """Send a graceful termination request and return ``True`` if a kill was needed."""

    if handle.poll() is not None:
        return False
    handle.terminate()
    try:
        handle.wait(timeout=grace_period)
    except subprocess.TimeoutExpired:
        LOGGER.warning("process %s ignored termination for %.1fs, killing", handle.pid, grace_period)
        handle.kill()
        handle.wait()
        return True
    return False


def _open_sink(path: Path | None, sinks: list[TextIO]) -> TextIO | None:
    if path is None:
        return None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sink = path.open("w", encoding="utf-8", buffering=1)
    except OSError as exc:
        raise SpawnError(f"cannot open output file {path}: {exc}") from exc
    sinks.append(sink)
    return sink


def _same_target(first: Path | None, second: Path | None) -> bool:
    """Return ``True`` when both redirect targets name the same file."""

    if first is None or second is None:
        return False
    return first.expanduser().resolve() == second.expanduser().resolve()


def _close_all(sinks: list[TextIO]) -> None:
    for sink in sinks:
        sink.close()


__all__ = [
    "LifecycleState",
    "ProcessSupervisor",
    "SHUTDOWN_HOOK_DELAY",
    "SupervisedProcess",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution of configured runners as child processes."""

from __future__ import annotations

import logging
import shlex
import subprocess  # nosec B404 suppression_valid: Only used for type references and Popen handles.
from collections.abc import Iterator, Sequence
from pathlib import Path
from textwrap import shorten
from threading import Event, Thread
from typing import Final

from ..config import Runner
from ..context import RunContext
from ..environment import environ_mapping
from ..interfaces import DiagnosticHandler, Matcher
from ..logging import warn
from ..models import ExecutionOutcome
from .process import TERMINATE_GRACE_SECONDS, CommandOptions, spawn_process, split_command, terminate_process

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL: Final[float] = 0.1
# Exit statuses ``sh`` uses when the command could not be found or run.
_SHELL_SPAWN_FAILURES: Final[dict[int, str]] = {
    126: "command is not executable",
    127: "command not found",
}


class _StderrDrain:
    """Collect standard error on a background thread."""

    def __init__(self, process: subprocess.Popen[str]) -> None:
        self.lines: list[str] = []
        self._thread = Thread(target=self._drain, args=(process,), daemon=True)
        self._thread.start()

    def _drain(self, process: subprocess.Popen[str]) -> None:
        stream = process.stderr
        if stream is None:
            return
        for line in stream:
            self.lines.append(line)

    def join(self) -> list[str]:
        self._thread.join()
        return self.lines


class SubprocessRunnerExecutor:
    """Run a runner's command and stream diagnostics from its output.

    Spawn failures never raise: they are logged and reported as a ``FAILED``
    :class:`~lintreview.models.ExecutionOutcome`. Cancellation of the run
    context terminates the child and raises
    :class:`~lintreview.errors.RunCancelledError`.
    """

    def __init__(
        self,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        grace: float = TERMINATE_GRACE_SECONDS,
        use_emoji: bool = True,
        use_color: bool | None = None,
    ) -> None:
        """Initialise the executor.

        Args:
            poll_interval: Seconds between cancellation checks.
            grace: Seconds to wait after ``SIGTERM`` before killing the child.
            use_emoji: Emit emoji in warnings.
            use_color: Force or disable colour in warnings.
        """

        self._poll_interval = poll_interval
        self._grace = grace
        self._use_emoji = use_emoji
        self._use_color = use_color

    def execute(
        self,
        ctx: RunContext,
        runner: Runner,
        matcher: Matcher,
        env: Sequence[str],
        handler: DiagnosticHandler,
    ) -> ExecutionOutcome:
        """Run ``runner`` and forward its diagnostics to ``handler``.

        Args:
            ctx: Run context; cancellation terminates the process.
            runner: Runner definition to execute.
            matcher: Compiled errorformat for the runner's output.
            env: Sanitized ``KEY=VALUE`` environment entries.
            handler: Callback receiving diagnostics in parse order.

        Returns:
            ExecutionOutcome: ``OK`` with the exit status, or ``FAILED`` when
            the process could not be started.

        Raises:
            RunCancelledError: If ``ctx`` is cancelled before or during the run.
        """

        ctx.check()
        options = CommandOptions(cwd=runner.workdir, env=environ_mapping(env))
        try:
            args = split_command(runner.cmd, shell=runner.shell)
            process = spawn_process(args, options=options)
        except (ValueError, OSError) as exc:
            reason = str(exc) or exc.__class__.__name__
            self._log_failure(runner, reason, cwd=runner.workdir)
            return ExecutionOutcome.failed(runner.name, reason)

        LOGGER.debug("started runner %s (pid %s): %s", runner.name, process.pid, _format_command(process.args))
        drain = _StderrDrain(process)
        finished = Event()
        watchdog = Thread(target=self._watch, args=(ctx, process, finished), daemon=True)
        watchdog.start()
        produced = 0
        try:
            for entry in matcher.scan(self._output_lines(process, drain, runner.include_stderr)):
                handler(entry.to_diagnostic(runner.name, default_severity=runner.level))
                produced += 1
            returncode = process.wait()
        finally:
            finished.set()
            if process.poll() is None:
                terminate_process(process, grace=self._grace)
            watchdog.join()
        stderr_lines = drain.join()
        ctx.check()

        if runner.shell and returncode in _SHELL_SPAWN_FAILURES:
            reason = _SHELL_SPAWN_FAILURES[returncode]
            self._log_failure(runner, reason, cwd=runner.workdir, returncode=returncode, stderr=stderr_lines)
            return ExecutionOutcome.failed(runner.name, reason, returncode=returncode, diagnostics=produced)
        if returncode != 0:
            LOGGER.debug("runner %s exited with %s after %s diagnostic(s)", runner.name, returncode, produced)
        return ExecutionOutcome.succeeded(runner.name, returncode=returncode, diagnostics=produced)

    def _watch(self, ctx: RunContext, process: subprocess.Popen[str], finished: Event) -> None:
        while not finished.wait(self._poll_interval):
            if ctx.cancelled:
                LOGGER.debug("terminating pid %s after cancellation", process.pid)
                terminate_process(process, grace=self._grace)
                return

    @staticmethod
    def _output_lines(process: subprocess.Popen[str], drain: _StderrDrain, include_stderr: bool) -> Iterator[str]:
        """Yield stdout lines followed by stderr lines, as one stream."""

        if process.stdout is not None:
            yield from process.stdout
        stderr_lines = drain.join()
        if include_stderr:
            yield from stderr_lines

    def _log_failure(
        self,
        runner: Runner,
        reason: str,
        *,
        cwd: Path | None,
        returncode: int | None = None,
        stderr: Sequence[str] = (),
    ) -> None:
        """Emit a structured warning describing a runner that could not run."""

        details = [f"command: {runner.cmd}", f"cwd: {cwd or Path.cwd()}"]
        stderr_tail = _last_non_empty_line(stderr)
        if stderr_tail:
            details.append(f"stderr: {stderr_tail}")
        status = f"exit {returncode}" if returncode is not None else "not started"
        message = f"{runner.name} failed ({status}): {reason}" + "\n  " + "\n  ".join(details)
        warn(message, use_emoji=self._use_emoji, use_color=self._use_color)


def _format_command(command: Sequence[str] | str) -> str:
    """Return a shell-friendly representation of ``command``."""

    if isinstance(command, str):
        return command
    return shlex.join(command)


def _last_non_empty_line(lines: Sequence[str]) -> str | None:
    """Return the last non-empty line from ``lines`` truncated for readability."""

    for raw_line in reversed(lines):
        hint = raw_line.strip()
        if hint:
            return shorten(hint, width=160, placeholder="…")
    return None


__all__ = ["SubprocessRunnerExecutor"]

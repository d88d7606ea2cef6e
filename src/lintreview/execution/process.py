# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import os
import shlex
import shutil
import signal

# Bandit: subprocess usage is intentional; commands come from the review
# configuration and are executed without ``shell=True``.
import subprocess  # nosec B404 suppression_valid: Shell-free subprocess wrapper enforces safe execution.
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

SHELL_EXECUTABLE: Final[str] = "sh"
TERMINATE_GRACE_SECONDS: Final[float] = 3.0
TIMEOUT_RETURNCODE: Final[int] = 124


@dataclass(slots=True)
class CommandOptions:
    """Process options shared by every spawn helper."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None
    discard_stdin: bool = True

    def popen_kwargs(self) -> dict[str, object]:
        """Return keyword arguments for :class:`subprocess.Popen`."""

        return {
            "cwd": str(self.cwd) if self.cwd is not None else None,
            "env": dict(self.env) if self.env is not None else None,
            "stdin": subprocess.DEVNULL if self.discard_stdin else None,
        }


class SubprocessExecutionError(RuntimeError):
    """Raised when a helper command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str | None) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Normalised command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stderr: Captured standard error stream.
        """
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {(stderr or '').strip() or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


def split_command(cmd: str, *, shell: bool = False) -> list[str]:
    """Split a configured command line into an argument vector.

    Args:
        cmd: Command line as written in the configuration.
        shell: When ``True`` the line is handed to ``sh -c`` unchanged.

    Returns:
        list[str]: Argument vector, empty when ``cmd`` holds no words.

    Raises:
        ValueError: If ``cmd`` has unbalanced quotes.
    """

    if shell:
        return [SHELL_EXECUTABLE, "-c", cmd] if cmd.strip() else []
    return shlex.split(cmd)


def _normalize_args(args: Sequence[str], *, path: str | None = None) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.
        path: ``PATH`` value used to resolve the executable.

    Returns:
        list[str]: Validated argument list suitable for subprocess execution.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be resolved.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute() or os.sep in head:
        return [str(head_path), *rest]

    resolved = shutil.which(head, path=path)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def spawn_process(args: Sequence[str], *, options: CommandOptions | None = None) -> subprocess.Popen[str]:
    """Start ``args`` with piped text output in its own process group.

    Args:
        args: Command and argument sequence to execute.
        options: Working directory and environment for the child.

    Returns:
        subprocess.Popen[str]: Running process with ``stdout``/``stderr`` pipes.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable cannot be resolved.
        PermissionError: If the executable cannot be started.
    """

    resolved_options = options or CommandOptions()
    search_path = resolved_options.env.get("PATH") if resolved_options.env is not None else None
    normalized = _normalize_args(args, path=search_path)
    # Bandit: argument lists are passed directly without shell expansion.
    return subprocess.Popen(  # nosec B603 - controlled arguments, not user supplied
        normalized,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
        start_new_session=True,
        **resolved_options.popen_kwargs(),
    )


def terminate_process(process: subprocess.Popen[str], *, grace: float = TERMINATE_GRACE_SECONDS) -> int | None:
    """Terminate ``process`` and its group, killing it after ``grace`` seconds.

    The group is signalled even when the leader has already exited, because
    descendants it started may still hold its output pipes open.

    Returns:
        int | None: Exit status once reaped, ``None`` if it could not be reaped.
    """

    _signal_group(process, signal.SIGTERM)
    try:
        return process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        _signal_group(process, signal.SIGKILL)
    try:
        return process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        return None


def _signal_group(process: subprocess.Popen[str], signum: int) -> None:
    try:
        os.killpg(process.pid, signum)
    except ProcessLookupError:
        return
    except PermissionError:
        process.send_signal(signum)


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
    check: bool = True,
) -> CompletedProcess[str]:
    """Execute ``args`` to completion and capture its output.

    Args:
        args: Command and argument sequence to execute.
        options: Base options configuring execution semantics.
        check: Raise when the command exits with a non-zero status.

    Returns:
        CompletedProcess: Subprocess execution metadata.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
    """

    resolved_options = options or CommandOptions()
    process = spawn_process(args, options=resolved_options)
    try:
        stdout, stderr = process.communicate(timeout=resolved_options.timeout)
    except subprocess.TimeoutExpired:
        terminate_process(process)
        stdout, stderr = process.communicate()
        timeout_msg = f"Command timed out after {resolved_options.timeout:.1f}s"
        combined_stderr = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        completed = CompletedProcess(list(process.args), TIMEOUT_RETURNCODE, stdout, combined_stderr)
    else:
        completed = CompletedProcess(list(process.args), process.returncode, stdout, stderr)

    if check and completed.returncode != 0:
        raise SubprocessExecutionError(list(process.args), completed.returncode, completed.stderr)
    return completed


__all__ = [
    "CommandOptions",
    "SubprocessExecutionError",
    "run_command",
    "spawn_process",
    "split_command",
    "terminate_process",
]

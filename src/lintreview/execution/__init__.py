# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process execution for configured runners."""

from __future__ import annotations

from .executor import SubprocessRunnerExecutor
from .process import (
    CommandOptions,
    SubprocessExecutionError,
    run_command,
    spawn_process,
    split_command,
    terminate_process,
)

__all__ = [
    "CommandOptions",
    "SubprocessExecutionError",
    "SubprocessRunnerExecutor",
    "run_command",
    "spawn_process",
    "split_command",
    "terminate_process",
]

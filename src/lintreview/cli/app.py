# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .info import check_config_command, formats_command
from .run import run_command

app = typer.Typer(
    help="Run linters and post their findings on the changed lines of a diff.",
    no_args_is_help=True,
    add_completion=False,
)
app.command("run")(run_command)
app.command("formats")(formats_command)
app.command("check-config")(check_config_command)

__all__ = ["app"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Informational commands: errorformat presets and configuration checks."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ..errorformat import PRESETS, runner_patterns
from ..errors import LintReviewError
from ..orchestration import compile_runners
from .run import resolve_config
from .shared import build_cli_logger


def formats_command(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show the patterns of each preset.")] = False,
) -> None:
    """List the predefined errorformat presets."""

    table = Table(title="Errorformat presets")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    if verbose:
        table.add_column("Patterns", style="dim")
    for name in sorted(PRESETS):
        preset = PRESETS[name]
        row = [preset.name, preset.description]
        if verbose:
            row.append("\n".join(preset.patterns))
        table.add_row(*row)
    Console(highlight=False).print(table)


def check_config_command(
    conf: Annotated[
        Path | None,
        typer.Option("--conf", "-c", help="Configuration file (defaults to .lintreview.toml or pyproject.toml)."),
    ] = None,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji output.")] = False,
) -> None:
    """Validate the configuration and compile every runner's errorformat."""

    logger = build_cli_logger(emoji=not no_emoji)
    try:
        config = resolve_config(conf, Path.cwd())
        compiled = compile_runners(config)
    except LintReviewError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc
    for runner, _matcher in compiled:
        logger.echo(f"{runner.name}: {len(runner_patterns(runner))} pattern(s), cmd={runner.cmd!r}")
    logger.ok(f"configuration is valid ({len(compiled)} runner(s))")


__all__ = ["check_config_command", "formats_command"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Errorformat compilation and scanning for runner output."""

from __future__ import annotations

from collections.abc import Sequence

from ..config import Runner
from ..errors import ConfigurationError
from ..interfaces import FormatCompiler, Matcher
from .compiler import ErrorformatError, Rule, RuleKind, compile_rule, compile_rules
from .presets import PRESETS, Preset, get_preset
from .scanner import Entry, Errorformat


def compile_errorformat(patterns: Sequence[str]) -> Errorformat:
    """Compile ``patterns`` into a reusable :class:`Errorformat` matcher.

    Raises:
        ErrorformatError: If any pattern is invalid.
    """

    return Errorformat.from_patterns(patterns)


def runner_patterns(runner: Runner) -> tuple[str, ...]:
    """Return the errorformat patterns configured for ``runner``.

    Explicit ``errorformat`` entries win; otherwise the ``format`` preset is
    used, falling back to a preset named after the runner itself.

    Raises:
        ConfigurationError: If no patterns can be determined.
    """

    if runner.errorformat:
        return runner.errorformat
    if runner.format:
        preset = get_preset(runner.format)
        if preset is None:
            raise ConfigurationError(runner.name, f"unknown format name {runner.format!r}")
        return preset.patterns
    preset = get_preset(runner.name)
    if preset is not None:
        return preset.patterns
    raise ConfigurationError(runner.name, "errorformat or a known format name is required")


def resolve_errorformat(runner: Runner, compiler: FormatCompiler = compile_errorformat) -> Matcher:
    """Compile the matcher for ``runner`` using ``compiler``.

    Raises:
        ConfigurationError: Naming the runner and the failing pattern.
    """

    patterns = runner_patterns(runner)
    try:
        return compiler(patterns)
    except ErrorformatError as exc:
        raise ConfigurationError(runner.name, exc.reason, pattern=exc.pattern) from exc


__all__ = [
    "PRESETS",
    "Entry",
    "Errorformat",
    "ErrorformatError",
    "Preset",
    "Rule",
    "RuleKind",
    "compile_errorformat",
    "compile_rule",
    "compile_rules",
    "get_preset",
    "resolve_errorformat",
    "runner_patterns",
]

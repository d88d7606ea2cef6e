# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Predefined errorformats for commonly used linters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class Preset:
    """Named errorformat bundled with the tool."""

    name: str
    description: str
    patterns: tuple[str, ...]


_GCC_STYLE: Final[tuple[str, ...]] = (
    "%f:%l:%c: %trror: %m",
    "%f:%l:%c: %tarning: %m",
    "%f:%l:%c: %tote: %m",
    "%-G%.%#",
)

_PRESETS: Final[tuple[Preset, ...]] = (
    Preset("eslint-compact", "eslint --format compact", (
        "%f: line %l, col %c, %trror - %m",
        "%f: line %l, col %c, %tarning - %m",
        "%-G%.%#",
    )),
    Preset("flake8", "flake8 default output", ("%f:%l:%c: %t%n %m",)),
    Preset("gcc", "GCC/Clang diagnostics", _GCC_STYLE),
    Preset("go-vet", "go vet", ("%f:%l:%c: %m", "%f:%l: %m", "%-G%.%#")),
    Preset("golint", "golint / revive default output", ("%f:%l:%c: %m",)),
    Preset("hadolint", "hadolint tty output", ("%f:%l %m",)),
    Preset("mypy", "mypy default output", (
        "%f:%l:%c: %trror: %m",
        "%f:%l:%c: %tarning: %m",
        "%f:%l:%c: %tote: %m",
        "%f:%l: %trror: %m",
        "%f:%l: %tarning: %m",
        "%f:%l: %tote: %m",
        "%-G%.%#",
    )),
    Preset("pycodestyle", "pycodestyle default output", ("%f:%l:%c: %t%n %m",)),
    Preset("pylint", "pylint --output-format=parseable", (
        "%f:%l: [%t%n(%*[^)]), %*[^]]] %m",
        "%f:%l: [%t%n%*[^]]] %m",
        "%-G%.%#",
    )),
    Preset("ruff", "ruff check --output-format=concise", ("%f:%l:%c: %m", "%-G%.%#")),
    Preset("shellcheck", "shellcheck --format=gcc", _GCC_STYLE),
    Preset("tsc", "TypeScript compiler", (
        "%f(%l,%c): %trror TS%n: %m",
        "%f(%l,%c): %tarning TS%n: %m",
        "%-G%.%#",
    )),
    Preset("yamllint", "yamllint --format parsable", (
        "%f:%l:%c: [%trror] %m",
        "%f:%l:%c: [%tarning] %m",
    )),
)

PRESETS: Final[dict[str, Preset]] = {preset.name: preset for preset in _PRESETS}


def get_preset(name: str) -> Preset | None:
    """Return the preset registered under ``name``, if any."""

    return PRESETS.get(name)


__all__ = ["PRESETS", "Preset", "get_preset"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels normalising the vocabularies of different linters."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Return the ordering weight of the severity (higher is more severe)."""

        return _SEVERITY_RANK[self]

    def at_least(self, threshold: Severity) -> bool:
        """Return ``True`` when this severity meets or exceeds ``threshold``."""

        return self.rank >= threshold.rank


class FailLevel(str, Enum):
    """Thresholds that decide whether posted findings fail the run."""

    NONE = "none"
    ANY = "any"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def threshold(self) -> Severity | None:
        """Return the minimum severity that trips this level, if any."""

        return _FAIL_LEVEL_THRESHOLDS.get(self)


_SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.INFO: 1,
    Severity.WARNING: 2,
    Severity.ERROR: 3,
}

_FAIL_LEVEL_THRESHOLDS: Final[dict[FailLevel, Severity]] = {
    FailLevel.ANY: Severity.INFO,
    FailLevel.INFO: Severity.INFO,
    FailLevel.WARNING: Severity.WARNING,
    FailLevel.ERROR: Severity.ERROR,
}

_TYPE_CHAR_SEVERITY: Final[dict[str, Severity]] = {
    "e": Severity.ERROR,
    "w": Severity.WARNING,
    "i": Severity.INFO,
    "n": Severity.INFO,
}


def severity_from_type(type_char: str | None, default: Severity | None = None) -> Severity | None:
    """Infer severity from an errorformat ``%t`` type character.

    Args:
        type_char: Single character captured by ``%t`` or implied by an
            ``%E``/``%W``/``%I``/``%N`` prefix.
        default: Severity returned when ``type_char`` is empty or unknown.

    Returns:
        Severity | None: Matching severity, or ``default``.
    """

    if not type_char:
        return default
    return _TYPE_CHAR_SEVERITY.get(type_char[0].lower(), default)


__all__ = ["FailLevel", "Severity", "severity_from_type"]

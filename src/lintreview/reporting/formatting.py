# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Text helpers shared by the comment sinks."""

from __future__ import annotations

from typing import Final

from ..models import Diagnostic, FilteredDiagnostic
from ..severity import Severity

LOCATION_SEPARATOR: Final[str] = ":"


def severity_color(severity: Severity | None) -> str:
    """Return the rich colour name associated with a severity level."""

    if severity is None:
        return "magenta"
    return {
        Severity.ERROR: "red",
        Severity.WARNING: "yellow",
        Severity.INFO: "cyan",
    }.get(severity, "yellow")


def display_location(filtered: FilteredDiagnostic) -> str:
    """Return ``path:line:column`` using the diff-relative path when known."""

    diagnostic = filtered.diagnostic
    location = filtered.source_path or diagnostic.file or "<unknown>"
    if diagnostic.line is not None:
        location += f"{LOCATION_SEPARATOR}{diagnostic.line}"
        if diagnostic.column is not None:
            location += f"{LOCATION_SEPARATOR}{diagnostic.column}"
    return location


def markdown_body(diagnostic: Diagnostic) -> str:
    """Render ``diagnostic`` as a Markdown review comment body."""

    header = f"**[{diagnostic.tool}]**"
    if diagnostic.severity is not None:
        header += f" {diagnostic.severity.value}"
    if diagnostic.code:
        header += f" `{diagnostic.code}`"
    return f"{header}\n\n{diagnostic.message}".rstrip()


__all__ = ["display_location", "markdown_body", "severity_color"]

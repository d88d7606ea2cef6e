# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Print review comments to the terminal."""

from __future__ import annotations

from threading import Lock

from rich.console import Console
from rich.text import Text

from ..console import detect_tty, get_console_manager
from ..context import RunContext
from ..models import FilteredDiagnostic
from .formatting import display_location, severity_color


class LocalCommentSink:
    """Render each posted diagnostic as one rich console line.

    Posts from concurrent runners are serialised so lines never interleave.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        use_color: bool | None = None,
        use_emoji: bool = True,
        show_raw: bool = False,
    ) -> None:
        color = detect_tty() if use_color is None else use_color
        self._console = console or get_console_manager().get(color=color, emoji=use_emoji)
        self._color = color
        self._show_raw = show_raw
        self._lock = Lock()
        self.posted = 0

    def post(self, ctx: RunContext, diagnostic: FilteredDiagnostic) -> None:
        ctx.check()
        line = self._render(diagnostic)
        with self._lock:
            self._console.print(line)
            if self._show_raw:
                for raw in diagnostic.diagnostic.raw_lines:
                    self._console.print(Text(f"    {raw}", style="dim" if self._color else ""))
            self.posted += 1

    def _render(self, filtered: FilteredDiagnostic) -> Text:
        diagnostic = filtered.diagnostic
        text = Text()
        text.append(display_location(filtered), style="bold" if self._color else "")
        text.append(": ")
        if diagnostic.severity is not None:
            text.append(diagnostic.severity.value, style=severity_color(diagnostic.severity) if self._color else "")
            text.append(": ")
        text.append(diagnostic.message.splitlines()[0] if diagnostic.message else "")
        if diagnostic.code:
            text.append(f" ({diagnostic.code})", style="dim" if self._color else "")
        text.append(f" [{diagnostic.tool}]", style="cyan" if self._color else "")
        return text


__all__ = ["LocalCommentSink"]

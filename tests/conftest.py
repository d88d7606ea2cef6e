# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from lintreview.context import RunContext


@pytest.fixture
def ctx() -> RunContext:
    """Return a live, unbounded run context."""
    return RunContext.background()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper that writes ``.lintreview.toml`` into ``tmp_path``."""

    def _write(content: str) -> Path:
        path = tmp_path / ".lintreview.toml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def captured_warnings(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Capture console warnings emitted by the executor and orchestrator."""

    messages: list[str] = []

    def _capture(message: str, **_kwargs: object) -> None:
        messages.append(message)

    monkeypatch.setattr("lintreview.execution.executor.warn", _capture)
    monkeypatch.setattr("lintreview.orchestration.orchestrator.warn", _capture)
    return messages

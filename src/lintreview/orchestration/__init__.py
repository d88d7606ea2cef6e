# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Review run orchestration."""

from __future__ import annotations

from .orchestrator import DebugLogger, FilterFactory, compile_runners, default_filter_factory, run
from .pipeline import PostFailureLog, RunnerPipeline

__all__ = [
    "DebugLogger",
    "FilterFactory",
    "PostFailureLog",
    "RunnerPipeline",
    "compile_runners",
    "default_filter_factory",
    "run",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Environment redaction for linter subprocesses."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from typing import Final

GITHUB_TOKEN_ENV: Final[str] = "LINTREVIEW_GITHUB_API_TOKEN"
GITLAB_TOKEN_ENV: Final[str] = "LINTREVIEW_GITLAB_API_TOKEN"
GENERIC_TOKEN_ENV: Final[str] = "LINTREVIEW_TOKEN"

# Credentials used by comment sinks; linters must never see them.
SECRET_ENV_NAMES: Final[frozenset[str]] = frozenset({GITHUB_TOKEN_ENV, GITLAB_TOKEN_ENV, GENERIC_TOKEN_ENV})


def filtered_environ(
    environ: Mapping[str, str] | None = None,
    *,
    deny: Iterable[str] = SECRET_ENV_NAMES,
) -> tuple[str, ...]:
    """Return ``KEY=VALUE`` entries of ``environ`` without deny-listed names.

    Matching is by exact, case-sensitive variable name. The input mapping is
    only read; callers receive a new tuple in the original entry order.

    Args:
        environ: Environment to redact. Defaults to :data:`os.environ`.
        deny: Variable names that must not be passed to child processes.

    Returns:
        tuple[str, ...]: Redacted entries preserving order and values.
    """

    source = os.environ if environ is None else environ
    blocked = frozenset(deny)
    return tuple(f"{key}={value}" for key, value in source.items() if key not in blocked)


def environ_mapping(entries: Sequence[str]) -> dict[str, str]:
    """Convert ``KEY=VALUE`` entries into the mapping expected by ``subprocess``.

    Args:
        entries: Entries as produced by :func:`filtered_environ`.

    Returns:
        dict[str, str]: Mapping with one item per entry; values keep any ``=``.
    """

    mapping: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep:
            continue
        mapping[key] = value
    return mapping


__all__ = [
    "GENERIC_TOKEN_ENV",
    "GITHUB_TOKEN_ENV",
    "GITLAB_TOKEN_ENV",
    "SECRET_ENV_NAMES",
    "environ_mapping",
    "filtered_environ",
]

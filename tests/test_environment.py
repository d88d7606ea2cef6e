# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for environment redaction."""

from __future__ import annotations

import os

import pytest

from lintreview.environment import SECRET_ENV_NAMES, environ_mapping, filtered_environ


def test_filtered_environ_removes_review_tokens() -> None:
    environ = {
        "PATH": "/usr/bin",
        "LINTREVIEW_GITHUB_API_TOKEN": "ghp",
        "HOME": "/home/user",
        "LINTREVIEW_GITLAB_API_TOKEN": "glpat",
        "LINTREVIEW_TOKEN": "generic",
    }

    assert filtered_environ(environ) == ("PATH=/usr/bin", "HOME=/home/user")


def test_filtered_environ_preserves_order_and_values() -> None:
    environ = {"B": "x=y", "A": "", "C": " spaced "}

    assert filtered_environ(environ) == ("B=x=y", "A=", "C= spaced ")


def test_filtered_environ_is_case_sensitive() -> None:
    environ = {"lintreview_token": "keep", "LINTREVIEW_TOKEN_EXTRA": "keep"}

    assert filtered_environ(environ) == ("lintreview_token=keep", "LINTREVIEW_TOKEN_EXTRA=keep")


def test_filtered_environ_does_not_mutate_input() -> None:
    environ = {"LINTREVIEW_TOKEN": "secret", "PATH": "/bin"}

    filtered_environ(environ)

    assert environ == {"LINTREVIEW_TOKEN": "secret", "PATH": "/bin"}


def test_filtered_environ_defaults_to_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINTREVIEW_GITHUB_API_TOKEN", "secret")
    monkeypatch.setenv("LINTREVIEW_TEST_VISIBLE", "1")

    entries = filtered_environ()

    assert "LINTREVIEW_TEST_VISIBLE=1" in entries
    assert not any(entry.startswith("LINTREVIEW_GITHUB_API_TOKEN=") for entry in entries)
    assert os.environ["LINTREVIEW_GITHUB_API_TOKEN"] == "secret"


def test_custom_deny_list() -> None:
    assert filtered_environ({"A": "1", "B": "2"}, deny={"A"}) == ("B=2",)


def test_secret_names_cover_every_platform_token() -> None:
    assert SECRET_ENV_NAMES == {"LINTREVIEW_GITHUB_API_TOKEN", "LINTREVIEW_GITLAB_API_TOKEN", "LINTREVIEW_TOKEN"}


def test_environ_mapping_splits_on_first_equals() -> None:
    assert environ_mapping(("A=1", "B=x=y", "EMPTY=")) == {"A": "1", "B": "x=y", "EMPTY": ""}

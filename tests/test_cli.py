# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the run, formats and check-config commands."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from lintreview.cli import app
from lintreview.cli.run import ReporterName, RunOptions, build_diff_source, guess_pull_request
from lintreview.cli.shared import PACKAGE_LOGGER_NAME, CLIError, CLILogger, configure_debug_logging
from lintreview.diff import CommandDiffSource, FileDiffSource, GitDiffSource
from tests.helpers.fakes import SIMPLE_DIFF

ECHO_CONFIG = """
[runner.lint]
cmd = "echo pkg/app.py:2: found"
errorformat = "%f:%l: %m"
{extra}
"""


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LINTREVIEW_GITHUB_API_TOKEN", raising=False)
    monkeypatch.delenv("LINTREVIEW_TOKEN", raising=False)
    (tmp_path / "change.diff").write_bytes(SIMPLE_DIFF)
    return tmp_path


def _invoke(*args: str):
    return CliRunner().invoke(app, list(args))


def test_formats_lists_presets() -> None:
    result = _invoke("formats")

    assert result.exit_code == 0
    assert "flake8" in result.output
    assert "golint" in result.output


def test_check_config_accepts_valid_configuration(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("check-config", "--no-emoji")

    assert result.exit_code == 0
    assert "lint: 1 pattern(s)" in result.output
    assert "configuration is valid (1 runner(s))" in result.output


def test_check_config_reports_runner_errors(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config('[runner.custom]\ncmd = "custom-lint"\n')

    result = _invoke("check-config", "--no-emoji")

    assert result.exit_code == 1
    assert "errorformat or a known format name is required" in result.output


def test_missing_configuration_is_reported(project: Path) -> None:
    result = _invoke("run", "--diff-file", "change.diff", "--no-emoji")

    assert result.exit_code == 1
    assert "no configuration found" in result.output


def test_run_posts_findings_locally(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--diff-file", "change.diff", "--no-emoji", "--no-color")

    assert result.exit_code == 0, result.output
    assert "pkg/app.py:2: found [lint]" in result.output
    assert "posted 1 comment(s) from 1 runner(s)" in result.output


def test_run_with_diff_command(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--diff", "cat change.diff", "--no-emoji", "--no-color")

    assert result.exit_code == 0, result.output
    assert "pkg/app.py:2: found [lint]" in result.output


def test_out_of_scope_findings_are_not_posted(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra="").replace("pkg/app.py:2:", "pkg/app.py:40:"))

    result = _invoke("run", "--diff-file", "change.diff", "--no-emoji", "--no-color")

    assert result.exit_code == 0
    assert "posted 0 comment(s)" in result.output

    widened = _invoke("run", "--diff-file", "change.diff", "--filter-mode", "file", "--no-emoji", "--no-color")

    assert "pkg/app.py:40: found [lint]" in widened.output


def test_untyped_findings_trip_the_error_fail_level(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--diff-file", "change.diff", "--fail-level", "error", "--no-emoji", "--no-color")

    assert result.exit_code == 1
    assert "findings at or above fail level 'error'" in result.output


def test_fail_level_compares_runner_level(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra='level = "info"'))

    below = _invoke("run", "--diff-file", "change.diff", "--fail-level", "warning", "--no-emoji", "--no-color")
    anything = _invoke("run", "--diff-file", "change.diff", "--fail-level", "any", "--no-emoji", "--no-color")

    assert below.exit_code == 0
    assert anything.exit_code == 1


def test_failed_runner_is_summarised(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config('[runner.missing]\ncmd = "not found"\nerrorformat = "%f"\n')

    result = _invoke("run", "--diff-file", "change.diff", "--no-emoji", "--no-color")

    assert result.exit_code == 0
    assert "missing failed (exit 127)" in result.output
    assert "runner missing did not run" in result.output


def test_debug_flag_shows_executor_details(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--diff-file", "change.diff", "--debug", "--no-emoji", "--no-color")

    assert result.exit_code == 0, result.output
    assert "started runner lint" in result.output


def test_debug_logging_is_routed_and_removed() -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, force_terminal=False, color_system=None, width=200)
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    configure_debug_logging(CLILogger(console=console, use_emoji=False, debug_enabled=True))
    logging.getLogger("lintreview.errorformat.scanner").debug("skipping unparsable line %r", "x")
    configure_debug_logging(CLILogger(console=console, use_emoji=False))
    logging.getLogger("lintreview.errorformat.scanner").debug("hidden")

    assert buffer.getvalue().splitlines() == ["[debug] skipping unparsable line 'x'"]
    assert package_logger.handlers == []
    assert package_logger.propagate


def test_github_reporter_requires_a_token(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--reporter", "github-pr-review", "--repo", "octo/demo", "--pr", "3", "--no-emoji")

    assert result.exit_code == 1
    assert "requires LINTREVIEW_GITHUB_API_TOKEN" in result.output


def test_github_reporter_requires_a_target(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--reporter", "github-pr-review", "--no-emoji")

    assert result.exit_code == 1
    assert "requires --repo and --pr" in result.output


def test_diff_options_are_exclusive(project: Path, write_config: Callable[[str], Path]) -> None:
    write_config(ECHO_CONFIG.format(extra=""))

    result = _invoke("run", "--diff", "git diff", "--diff-file", "change.diff", "--no-emoji")

    assert result.exit_code == 1
    assert "cannot be combined" in result.output


def test_build_diff_source_defaults() -> None:
    assert isinstance(build_diff_source(RunOptions()), GitDiffSource)
    assert isinstance(build_diff_source(RunOptions(diff_cmd="hg diff")), CommandDiffSource)
    source = build_diff_source(RunOptions(diff_file=Path("x.diff"), strip=0))
    assert isinstance(source, FileDiffSource)
    assert source.strip == 0


def test_guess_pull_request_reads_the_event_payload(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"pull_request": {"number": 42}}), encoding="utf-8")

    environ = {"GITHUB_REPOSITORY": "octo/demo", "GITHUB_EVENT_PATH": str(event)}

    assert guess_pull_request(environ) == ("octo/demo", 42)


@pytest.mark.parametrize("payload", [{}, {"pull_request": {}}, {"pull_request": None}, {"number": "7"}])
def test_guess_pull_request_rejects_other_events(tmp_path: Path, payload: dict[str, object]) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(CLIError, match="not a pull request event"):
        guess_pull_request({"GITHUB_REPOSITORY": "octo/demo", "GITHUB_EVENT_PATH": str(event)})


def test_guess_pull_request_requires_actions_environment() -> None:
    with pytest.raises(CLIError, match="--guess requires"):
        guess_pull_request({})


def test_reporter_names() -> None:
    assert [reporter.value for reporter in ReporterName] == ["local", "github-pr-review"]

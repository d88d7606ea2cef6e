# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Review run command implementation."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Final

import typer

from ..config import Config, FilterMode, PostFailurePolicy, discover_config, load_config
from ..context import RunContext
from ..diff import CommandDiffSource, FileDiffSource, GitDiffSource, GitHubPullRequestDiffSource
from ..errors import ConfigError, LintReviewError, PostFailedError
from ..github_api import GitHubClient
from ..interfaces import CommentSink, DiffSource
from ..models import RunReport
from ..orchestration import run
from ..reporting import GitHubReviewSink, LocalCommentSink
from ..severity import FailLevel
from .shared import CLIError, CLILogger, build_cli_logger

GITHUB_REPOSITORY_ENV: Final[str] = "GITHUB_REPOSITORY"
GITHUB_EVENT_PATH_ENV: Final[str] = "GITHUB_EVENT_PATH"


class ReporterName(str, Enum):
    """Comment sinks selectable from the command line."""

    LOCAL = "local"
    GITHUB_PR_REVIEW = "github-pr-review"


@dataclass(slots=True)
class RunOptions:
    """Command line inputs for ``lintreview run``."""

    conf: Path | None = None
    reporter: ReporterName = ReporterName.LOCAL
    diff_cmd: str | None = None
    diff_file: Path | None = None
    strip: int | None = None
    filter_mode: FilterMode | None = None
    fail_level: FailLevel | None = None
    post_failure: PostFailurePolicy | None = None
    jobs: int | None = None
    timeout: float | None = None
    guess: bool = False
    repo: str | None = None
    pr: int | None = None
    no_emoji: bool = False
    no_color: bool = False
    debug: bool = False


def resolve_config(conf: Path | None, root: Path) -> Config:
    """Load the configuration named by ``conf`` or discovered under ``root``.

    Raises:
        ConfigError: If no configuration exists or it is invalid.
    """

    path = conf if conf is not None else discover_config(root)
    if path is None:
        raise ConfigError(f"no configuration found in {root} (expected .lintreview.toml or [tool.lintreview])")
    return load_config(path)


def guess_pull_request(environ: Mapping[str, str]) -> tuple[str, int]:
    """Return ``(repository, number)`` from a GitHub Actions environment.

    Raises:
        CLIError: If the environment does not describe a pull request event.
    """

    repository = environ.get(GITHUB_REPOSITORY_ENV)
    event_path = environ.get(GITHUB_EVENT_PATH_ENV)
    if not repository or not event_path:
        raise CLIError(f"--guess requires {GITHUB_REPOSITORY_ENV} and {GITHUB_EVENT_PATH_ENV}")
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CLIError(f"cannot read GitHub event payload {event_path}: {exc}") from exc
    number = (payload.get("pull_request") or {}).get("number") or payload.get("number")
    if not isinstance(number, int):
        raise CLIError(f"GitHub event at {event_path} is not a pull request event")
    return repository, number


def _pull_request_target(options: RunOptions, environ: Mapping[str, str]) -> tuple[str, int]:
    if options.guess:
        return guess_pull_request(environ)
    if not options.repo or options.pr is None:
        raise CLIError("--reporter github-pr-review requires --repo and --pr (or --guess)")
    return options.repo, options.pr


def build_diff_source(
    options: RunOptions,
    *,
    client: GitHubClient | None = None,
    number: int | None = None,
) -> DiffSource:
    """Select the diff source implied by ``options``."""

    if options.diff_file is not None and options.diff_cmd is not None:
        raise CLIError("--diff and --diff-file cannot be combined")
    strip = 1 if options.strip is None else options.strip
    if options.diff_file is not None:
        return FileDiffSource(options.diff_file, strip=strip)
    if options.diff_cmd is not None:
        return CommandDiffSource.from_command_line(options.diff_cmd, strip=strip)
    if client is not None and number is not None:
        return GitHubPullRequestDiffSource(client, number, strip=strip)
    return GitDiffSource(strip=strip)


def build_sink(
    options: RunOptions,
    config: Config,
    environ: Mapping[str, str],
) -> tuple[CommentSink, GitHubClient | None, int | None]:
    """Return the comment sink and, for GitHub, its client and PR number."""

    if options.reporter is ReporterName.LOCAL:
        sink = LocalCommentSink(use_color=config.output.color, use_emoji=config.output.emoji)
        return sink, None, None
    repository, number = _pull_request_target(options, environ)
    try:
        client = GitHubClient.from_environment(repository, environ=environ)
    except ValueError as exc:
        raise CLIError(str(exc)) from exc
    if not client.token:
        raise CLIError("github-pr-review requires LINTREVIEW_GITHUB_API_TOKEN or LINTREVIEW_TOKEN")
    return GitHubReviewSink(client, number), client, number


def apply_overrides(config: Config, options: RunOptions) -> Config:
    """Return ``config`` with command line overrides applied."""

    updated = config.with_execution(
        jobs=options.jobs,
        timeout=options.timeout,
        filter_mode=options.filter_mode,
        post_failure_policy=options.post_failure,
        fail_level=options.fail_level,
    )
    return updated.with_output(
        emoji=False if options.no_emoji else None,
        color=False if options.no_color else None,
    )


def execute_run(options: RunOptions, *, root: Path, environ: Mapping[str, str], logger: CLILogger) -> int:
    """Run a review for ``options`` and return the process exit status."""

    try:
        config = apply_overrides(resolve_config(options.conf, root), options)
        sink, client, number = build_sink(options, config, environ)
        diff_source = build_diff_source(options, client=client, number=number)
        ctx = RunContext.background().with_timeout(config.execution.timeout)
        report = run(ctx, config, sink, diff_source, environ=environ, debug_logger=logger.debug)
    except PostFailedError as exc:
        _summarize(exc.report, logger)
        logger.fail(str(exc))
        return 1
    except (CLIError, LintReviewError) as exc:
        logger.fail(str(exc))
        return exc.exit_code if isinstance(exc, CLIError) else 1

    _summarize(report, logger)
    if report.has_findings(config.execution.fail_level):
        logger.fail(f"findings at or above fail level '{config.execution.fail_level.value}' were reported")
        return 1
    return 0


def _summarize(report: RunReport, logger: CLILogger) -> None:
    for name in report.failed_runners:
        logger.warn(f"runner {name} did not run")
    runners = len(report.runners)
    logger.ok(f"posted {report.posted} comment(s) from {runners} runner(s)")


def run_command(
    conf: Annotated[
        Path | None,
        typer.Option("--conf", "-c", help="Configuration file (defaults to .lintreview.toml or pyproject.toml)."),
    ] = None,
    reporter: Annotated[
        ReporterName,
        typer.Option("--reporter", "-r", case_sensitive=False, help="Where to post review comments."),
    ] = ReporterName.LOCAL,
    diff_cmd: Annotated[
        str | None,
        typer.Option("--diff", help="Command whose output is the diff (default: git diff)."),
    ] = None,
    diff_file: Annotated[
        Path | None,
        typer.Option("--diff-file", help="Read the diff from a file ('-' for stdin)."),
    ] = None,
    strip: Annotated[
        int | None,
        typer.Option("--strip", min=0, help="Leading path components to strip from diff paths."),
    ] = None,
    filter_mode: Annotated[
        FilterMode | None,
        typer.Option("--filter-mode", case_sensitive=False, help="Review scope for diagnostics."),
    ] = None,
    fail_level: Annotated[
        FailLevel | None,
        typer.Option("--fail-level", case_sensitive=False, help="Exit 1 when a posted finding meets this level."),
    ] = None,
    post_failure: Annotated[
        PostFailurePolicy | None,
        typer.Option("--post-failure", case_sensitive=False, help="Whether failed posts fail the run."),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", min=1, help="Runners executed concurrently."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0, help="Wall-clock limit for the whole run in seconds."),
    ] = None,
    guess: Annotated[
        bool,
        typer.Option("--guess", help="Detect repository and pull request from GitHub Actions."),
    ] = False,
    repo: Annotated[
        str | None,
        typer.Option("--repo", help="GitHub repository as owner/name."),
    ] = None,
    pr: Annotated[
        int | None,
        typer.Option("--pr", min=1, help="Pull request number."),
    ] = None,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable ANSI colour output.")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Print debug output.")] = False,
) -> None:
    """Run every configured linter and post in-scope findings."""

    options = RunOptions(
        conf=conf,
        reporter=reporter,
        diff_cmd=diff_cmd,
        diff_file=diff_file,
        strip=strip,
        filter_mode=filter_mode,
        fail_level=fail_level,
        post_failure=post_failure,
        jobs=jobs,
        timeout=timeout,
        guess=guess,
        repo=repo,
        pr=pr,
        no_emoji=no_emoji,
        no_color=no_color,
        debug=debug,
    )
    logger = build_cli_logger(emoji=not no_emoji, debug=debug, no_color=no_color)
    code = execute_run(options, root=Path.cwd(), environ=dict(os.environ), logger=logger)
    raise typer.Exit(code=code)


__all__ = [
    "ReporterName",
    "RunOptions",
    "apply_overrides",
    "build_diff_source",
    "build_sink",
    "execute_run",
    "guess_pull_request",
    "resolve_config",
    "run_command",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High level orchestration of a review run.

A run moves through four stages: every runner's errorformat is compiled, the
diff is fetched once, runners execute concurrently while their in-scope
diagnostics are posted, and the outcome is aggregated into a
:class:`~lintreview.models.RunReport` or a single raised error.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from ..config import Config, FilterMode, PostFailurePolicy, Runner
from ..context import RunContext
from ..diff import DiffFilter
from ..environment import filtered_environ
from ..errorformat import compile_errorformat, resolve_errorformat
from ..errors import DiffFetchError, PostFailedError, RunCancelledError
from ..execution import SubprocessRunnerExecutor
from ..interfaces import (
    CommentSink,
    DiagnosticFilter,
    DiffSource,
    FlushableSink,
    FormatCompiler,
    Matcher,
    RunnerExecutor,
)
from ..logging import warn
from ..models import ExecutionOutcome, FetchedDiff, RunnerReport, RunReport
from .pipeline import PostFailureLog, RunnerPipeline

FilterFactory = Callable[[FetchedDiff, FilterMode], DiagnosticFilter]
DebugLogger = Callable[[str], None]


def default_filter_factory(diff: FetchedDiff, mode: FilterMode) -> DiagnosticFilter:
    """Build a :class:`~lintreview.diff.DiffFilter` for ``diff``."""

    return DiffFilter.from_diff(diff, mode=mode)


def _ignore_debug(_message: str) -> None:
    return None


@dataclass(frozen=True, slots=True)
class _PreparedRunner:
    runner: Runner
    matcher: Matcher


@dataclass(frozen=True, slots=True)
class _RunEnvironment:
    """Shared, read-only inputs for every runner of one run."""

    ctx: RunContext
    config: Config
    sink: CommentSink
    executor: RunnerExecutor
    diff_filter: DiagnosticFilter
    env: tuple[str, ...]
    failures: PostFailureLog
    debug: DebugLogger


def compile_runners(config: Config, compiler: FormatCompiler | None = None) -> list[tuple[Runner, Matcher]]:
    """Compile every runner's errorformat in execution order.

    Args:
        config: Configuration holding the runners.
        compiler: Errorformat compiler; defaults to the built-in one.

    Returns:
        list[tuple[Runner, Matcher]]: Runners paired with their matchers.

    Raises:
        ConfigurationError: For the first runner whose format is invalid.
    """

    resolved_compiler = compiler or compile_errorformat
    return [(runner, resolve_errorformat(runner, resolved_compiler)) for runner in config.ordered_runners()]


def run(
    ctx: RunContext,
    config: Config,
    sink: CommentSink,
    diff_source: DiffSource,
    *,
    executor: RunnerExecutor | None = None,
    filter_factory: FilterFactory | None = None,
    compiler: FormatCompiler | None = None,
    environ: Mapping[str, str] | None = None,
    debug_logger: DebugLogger | None = None,
) -> RunReport:
    """Execute a full review run.

    Args:
        ctx: Run context; cancellation stops the run at the next blocking point.
        config: Validated configuration.
        sink: Comment sink receiving in-scope diagnostics.
        diff_source: Source of the reviewed diff, fetched at most once.
        executor: Runner executor; defaults to :class:`SubprocessRunnerExecutor`.
        filter_factory: Builds the diff filter from the fetched diff.
        compiler: Errorformat compiler used during validation.
        environ: Environment to sanitize for child processes.
        debug_logger: Optional callable receiving debug messages.

    Returns:
        RunReport: Aggregated per-runner results.

    Raises:
        ConfigurationError: If any runner's errorformat is invalid.
        DiffFetchError: If the diff cannot be retrieved.
        PostFailedError: If posts failed under the ``fail`` policy.
        RunCancelledError: If ``ctx`` was cancelled or timed out.
    """

    debug = debug_logger or _ignore_debug
    prepared = [_PreparedRunner(runner, matcher) for runner, matcher in compile_runners(config, compiler)]
    if not prepared:
        debug("no runners configured")
        return RunReport()

    diff = _fetch_diff(ctx, diff_source)
    debug(f"fetched diff ({len(diff.raw)} bytes, strip {diff.strip})")
    environment = _RunEnvironment(
        ctx=ctx,
        config=config,
        sink=sink,
        executor=executor
        or SubprocessRunnerExecutor(use_emoji=config.output.emoji, use_color=config.output.color),
        diff_filter=(filter_factory or default_filter_factory)(diff, config.execution.filter_mode),
        env=filtered_environ(environ),
        failures=PostFailureLog(),
        debug=debug,
    )

    reports = _execute_runners(environment, prepared)
    ctx.check()
    report = RunReport(runners=reports, diff_fetched=True)
    _flush_sink(environment)
    return _apply_post_policy(environment, report)


def _fetch_diff(ctx: RunContext, diff_source: DiffSource) -> FetchedDiff:
    ctx.check()
    try:
        return diff_source.fetch(ctx)
    except (DiffFetchError, RunCancelledError):
        raise
    except Exception as exc:
        raise DiffFetchError(f"failed to fetch diff: {exc}") from exc


def _execute_runners(environment: _RunEnvironment, prepared: Sequence[_PreparedRunner]) -> list[RunnerReport]:
    """Run every prepared runner concurrently and return reports in order."""

    workers = max(1, min(environment.config.execution.jobs, len(prepared)))
    results: dict[int, RunnerReport] = {}
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lintreview") as pool:
        future_map = {
            pool.submit(_execute_runner, environment, item): index for index, item in enumerate(prepared)
        }
        for future in as_completed(future_map):
            results[future_map[future]] = future.result()
    return [results[index] for index in range(len(prepared))]


def _execute_runner(environment: _RunEnvironment, item: _PreparedRunner) -> RunnerReport:
    runner = item.runner
    pipeline = RunnerPipeline(
        ctx=environment.ctx,
        runner=runner,
        diff_filter=environment.diff_filter,
        sink=environment.sink,
        failures=environment.failures,
        debug=environment.debug,
    )
    environment.debug(f"runner {runner.name}: starting")
    try:
        outcome = environment.executor.execute(environment.ctx, runner, item.matcher, environment.env, pipeline)
    except RunCancelledError:
        raise
    except Exception as exc:
        reason = f"{exc.__class__.__name__}: {exc}"
        output = environment.config.output
        warn(f"{runner.name} failed: {reason}", use_emoji=output.emoji, use_color=output.color)
        outcome = ExecutionOutcome.failed(runner.name, reason, diagnostics=pipeline.handled)
    report = pipeline.report(outcome)
    environment.debug(
        f"runner {runner.name}: status={outcome.status.value} returncode={outcome.returncode} "
        f"diagnostics={outcome.diagnostics} posted={report.posted} filtered_out={report.filtered_out}",
    )
    return report


def _flush_sink(environment: _RunEnvironment) -> None:
    sink = environment.sink
    if not isinstance(sink, FlushableSink):
        return
    try:
        sink.flush(environment.ctx)
    except RunCancelledError:
        raise
    except Exception as exc:
        environment.failures.record(f"flush: {exc}")


def _apply_post_policy(environment: _RunEnvironment, report: RunReport) -> RunReport:
    failures = environment.failures.snapshot()
    if not failures:
        return report
    if environment.config.execution.post_failure_policy is PostFailurePolicy.FAIL:
        raise PostFailedError(failures, report)
    output = environment.config.output
    for failure in failures:
        warn(f"post failed: {failure}", use_emoji=output.emoji, use_color=output.color)
    report.post_failures = failures
    return report


__all__ = ["DebugLogger", "FilterFactory", "compile_runners", "default_filter_factory", "run"]

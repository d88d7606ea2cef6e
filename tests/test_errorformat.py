# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for errorformat compilation and scanning."""

from __future__ import annotations

import pytest

from lintreview.config import Runner
from lintreview.errorformat import (
    ErrorformatError,
    RuleKind,
    compile_errorformat,
    compile_rule,
    get_preset,
    resolve_errorformat,
    runner_patterns,
)
from lintreview.errors import ConfigurationError
from lintreview.severity import Severity


def test_single_line_flake8_output() -> None:
    matcher = compile_errorformat(get_preset("flake8").patterns)

    entries = list(matcher.scan(["pkg/app.py:2:1: F401 'sys' imported but unused\n"]))

    assert len(entries) == 1
    entry = entries[0]
    assert (entry.filename, entry.lnum, entry.col) == ("pkg/app.py", 2, 1)
    assert entry.text == "'sys' imported but unused"
    diagnostic = entry.to_diagnostic("flake8")
    assert diagnostic.code == "F401"
    assert diagnostic.tool == "flake8"
    assert diagnostic.raw_lines == ("pkg/app.py:2:1: F401 'sys' imported but unused",)


def test_type_character_sets_severity() -> None:
    matcher = compile_errorformat(get_preset("mypy").patterns)

    entry = matcher.match("a.py:3: error: Bad thing  [misc]")

    assert entry is not None
    assert entry.to_diagnostic("mypy").severity is Severity.ERROR
    assert entry.col is None


def test_runner_level_is_default_severity() -> None:
    matcher = compile_errorformat(["%f:%l: %m"])

    entry = matcher.match("a.py:1: something odd")

    assert entry is not None
    assert entry.to_diagnostic("x", default_severity=Severity.WARNING).severity is Severity.WARNING
    assert entry.to_diagnostic("x").severity is None


def test_multi_line_entry_is_assembled() -> None:
    matcher = compile_errorformat(["%E%f:%l: error", "%C    %m", "%Zdone"])

    entries = list(matcher.scan(["a.py:3: error", "    first detail", "    second", "done"]))

    assert len(entries) == 1
    entry = entries[0]
    assert entry.filename == "a.py"
    assert entry.lnum == 3
    assert entry.type == "e"
    assert entry.text == "first detail\nsecond"
    assert len(entry.lines) == 4


def test_pending_entry_is_flushed_at_end_of_output() -> None:
    matcher = compile_errorformat(["%W%f:%l: %m", "%C  %m"])

    entries = list(matcher.scan(["a.py:1: first", "  more", "b.py:2: second"]))

    assert [entry.filename for entry in entries] == ["a.py", "b.py"]
    assert entries[0].text == "first\nmore"
    assert entries[1].to_diagnostic("x").severity is Severity.WARNING


def test_pointer_line_sets_column() -> None:
    matcher = compile_errorformat(["%E%f:%l: %m", "%Z%p^", "%C%.%#"])

    entries = list(matcher.scan(["x.c:4: bad token", "  int x", "    ^"]))

    assert len(entries) == 1
    assert entries[0].col == 5
    assert entries[0].text == "bad token"


def test_ignore_rule_consumes_lines() -> None:
    matcher = compile_errorformat(["%f:%l: %m", "%-G%.%#"])

    entries = list(matcher.scan(["a.py:1: msg", "Found 1 error"]))

    assert [entry.text for entry in entries] == ["msg"]


def test_unmatched_lines_are_dropped() -> None:
    matcher = compile_errorformat(["%f:%l: %m"])

    assert list(matcher.scan(["no location here", ""])) == []


def test_file_stack_supplies_missing_file_names() -> None:
    matcher = compile_errorformat(["%Q[end]", "%P[%f]", "%l:%c: %m"])

    entries = list(matcher.scan(["[src/a.py]", "3:1: oops", "[end]", "4:2: later"]))

    assert [(entry.filename, entry.lnum) for entry in entries] == [("src/a.py", 3), (None, 4)]


def test_whole_line_modifier_uses_line_as_message() -> None:
    matcher = compile_errorformat(["%+A%f:%l: %m"])

    entries = list(matcher.scan(["a.py:1: msg"]))

    assert entries[0].text == "a.py:1: msg"


def test_pylint_parseable_preset_extracts_code() -> None:
    matcher = compile_errorformat(get_preset("pylint").patterns)

    entry = matcher.match("pkg/a.py:10: [C0114(missing-module-docstring), ] Missing module docstring")

    assert entry is not None
    assert entry.lnum == 10
    assert entry.to_diagnostic("pylint").code == "C0114"
    assert entry.text == "Missing module docstring"


def test_line_that_fails_conversion_is_skipped() -> None:
    matcher = compile_errorformat(["%f:%l: %m"])
    huge = "9" * 5000

    entries = list(matcher.scan([f"a.py:{huge}: boom", "b.py:2: fine"]))

    assert [entry.filename for entry in entries] == ["b.py"]


def test_pending_entry_survives_a_following_bad_line() -> None:
    matcher = compile_errorformat(["%E%f:%l: %m", "%f|%l|%m"])
    huge = "9" * 5000

    entries = list(matcher.scan(["a.py:1: multi", f"b.py|{huge}|x", "c.py|3|ok"]))

    assert [entry.filename for entry in entries] == ["a.py", "c.py"]
    assert entries[0].text == "multi"


def test_prefix_parsing() -> None:
    rule = compile_rule("%-G%.%#")

    assert rule.kind is RuleKind.GENERAL
    assert rule.ignore
    assert not rule.whole_line
    assert compile_rule("%f:%l").kind is RuleKind.SINGLE


def test_unknown_directive_reports_pattern_and_index() -> None:
    with pytest.raises(ErrorformatError) as excinfo:
        compile_errorformat(["%f:%l: %m", "%f %y"])

    assert excinfo.value.index == 1
    assert excinfo.value.pattern == "%f %y"
    assert "%y" in excinfo.value.reason


@pytest.mark.parametrize("patterns", [[], [""], ["%f:%l: %m%"], ["%f %f"], ["%f %*"]])
def test_invalid_pattern_lists_fail(patterns: list[str]) -> None:
    with pytest.raises(ErrorformatError):
        compile_errorformat(patterns)


def test_runner_patterns_prefer_explicit_errorformat() -> None:
    runner = Runner(name="golint", errorformat=["%f: %m"], format="flake8")

    assert runner_patterns(runner) == ("%f: %m",)


def test_runner_patterns_use_format_then_runner_name() -> None:
    assert runner_patterns(Runner(name="x", format="flake8")) == get_preset("flake8").patterns
    assert runner_patterns(Runner(name="golint")) == get_preset("golint").patterns


def test_runner_without_format_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="errorformat or a known format name is required") as excinfo:
        runner_patterns(Runner(name="custom", cmd="custom-lint"))

    assert excinfo.value.runner == "custom"


def test_unknown_format_name_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="unknown format name"):
        runner_patterns(Runner(name="x", format="nope"))


def test_resolve_errorformat_names_runner_and_pattern() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        resolve_errorformat(Runner(name="broken", errorformat=["%f:%l: %m", "%y"]))

    assert excinfo.value.runner == "broken"
    assert excinfo.value.pattern == "%y"
    assert "broken" in str(excinfo.value)

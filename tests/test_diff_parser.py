# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for unified diff parsing."""

from __future__ import annotations

import pytest

from lintreview.diff import LineKind, parse_unified_diff, strip_path
from tests.helpers.fakes import SIMPLE_DIFF


def test_git_diff_is_split_into_files_and_hunks() -> None:
    files = parse_unified_diff(SIMPLE_DIFF)

    assert len(files) == 1
    file_diff = files[0]
    assert (file_diff.old_path, file_diff.new_path) == ("a/pkg/app.py", "b/pkg/app.py")
    assert [(hunk.new_start, hunk.new_length) for hunk in file_diff.hunks] == [(1, 4), (11, 3)]
    assert [line.new_lnum for line in file_diff.added_lines()] == [2, 12]
    assert [line.content for line in file_diff.added_lines()] == ["import sys", "    other = 2"]


def test_blank_lines_inside_hunks_are_context() -> None:
    hunk = parse_unified_diff(SIMPLE_DIFF)[0].hunks[0]

    blank = hunk.lines[2]
    assert blank.kind is LineKind.CONTEXT
    assert (blank.old_lnum, blank.new_lnum) == (2, 3)
    assert hunk.covers(4)
    assert not hunk.covers(5)


def test_plain_unified_diff_with_timestamps() -> None:
    raw = (
        "--- old/tool.py\t2024-01-01 10:00:00.000000000 +0000\n"
        "+++ new/tool.py\t2024-01-02 10:00:00.000000000 +0000\n"
        "@@ -5 +5,2 @@\n"
        "-old\n"
        "+new\n"
        "+newer\n"
    )

    files = parse_unified_diff(raw)

    assert files[0].new_path == "new/tool.py"
    assert [(line.kind, line.old_lnum, line.new_lnum) for line in files[0].hunks[0].lines] == [
        (LineKind.DELETED, 5, None),
        (LineKind.ADDED, None, 5),
        (LineKind.ADDED, None, 6),
    ]


def test_multiple_files_and_new_and_deleted_files() -> None:
    raw = """diff --git a/added.py b/added.py
new file mode 100644
--- /dev/null
+++ b/added.py
@@ -0,0 +1,2 @@
+one
+two
diff --git a/gone.py b/gone.py
deleted file mode 100644
--- a/gone.py
+++ /dev/null
@@ -1 +0,0 @@
-bye
"""

    files = parse_unified_diff(raw)

    assert [file_diff.path for file_diff in files] == ["b/added.py", "/dev/null"]
    assert files[0].old_path == "/dev/null"
    assert [line.new_lnum for line in files[0].added_lines()] == [1, 2]
    assert list(files[1].added_lines()) == []


def test_rename_headers_are_honoured() -> None:
    raw = """diff --git a/old name.py b/new name.py
similarity index 90%
rename from old name.py
rename to new name.py
--- a/old name.py
+++ b/new name.py
@@ -1,2 +1,2 @@
 keep
-x
+y
"""

    file_diff = parse_unified_diff(raw)[0]

    assert file_diff.new_path == "b/new name.py"
    assert [line.new_lnum for line in file_diff.added_lines()] == [2]


def test_no_newline_marker_is_ignored() -> None:
    raw = """--- a/x.txt
+++ b/x.txt
@@ -1 +1 @@
-a
\\ No newline at end of file
+b
\\ No newline at end of file
"""

    lines = parse_unified_diff(raw)[0].hunks[0].lines

    assert [line.kind for line in lines] == [LineKind.DELETED, LineKind.ADDED]


def test_garbage_and_empty_input() -> None:
    assert parse_unified_diff(b"") == []
    assert parse_unified_diff("just some text\nwithout a diff\n") == []


def test_invalid_utf8_is_replaced() -> None:
    raw = b"--- a/x\n+++ b/x\n@@ -0,0 +1 @@\n+caf\xe9\n"

    line = next(parse_unified_diff(raw)[0].added_lines())

    assert line.content == "caf\ufffd"


@pytest.mark.parametrize(
    ("path", "strip", "expected"),
    [
        ("b/pkg/app.py", 1, "pkg/app.py"),
        ("b/pkg/app.py", 0, "b/pkg/app.py"),
        ("b/pkg/app.py", 2, "app.py"),
        ("app.py", 1, None),
        ("/dev/null", 0, None),
        (None, 1, None),
    ],
)
def test_strip_path(path: str | None, strip: int, expected: str | None) -> None:
    assert strip_path(path, strip) == expected

#!/usr/bin/env python3
"""
Tests for ignore file discovery, parsing and validation
"""

import os

from docsref.ignore import IgnoreFileLoader
from docsref.ignore.file_loader import describe_errors


def test_load_file_parses_patterns(tmp_path):
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_text(
        "# Comment line\n"
        "\n"
        "*.draft\n"
        "  private/  \n"
        "!keep.draft\n"
    )

    info = IgnoreFileLoader().load_file(ignore_file)

    assert info.is_valid
    assert info.readable
    assert info.patterns == ["*.draft", "private/", "!keep.draft"]
    assert info.valid_patterns == ["*.draft", "private/", "!keep.draft"]
    assert info.stats == {
        'total_lines': 5,
        'empty_lines': 1,
        'comment_lines': 1,
        'pattern_lines': 3,
    }
    assert describe_errors(info) is None


def test_load_file_strips_bom(tmp_path):
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_bytes(b"\xef\xbb\xbfsecret.md\n")

    info = IgnoreFileLoader().load_file(ignore_file)
    assert info.valid_patterns == ["secret.md"]


def test_invalid_lines_are_reported(tmp_path):
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_text("good.md\n!\n/\n")

    info = IgnoreFileLoader().load_file(ignore_file)

    assert not info.is_valid
    assert info.readable
    assert info.valid_patterns == ["good.md"]
    assert [error.line for error in info.errors] == [2, 3]
    assert describe_errors(info).startswith("line 2:")


def test_warnings_for_suspicious_patterns(tmp_path):
    ignore_file = tmp_path / ".gitignore"
    ignore_file.write_text("docs\\old\n*\n*.md/extra\n")

    info = IgnoreFileLoader().load_file(ignore_file)
    messages = [warning.message for warning in info.warnings]

    assert any("backslash" in message for message in messages)
    assert any("broad" in message for message in messages)
    assert any("separator" in message for message in messages)
    assert [warning.line for warning in info.warnings] == [1, 2, 3]


def test_missing_file_is_unreadable(tmp_path):
    info = IgnoreFileLoader().load_file(tmp_path / "missing" / ".gitignore")

    assert not info.readable
    assert info.errors[0].line == 0
    assert "Cannot stat file" in describe_errors(info)


def test_find_ignore_files_orders_by_depth(tmp_path):
    for directory in ["", "b", "a", "a/deep"]:
        (tmp_path / directory).mkdir(parents=True, exist_ok=True)
        (tmp_path / directory / ".gitignore").write_text("*.tmp\n")
    (tmp_path / "c").mkdir()

    found = IgnoreFileLoader().find_ignore_files(tmp_path)
    relative = [path.relative_to(tmp_path).as_posix() for path in found]

    assert relative == [".gitignore", "a/.gitignore", "b/.gitignore", "a/deep/.gitignore"]


def test_custom_ignore_filename(tmp_path):
    (tmp_path / ".docsignore").write_text("*.tmp\n")
    (tmp_path / ".gitignore").write_text("*.tmp\n")

    found = IgnoreFileLoader(".docsignore").find_ignore_files(tmp_path)
    assert found == [tmp_path / ".docsignore"]


def test_find_ignore_files_reports_unreadable_directories(tmp_path, monkeypatch):
    (tmp_path / "locked").mkdir()
    (tmp_path / ".gitignore").write_text("*.tmp\n")
    real_scandir = os.scandir

    def scandir(path="."):
        if os.path.basename(os.fspath(path)) == "locked":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    failures = []
    found = IgnoreFileLoader().find_ignore_files(tmp_path, onerror=failures.append)

    assert found == [tmp_path / ".gitignore"]
    assert len(failures) == 1
    assert isinstance(failures[0], PermissionError)

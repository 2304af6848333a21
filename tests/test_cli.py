#!/usr/bin/env python3
"""
Tests for the docsref command-line interface
"""

import json

import pytest

from docsref.cli import DocsCLI

from conftest import write_files


@pytest.fixture
def run_cli(docs_base, capsys, restore_logging):
    write_files(docs_base / "docs", {
        "a/one.md": "# One\nhello world\n",
        "a/two.md": "second\n",
        "b/three.txt": "third hello\n",
    })

    def run(*argv):
        code = DocsCLI(environ={'DOCS_BASE_DIR': str(docs_base)}).run(list(argv))
        return code, capsys.readouterr().out
    return run


def test_list(run_cli):
    code, out = run_cli("list", "--pattern", "*.md")
    assert code == 0
    assert out == "a/one.md\na/two.md\n"


def test_list_json(run_cli):
    code, out = run_cli("--json", "list", "--max", "1")
    data = json.loads(out)

    assert code == 0
    assert data['count'] == 1
    assert data['total_matches'] == 3
    assert data['files'][0]['path'] == "a/one.md"


def test_summary_and_tree(run_cli):
    code, out = run_cli("summary")
    assert code == 0
    assert "Total documents: 3" in out

    code, out = run_cli("tree", "--directory", "a")
    assert code == 0
    assert out.startswith("Directory tree for: a\n")


def test_get(run_cli):
    code, out = run_cli("get", "a/two.md")
    assert code == 0
    assert out == "second\n\n"

    code, out = run_cli("get", "missing.md")
    assert code == 1
    assert out.startswith("Error: Document not found")

    code, out = run_cli("get", "a/two.md", "--page", "5")
    assert code == 1


def test_grep_exit_codes(run_cli):
    code, out = run_cli("grep", "HELLO")
    assert code == 0
    assert out == "a/one.md:2: hello world\nb/three.txt:1: third hello\n"

    code, out = run_cli("grep", "HELLO", "--case-sensitive")
    assert code == 1
    assert out == "No matches found\n"

    code, out = run_cli("grep", "[bad")
    assert code == 1
    assert out.startswith("Error: Invalid regex pattern:")


def test_base_dir_flag_overrides_environment(tmp_path, capsys, restore_logging):
    write_files(tmp_path / "docs", {"only.md": "x\n"})

    code = DocsCLI(environ={}).run(["--base-dir", str(tmp_path), "list"])
    assert code == 0
    assert capsys.readouterr().out == "only.md\n"


def test_no_command_prints_help(capsys):
    assert DocsCLI(environ={}).run([]) == 0
    assert "usage: docsref" in capsys.readouterr().out

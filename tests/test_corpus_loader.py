#!/usr/bin/env python3
"""
Tests for walking the document root and building the corpus
"""

import json
import os

from docsref.core import CorpusLoader, CorpusState, DocsConfig, LoadEventKind
from docsref.core.loader import is_binary_file
from docsref.ignore import RulePrecedence

from conftest import write_files


def load(base, files, **overrides):
    write_files(base / "docs", files)
    return CorpusLoader(DocsConfig(base_dir=base, **overrides)).load()


def test_scenario_excludes_vcs_and_binaries(docs_base):
    result = load(docs_base, {
        "a/one.md": "x" * 500,
        "a/two.py": "print('hi')\n",
        ".git/config": "[core]\n",
        "bin/x.dll": b"MZ\x00\x01",
    })

    assert result.index.state is CorpusState.READY
    assert result.index.sorted_paths() == ["a/one.md", "a/two.py"]


def test_keys_are_relative_posix_paths(docs_base):
    result = load(docs_base, {"guides/setup/install.md": "steps\n", "README.md": "hi\n"})

    for path in result.index.sorted_paths():
        assert not path.startswith("/")
        assert "\\" not in path
    assert "guides/setup/install.md" in result.index


def test_extension_allowlist_is_case_insensitive(docs_base):
    result = load(docs_base, {
        "README.MD": "upper\n",
        "notes.Txt": "mixed\n",
        "image.png": "not really\n",
        "Makefile": "all:\n",
        "config/.env.example": "KEY=value\n",
    })

    assert result.index.sorted_paths() == ["README.MD", "config/.env.example", "notes.Txt"]


def test_custom_extensions(docs_base):
    result = load(docs_base, {"a.md": "a\n", "b.txt": "b\n"}, file_extensions=["txt"])
    assert result.index.sorted_paths() == ["b.txt"]


def test_binary_files_are_skipped(docs_base):
    result = load(docs_base, {
        "nul.txt": b"abc\x00def",
        "high.txt": bytes([200]) * 40 + b"a" * 60,
        "utf8.txt": "café au lait, mostly plain ascii text\n",
        "empty.txt": b"",
    })

    assert result.index.sorted_paths() == ["empty.txt", "utf8.txt"]
    skipped = sorted(event.path for event in result.events_of(LoadEventKind.BINARY_FILE))
    assert skipped == ["high.txt", "nul.txt"]


def test_is_binary_file(tmp_path):
    text = tmp_path / "text.md"
    text.write_bytes(b"plain text\n")
    exactly_30_percent = tmp_path / "edge.txt"
    exactly_30_percent.write_bytes(bytes([200]) * 30 + b"a" * 70)

    assert not is_binary_file(text)
    assert not is_binary_file(exactly_30_percent)
    assert is_binary_file(tmp_path / "missing.txt")


def test_oversized_files_are_skipped(docs_base):
    result = load(docs_base, {"small.md": "tiny\n", "big.md": "x" * 50}, max_file_size=20)

    assert result.index.sorted_paths() == ["small.md"]
    events = result.events_of(LoadEventKind.OVERSIZED_FILE)
    assert [event.path for event in events] == ["big.md"]


def test_content_decoding_keeps_line_endings(docs_base):
    result = load(docs_base, {
        "bom.md": b"\xef\xbb\xbfline1\r\nline2\n",
        "bad.md": b"ok \xff\xfe bytes\n",
    })

    assert result.index.get("bom.md").content == "line1\r\nline2\n"
    assert result.index.get("bad.md").content == "ok \ufffd\ufffd bytes\n"


def test_gitignore_is_scoped_to_its_directory(docs_base):
    result = load(docs_base, {
        "repo/.gitignore": "secret.md\n",
        "repo/secret.md": "hidden\n",
        "repo/public.md": "visible\n",
        "other/secret.md": "visible\n",
    }, smart_filter=False)

    paths = result.index.sorted_paths()
    assert "repo/secret.md" not in paths
    assert "repo/public.md" in paths
    assert "other/secret.md" in paths


def test_gitignore_can_be_disabled(docs_base):
    result = load(docs_base, {
        "repo/.gitignore": "secret.md\n",
        "repo/secret.md": "hidden\n",
    }, smart_filter=False, respect_gitignore=False)

    assert "repo/secret.md" in result.index


def test_smart_filter_overrides_gitignore_for_source_files(docs_base):
    result = load(docs_base, {
        "repo/.gitignore": "*.md\n*.rst\n",
        "repo/guide.md": "kept\n",
        "repo/guide.rst": "dropped\n",
        "repo/Release/notes.md": "build output\n",
    })

    paths = result.index.sorted_paths()
    assert "repo/guide.md" in paths
    assert "repo/guide.rst" not in paths
    assert "repo/Release/notes.md" not in paths


def test_custom_patterns_after_ignore_files(docs_base):
    result = load(docs_base, {
        "repo/.gitignore": "!drafts/keep.md\n",
        "repo/drafts/keep.md": "kept\n",
        "repo/drafts/other.md": "dropped\n",
    }, smart_filter=False, exclude_patterns=["drafts/"])

    paths = result.index.sorted_paths()
    assert "repo/drafts/keep.md" in paths
    assert "repo/drafts/other.md" not in paths
    patterns = [rule.pattern for rule in result.matcher.rules]
    assert patterns.index("!drafts/keep.md") < patterns.index("drafts/")


def test_last_match_precedence_from_config(docs_base):
    result = load(docs_base, {
        "drafts/keep.md": "kept\n",
        "drafts/other.md": "dropped\n",
    }, smart_filter=False, exclude_patterns=["drafts/", "!keep.md"],
        rule_precedence=RulePrecedence.LAST_MATCH)

    assert result.index.sorted_paths() == ["drafts/keep.md"]


def test_invalid_ignore_lines_produce_events(docs_base):
    result = load(docs_base, {
        "repo/.gitignore": "!\n*\n",
        "repo/a.md": "a\n",
    })

    errors = result.events_of(LoadEventKind.IGNORE_FILE_ERROR)
    warnings = result.events_of(LoadEventKind.IGNORE_PATTERN_WARNING)
    assert [event.path for event in errors] == ["repo/.gitignore"]
    assert [event.path for event in warnings] == ["repo/.gitignore"]


def test_folder_selection(docs_base):
    write_files(docs_base / "docs", {"a/one.md": "1\n", "b/two.md": "2\n"})
    (docs_base / "outside").mkdir()

    config = DocsConfig(base_dir=docs_base, folders=["a", "missing", "../outside"])
    result = CorpusLoader(config).load()

    assert result.index.sorted_paths() == ["a/one.md"]
    missing = [event.path for event in result.events_of(LoadEventKind.MISSING_FOLDER)]
    assert missing == ["missing", "../outside"]


def test_explicit_folders_override_config(docs_base):
    write_files(docs_base / "docs", {"a/one.md": "1\n", "b/two.md": "2\n"})
    config = DocsConfig(base_dir=docs_base, folders=["a"])

    result = CorpusLoader(config).load(["b"])
    assert result.index.sorted_paths() == ["b/two.md"]


def test_missing_docs_root(tmp_path):
    result = CorpusLoader(DocsConfig(base_dir=tmp_path)).load()

    assert result.index.is_ready
    assert result.document_count == 0
    assert result.events_of(LoadEventKind.MISSING_FOLDER)


def test_metadata_descriptions(docs_base):
    (docs_base / "docs_metadata.json").write_text(json.dumps({
        "a/one.md": "First document",
        "a/two.md": 42,
    }))
    result = load(docs_base, {"a/one.md": "1\n", "a/two.md": "2\n"})

    assert result.index.get("a/one.md").description == "First document"
    assert result.index.get("a/two.md").description is None


def test_broken_metadata_is_an_event(docs_base):
    (docs_base / "docs_metadata.json").write_text("{not json")
    result = load(docs_base, {"a/one.md": "1\n"})

    assert result.document_count == 1
    assert result.events_of(LoadEventKind.METADATA_ERROR)


def test_baseline_directories_are_pruned(docs_base):
    result = load(docs_base, {
        "node_modules/pkg/readme.md": "dependency\n",
        "site/.git/description.txt": "vcs\n",
        "site/index.md": "home\n",
    })

    assert result.index.sorted_paths() == ["site/index.md"]


def test_unreadable_directory_is_a_read_error(docs_base, monkeypatch):
    real_scandir = os.scandir

    def scandir(path="."):
        if os.path.basename(os.fspath(path)) == "b":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    result = load(docs_base, {"a/one.md": "one\n", "b/two.md": "two\n"})

    assert result.index.sorted_paths() == ["a/one.md"]
    errors = result.events_of(LoadEventKind.READ_ERROR)
    assert [event.path for event in errors] == ["b"]
    assert errors[0].message.startswith("Error reading directory b:")

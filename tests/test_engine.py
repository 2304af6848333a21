#!/usr/bin/env python3
"""
Tests for the DocumentEngine lifecycle and text API
"""

import logging

import pytest

from docsref.core import CorpusNotReadyError, DocsConfig, DocumentEngine, LoadEventKind


def test_queries_before_load_fail_fast(docs_base):
    engine = DocumentEngine(DocsConfig(base_dir=docs_base))

    assert not engine.is_ready
    with pytest.raises(CorpusNotReadyError):
        engine.list_docs()
    with pytest.raises(CorpusNotReadyError):
        engine.get_doc("a.md")
    with pytest.raises(RuntimeError):
        engine.grep_docs("x")


def test_load_runs_once(make_engine):
    engine = make_engine({"a.md": "alpha\n"})

    assert engine.is_ready
    assert engine.document_count == 1
    with pytest.raises(RuntimeError, match="already been loaded"):
        engine.load()


def test_text_api(make_engine):
    engine = make_engine({
        "a/one.md": "x" * 500,
        "a/two.py": "print('hello')\n",
        ".git/config": "[core]\n",
        "bin/x.dll": b"MZ\x00",
    })

    assert engine.list_docs("*.md") == "a/one.md"
    assert engine.get_doc("a/one.md") == "x" * 500
    assert engine.get_doc("missing.md") == "Error: Document not found: missing.md"
    assert engine.grep_docs("HELLO") == "a/two.py:1: print('hello')"
    assert engine.grep_docs("HELLO", ignore_case=False) == "No matches found"
    assert engine.get_tree().endswith("Total files: 2")
    assert engine.get_summary().startswith("=== Document Repository Summary ===")


def test_pagination_settings_come_from_config(make_engine):
    engine = make_engine({"doc.md": "y" * 250}, max_chars_per_page=100, large_file_threshold=200)

    assert engine.get_doc("doc.md").startswith("📄 Document: doc.md\n📖 Page 1/3")
    assert "Valid pages: 1-3" in engine.get_doc("doc.md", page=4)


def test_load_events_are_logged(make_engine, caplog):
    with caplog.at_level(logging.INFO):
        engine = make_engine({"big.md": "x" * 64, "ok.md": "fine\n"}, max_file_size=32)

    assert [event.kind for event in engine.events] == [LoadEventKind.OVERSIZED_FILE]
    assert "Skipping large file: big.md" in caplog.text
    record = next(r for r in caplog.records if "Skipping large file" in r.getMessage())
    assert record.context == {'kind': 'oversized_file', 'path': 'big.md'}

#!/usr/bin/env python3
"""
Tests for text and JSON rendering of query results
"""

import json

from docsref.core import JsonFormatter, QueryEngine, TextFormatter
from docsref.core.corpus import CorpusIndex
from docsref.core.models import CorpusDocument, DocumentPage, ListingEntry, ListingResult


def described_index():
    index = CorpusIndex()
    index.begin_loading()
    index.add(CorpusDocument("a/one.md", "hello\n", "First document"))
    index.add(CorpusDocument("a/two.md", "world\n"))
    index.mark_ready()
    return index


def test_listing_includes_descriptions():
    engine = QueryEngine(described_index())
    assert TextFormatter().format_listing(engine.list_filtered()) == (
        "a/one.md - First document\na/two.md"
    )


def test_listing_with_zero_results_has_no_leading_blank_line():
    engine = QueryEngine(described_index())
    assert TextFormatter().format_listing(engine.list_filtered(max_results=0)) == (
        "... and 2 more files (showing first 0)"
    )


def test_hints_only_for_large_documents():
    formatter = TextFormatter()
    page = DocumentPage(
        path="doc.md", content="body", page=1, total_pages=2, start_char=1, end_char=4,
        total_chars=8, start_line=1, end_line=1, total_lines=2, page_size=4,
    )
    assert "💡" not in formatter.format_page(page)

    page.large_document = True
    rendered = formatter.format_page(page)
    assert "⚠️  Large document auto-paginated. To see other pages:" in rendered

    page.page = 2
    assert "💡" not in formatter.format_page(page)


def test_thousands_separators_in_header():
    page = DocumentPage(
        path="big.md", content="x", page=2, total_pages=3, start_char=10001, end_char=20000,
        total_chars=25000, start_line=101, end_line=200, total_lines=1500, page_size=10000,
    )
    lines = TextFormatter().format_page(page).split("\n")

    assert lines[1] == "📖 Page 2/3 (chars 10,001-20,000/25,000)"
    assert lines[2] == "📏 Lines 101-200/1,500 | Max chars per page: 10,000"


def test_json_listing():
    result = ListingResult(
        entries=[ListingEntry("a.md", "About"), ListingEntry("b.md")],
        total_matches=5,
        max_results=2,
        pattern="*.md",
    )
    data = json.loads(JsonFormatter().format_listing(result))

    assert data['count'] == 2
    assert data['total_matches'] == 5
    assert data['remaining'] == 3
    assert data['files'] == [
        {'path': 'a.md', 'description': 'About'},
        {'path': 'b.md', 'description': None},
    ]


def test_json_page_and_grep():
    engine = QueryEngine(described_index())
    formatter = JsonFormatter()

    page = json.loads(formatter.format_page(engine.get_document("a/one.md")))
    assert page['content'] == "hello\n"
    assert page['page'] is None
    assert page['error'] is None

    missing = json.loads(formatter.format_page(engine.get_document("nope.md")))
    assert missing['error'] == "Document not found: nope.md"

    grep = json.loads(formatter.format_grep(engine.grep("o")))
    assert grep['total_matches'] == 2
    assert grep['remaining'] == 0
    assert grep['matches'][0] == {'path': 'a/one.md', 'line_number': 1, 'preview': 'hello'}


def test_json_tree_and_summary():
    engine = QueryEngine(described_index())
    formatter = JsonFormatter()

    tree = json.loads(formatter.format_tree(engine.tree()))
    assert tree['total_files'] == 2
    assert tree['tree'] == [{
        'name': 'a',
        'type': 'directory',
        'file_count': 2,
        'children': [
            {'name': 'one.md', 'type': 'file', 'file_count': 1, 'children': []},
            {'name': 'two.md', 'type': 'file', 'file_count': 1, 'children': []},
        ],
    }]

    summary = json.loads(formatter.format_summary(engine.summary()))
    assert summary == {
        'total_documents': 2,
        'folders': [{'name': 'a', 'file_count': 2, 'top_extensions': {'.md': 2}}],
        'top_extensions': {'.md': 2},
    }

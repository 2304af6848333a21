"""
Typed records produced by the loader and the query engine
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CorpusDocument:
    """One indexed document"""
    path: str
    content: str
    description: Optional[str] = None


class LoadEventKind(str, Enum):
    MISSING_FOLDER = "missing_folder"
    IGNORE_FILE_ERROR = "ignore_file_error"
    IGNORE_PATTERN_WARNING = "ignore_pattern_warning"
    OVERSIZED_FILE = "oversized_file"
    BINARY_FILE = "binary_file"
    READ_ERROR = "read_error"
    METADATA_ERROR = "metadata_error"


@dataclass
class LoadEvent:
    """Diagnostic raised while loading; the affected item is skipped"""
    kind: LoadEventKind
    message: str
    path: Optional[str] = None
    level: int = logging.WARNING


@dataclass
class ListingEntry:
    path: str
    description: Optional[str] = None


@dataclass
class ListingResult:
    """Result of a filtered listing"""
    entries: List[ListingEntry]
    total_matches: int
    max_results: int
    pattern: Optional[str] = None
    directory: Optional[str] = None

    @property
    def remaining(self) -> int:
        """Matches left out by the max_results cap"""
        return max(0, self.total_matches - len(self.entries))

    @property
    def truncated(self) -> bool:
        return self.remaining > 0

    @property
    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries]


@dataclass
class DocumentPage:
    """
    A retrieved document, whole or one page of it.

    When ``page`` is None the full content was returned unpaginated and the
    range fields describe the whole document. Character and line ranges are
    1-based and inclusive.
    """
    path: str
    content: str = ""
    page: Optional[int] = None
    total_pages: int = 0
    start_char: int = 0
    end_char: int = 0
    total_chars: int = 0
    start_line: int = 0
    end_line: int = 0
    total_lines: int = 0
    page_size: int = 0
    auto_paginated: bool = False
    large_document: bool = False
    error: Optional[str] = None

    @property
    def paginated(self) -> bool:
        return self.page is not None


@dataclass
class GrepMatch:
    path: str
    line_number: int
    preview: str


@dataclass
class GrepResult:
    """Matches in document path order then line order, capped"""
    pattern: str
    ignore_case: bool = True
    matches: List[GrepMatch] = field(default_factory=list)
    total_matches: int = 0
    error: Optional[str] = None

    @property
    def remaining(self) -> int:
        return max(0, self.total_matches - len(self.matches))


@dataclass
class TreeNode:
    """Arena node; children map a segment name to the child's index"""
    name: str
    parent: Optional[int] = None
    children: Dict[str, int] = field(default_factory=dict)
    file_count: int = 0
    is_file: bool = False


@dataclass
class DocumentTree:
    """Aggregated directory tree; node 0 is the unnamed root"""
    nodes: List[TreeNode]
    total_files: int
    root_directory: Optional[str] = None
    max_depth: int = 3
    error: Optional[str] = None

    @property
    def root(self) -> TreeNode:
        return self.nodes[0]

    def sorted_children(self, index: int) -> List[Tuple[int, TreeNode]]:
        """Children of a node in alphabetical order, as (index, node) pairs"""
        node = self.nodes[index]
        return [(node.children[name], self.nodes[node.children[name]])
                for name in sorted(node.children)]


@dataclass
class FolderSummary:
    name: str
    file_count: int
    top_extensions: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class CorpusSummary:
    folders: List[FolderSummary]
    total_documents: int
    top_extensions: List[Tuple[str, int]] = field(default_factory=list)

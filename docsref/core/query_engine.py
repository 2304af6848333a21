"""
Read-only queries over a Ready corpus.

Every operation returns a typed result. Ordinary failures (unknown document,
page out of range, invalid regex, cancellation) are reported through the
result's ``error`` field rather than raised.
"""

import math
import re
from collections import Counter
from typing import Iterable, List, Optional, Pattern, Tuple

from docsref.utils import get_logger
from docsref.utils.paths import file_extension, normalize_directory, normalize_path
from .cancellation import CancellationToken, QueryCancelledError
from .constants import (
    DEFAULT_LARGE_FILE_THRESHOLD,
    DEFAULT_MAX_CHARS_PER_PAGE,
    DEFAULT_MAX_RESULTS,
    DEFAULT_TREE_DEPTH,
    GREP_MAX_MATCHES,
    PREVIEW_MAX_CHARS,
    SUMMARY_FOLDER_EXTENSIONS,
    SUMMARY_TOP_EXTENSIONS,
)
from .corpus import CorpusIndex
from .models import (
    CorpusSummary,
    DocumentPage,
    DocumentTree,
    FolderSummary,
    GrepMatch,
    GrepResult,
    ListingEntry,
    ListingResult,
    TreeNode,
)
from .tree import build_tree

logger = get_logger(__name__)


def glob_to_regex(pattern: str) -> Pattern[str]:
    """
    Compile a listing glob into an anchored, case-insensitive regex

    '**' crosses directory separators ('**/' also matches no directory at all),
    '*' stays within one segment and '?' matches one non-separator character.
    """
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith('**/', i):
            parts.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i):
            parts.append('.*')
            i += 2
        elif pattern[i] == '*':
            parts.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            parts.append('[^/]')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile('^' + ''.join(parts) + '$', re.IGNORECASE)


def make_preview(line: str) -> str:
    preview = line.strip()
    if len(preview) > PREVIEW_MAX_CHARS:
        preview = preview[:PREVIEW_MAX_CHARS - 3] + "..."
    return preview


def top_extensions(paths: Iterable[str], limit: int) -> List[Tuple[str, int]]:
    """Most frequent extensions, ties broken alphabetically"""
    counts = Counter(ext for ext in (file_extension(path) for path in paths) if ext)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]


class QueryEngine:
    """
    Stateless read operations over a Ready CorpusIndex
    """

    def __init__(self, index: CorpusIndex,
                 max_chars_per_page: int = DEFAULT_MAX_CHARS_PER_PAGE,
                 large_file_threshold: int = DEFAULT_LARGE_FILE_THRESHOLD):
        """
        Args:
            index: Loaded corpus
            max_chars_per_page: Page size in characters
            large_file_threshold: Length above which unpaged retrieval returns page 1

        Raises:
            CorpusNotReadyError: If the index has not finished loading
            ValueError: If a size limit is not positive
        """
        index.require_ready()
        if max_chars_per_page <= 0:
            raise ValueError(f"max_chars_per_page must be positive, got {max_chars_per_page}")
        if large_file_threshold <= 0:
            raise ValueError(f"large_file_threshold must be positive, got {large_file_threshold}")

        self.index = index
        self.max_chars_per_page = max_chars_per_page
        self.large_file_threshold = large_file_threshold

    @property
    def document_count(self) -> int:
        return len(self.index)

    def list_filtered(self, pattern: Optional[str] = None, directory: Optional[str] = None,
                      max_results: int = DEFAULT_MAX_RESULTS) -> ListingResult:
        """
        List documents by directory prefix and/or glob

        Args:
            pattern: Glob; without '/' it is matched against the file name only
            directory: Literal directory prefix
            max_results: Maximum entries returned

        Returns:
            ListingResult sorted by path, with the exact number of matches
        """
        paths = self.index.sorted_paths()

        if directory:
            prefix = normalize_directory(directory)
            paths = [path for path in paths if path.startswith(prefix)]

        if pattern:
            regex = glob_to_regex(pattern)
            if '/' in pattern:
                paths = [path for path in paths if regex.match(path)]
            else:
                paths = [path for path in paths if regex.match(path.rsplit('/', 1)[-1])]

        limit = max(0, max_results)
        documents = self.index.documents
        entries = [
            ListingEntry(path=path, description=documents[path].description)
            for path in paths[:limit]
        ]
        return ListingResult(
            entries=entries,
            total_matches=len(paths),
            max_results=limit,
            pattern=pattern,
            directory=directory,
        )

    def get_document(self, path: str, page: Optional[int] = None) -> DocumentPage:
        """
        Retrieve a whole document or one page of it

        Args:
            path: Document path
            page: 1-based page number; None returns the full content unless the
                document is longer than the auto-pagination threshold

        Returns:
            DocumentPage; ``error`` is set for unknown paths and bad page numbers
        """
        key = normalize_path(path)
        document = self.index.get(key)
        if document is None:
            return DocumentPage(path=path, error=f"Document not found: {path}")

        content = document.content
        total_chars = len(content)
        page_size = self.max_chars_per_page
        total_pages = math.ceil(total_chars / page_size)
        total_lines = self._count_lines(content)

        if page is None and total_chars <= self.large_file_threshold:
            return DocumentPage(
                path=key,
                content=content,
                total_pages=total_pages,
                start_char=1 if total_chars else 0,
                end_char=total_chars,
                total_chars=total_chars,
                start_line=1 if total_lines else 0,
                end_line=total_lines,
                total_lines=total_lines,
                page_size=page_size,
            )

        auto_paginated = page is None
        if page is None:
            page = 1

        if total_pages == 0:
            return DocumentPage(
                path=key,
                page=page,
                page_size=page_size,
                error=f"Document {key} is empty and has no pages",
            )

        if page < 1 or page > total_pages:
            valid = "1" if total_pages == 1 else f"1-{total_pages}"
            return DocumentPage(
                path=key,
                page=page,
                total_pages=total_pages,
                total_chars=total_chars,
                page_size=page_size,
                error=(
                    f"Page {page} not found. Valid pages: {valid} "
                    f"(max chars per page: {page_size:,})"
                ),
            )

        start = self.page_boundary(content, page - 1, page_size)
        end = self.page_boundary(content, page, page_size)
        body = content[start:end]

        start_line = min(content.count('\n', 0, start) + 1, max(total_lines, 1))
        line_breaks = body.count('\n') - (1 if body.endswith('\n') else 0)
        end_line = min(start_line + max(line_breaks, 0), total_lines) if body else start_line

        return DocumentPage(
            path=key,
            content=body,
            page=page,
            total_pages=total_pages,
            start_char=start + 1 if body else end,
            end_char=end,
            total_chars=total_chars,
            start_line=start_line,
            end_line=end_line,
            total_lines=total_lines,
            page_size=page_size,
            auto_paginated=auto_paginated,
            large_document=total_chars > self.large_file_threshold,
        )

    @staticmethod
    def page_boundary(content: str, k: int, page_size: int) -> int:
        """
        Offset where page k ends (and page k+1 starts).

        The raw offset k * page_size is moved just past the next newline at or
        after it, so no page splits a line and consecutive pages tile the content.
        """
        if k <= 0:
            return 0
        offset = k * page_size
        if offset >= len(content):
            return len(content)
        newline = content.find('\n', offset)
        return newline + 1 if newline != -1 else offset

    @staticmethod
    def _count_lines(content: str) -> int:
        if not content:
            return 0
        return content.count('\n') + (0 if content.endswith('\n') else 1)

    def grep(self, pattern: str, ignore_case: bool = True,
             cancel_token: Optional[CancellationToken] = None) -> GrepResult:
        """
        Regex search over every line of every document

        Args:
            pattern: Regular expression, matched anywhere in a line
            ignore_case: Case-insensitive matching (default)
            cancel_token: Checked once per document

        Returns:
            GrepResult with at most 100 matches and the exact total
        """
        result = GrepResult(pattern=pattern, ignore_case=ignore_case)
        try:
            regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
        except re.error as e:
            result.error = f"Invalid regex pattern: {e}"
            return result

        documents = self.index.documents
        try:
            for path in self.index.sorted_paths():
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                for line_number, line in enumerate(documents[path].content.split('\n'), 1):
                    if not regex.search(line):
                        continue
                    result.total_matches += 1
                    if len(result.matches) < GREP_MAX_MATCHES:
                        result.matches.append(GrepMatch(
                            path=path,
                            line_number=line_number,
                            preview=make_preview(line),
                        ))
        except QueryCancelledError as e:
            logger.info(f"grep '{pattern}' cancelled: {e}")
            result.matches = []
            result.total_matches = 0
            result.error = f"Query cancelled: {e}"

        return result

    def tree(self, root_directory: Optional[str] = None, max_depth: int = DEFAULT_TREE_DEPTH,
             cancel_token: Optional[CancellationToken] = None) -> DocumentTree:
        """
        Aggregate document paths into a directory tree

        Args:
            root_directory: Only documents under this directory
            max_depth: Path segments shown per document
            cancel_token: Checked once per path

        Returns:
            DocumentTree with per-node file counts
        """
        if max_depth < 1:
            return DocumentTree(
                nodes=[TreeNode(name="")],
                total_files=0,
                root_directory=root_directory,
                max_depth=max_depth,
                error=f"max_depth must be at least 1, got {max_depth}",
            )

        try:
            return build_tree(self.index.sorted_paths(), root_directory, max_depth, cancel_token)
        except QueryCancelledError as e:
            logger.info(f"tree cancelled: {e}")
            return DocumentTree(
                nodes=[TreeNode(name="")],
                total_files=0,
                root_directory=root_directory,
                max_depth=max_depth,
                error=f"Query cancelled: {e}",
            )

    def summary(self) -> CorpusSummary:
        """Per top-level folder counts and extension statistics"""
        paths = self.index.sorted_paths()

        groups = {}
        for path in paths:
            groups.setdefault(path.split('/', 1)[0], []).append(path)

        folders = [
            FolderSummary(
                name=name,
                file_count=len(members),
                top_extensions=top_extensions(members, SUMMARY_FOLDER_EXTENSIONS),
            )
            for name, members in sorted(groups.items())
        ]
        return CorpusSummary(
            folders=folders,
            total_documents=len(paths),
            top_extensions=top_extensions(paths, SUMMARY_TOP_EXTENSIONS),
        )

"""
Result formatters turning typed query results into text or JSON
"""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, Dict, List

from .constants import ERROR_PREFIX, NO_DOCUMENTS_MESSAGE, NO_MATCHES_MESSAGE, PAGE_RULE
from .models import CorpusSummary, DocumentPage, DocumentTree, GrepResult, ListingResult
from .tree import render_tree_lines


def format_error(message: str) -> str:
    return f"{ERROR_PREFIX} {message}"


class ResultFormatter(ABC):
    """Base class for query result formatters"""

    @abstractmethod
    def format_listing(self, result: ListingResult) -> str:
        pass

    @abstractmethod
    def format_page(self, page: DocumentPage) -> str:
        pass

    @abstractmethod
    def format_grep(self, result: GrepResult) -> str:
        pass

    @abstractmethod
    def format_tree(self, tree: DocumentTree) -> str:
        pass

    @abstractmethod
    def format_summary(self, summary: CorpusSummary) -> str:
        pass


class TextFormatter(ResultFormatter):
    """Plain-text rendering returned by the MCP tools and the CLI"""

    def format_listing(self, result: ListingResult) -> str:
        """One 'path' or 'path - description' line per entry"""
        if result.total_matches == 0:
            return NO_DOCUMENTS_MESSAGE

        lines = [
            f"{entry.path} - {entry.description}" if entry.description else entry.path
            for entry in result.entries
        ]
        if result.truncated:
            notice = f"... and {result.remaining} more files (showing first {result.max_results})"
            lines.append(f"\n{notice}" if lines else notice)
        return "\n".join(lines)

    def format_page(self, page: DocumentPage) -> str:
        """
        Full content as-is, or a header followed by the page body

        Page 1 of a large document also carries hints for the next and last page.
        """
        if page.error:
            return format_error(page.error)
        if not page.paginated:
            return page.content

        header = [
            f"📄 Document: {page.path}",
            f"📖 Page {page.page}/{page.total_pages} "
            f"(chars {page.start_char:,}-{page.end_char:,}/{page.total_chars:,})",
            f"📏 Lines {page.start_line}-{page.end_line}/{page.total_lines:,} "
            f"| Max chars per page: {page.page_size:,}",
        ]

        if page.page == 1 and page.large_document and page.total_pages > 1:
            header.append("⚠️  Large document auto-paginated. To see other pages:")
            header.append(f"💡 get_doc('{page.path}', page=2)  # Next page")
            header.append(f"💡 get_doc('{page.path}', page={page.total_pages})  # Last page")

        return "\n".join(header) + "\n" + PAGE_RULE + "\n\n" + page.content

    def format_grep(self, result: GrepResult) -> str:
        if result.error:
            return format_error(result.error)
        if result.total_matches == 0:
            return NO_MATCHES_MESSAGE

        lines = [f"{match.path}:{match.line_number}: {match.preview}" for match in result.matches]
        if result.remaining:
            lines.append(f"\n... and {result.remaining} more matches")
        return "\n".join(lines)

    def format_tree(self, tree: DocumentTree) -> str:
        if tree.error:
            return format_error(tree.error)

        if tree.root_directory:
            lines = [f"Directory tree for: {tree.root_directory}"]
        else:
            lines = ["Directory tree:"]
        lines.append("")
        lines.extend(render_tree_lines(tree))
        lines.append("")
        lines.append(f"Total files: {tree.total_files}")
        return "\n".join(lines)

    def format_summary(self, summary: CorpusSummary) -> str:
        lines = ["=== Document Repository Summary ===", ""]

        for folder in summary.folders:
            lines.append(f"📁 {folder.name}/: {folder.file_count} files")
            if folder.top_extensions:
                extensions = ", ".join(f"{ext}: {count}" for ext, count in folder.top_extensions)
                lines.append(f"   Top extensions: {extensions}")
            lines.append("")

        lines.append("=== Overall Statistics ===")
        lines.append(f"Total documents: {summary.total_documents}")
        lines.append("")
        lines.append("Top file types:")
        for ext, count in summary.top_extensions:
            lines.append(f"  {ext}: {count} files")

        return "\n".join(lines)


class JsonFormatter(ResultFormatter):
    """JSON rendering built from the typed results"""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def _dump(self, data: Dict[str, Any]) -> str:
        return json.dumps(data, indent=self.indent, ensure_ascii=False)

    def format_listing(self, result: ListingResult) -> str:
        return self._dump({
            'pattern': result.pattern,
            'directory': result.directory,
            'max_results': result.max_results,
            'count': len(result.entries),
            'total_matches': result.total_matches,
            'remaining': result.remaining,
            'files': [asdict(entry) for entry in result.entries],
        })

    def format_page(self, page: DocumentPage) -> str:
        return self._dump(asdict(page))

    def format_grep(self, result: GrepResult) -> str:
        data = asdict(result)
        data['remaining'] = result.remaining
        return self._dump(data)

    def format_tree(self, tree: DocumentTree) -> str:
        return self._dump({
            'root_directory': tree.root_directory,
            'max_depth': tree.max_depth,
            'total_files': tree.total_files,
            'error': tree.error,
            'tree': self._tree_children(tree, 0),
        })

    def _tree_children(self, tree: DocumentTree, index: int) -> List[Dict[str, Any]]:
        return [
            {
                'name': node.name,
                'type': 'file' if node.is_file and not node.children else 'directory',
                'file_count': node.file_count,
                'children': self._tree_children(tree, child_index),
            }
            for child_index, node in tree.sorted_children(index)
        ]

    def format_summary(self, summary: CorpusSummary) -> str:
        return self._dump({
            'total_documents': summary.total_documents,
            'folders': [
                {
                    'name': folder.name,
                    'file_count': folder.file_count,
                    'top_extensions': dict(folder.top_extensions),
                }
                for folder in summary.folders
            ],
            'top_extensions': dict(summary.top_extensions),
        })

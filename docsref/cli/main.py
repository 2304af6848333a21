#!/usr/bin/env python3
"""
docsref command-line interface

- Robust argument parsing using argparse
- Text output by default, JSON built from the typed results with --json
- Logs go to stderr so stdout stays clean for piping
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

from docsref import __version__
from docsref.core import DocsConfig, DocumentEngine, JsonFormatter, TextFormatter
from docsref.core.constants import DEFAULT_MAX_RESULTS, DEFAULT_TREE_DEPTH
from docsref.core.result_formatters import ResultFormatter
from docsref.utils import configure_logging, get_logger

logger = get_logger("docsref.cli")


class DocsCLI:
    """Command dispatcher over a freshly loaded DocumentEngine"""

    def __init__(self, environ=None):
        self.environ = os.environ if environ is None else environ

    def build_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser"""
        parser = argparse.ArgumentParser(
            prog='docsref',
            description='docsref - Query a local documentation corpus',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self.get_usage_examples()
        )
        parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
        parser.add_argument('--json', action='store_true',
                            help='Output JSON instead of text')
        parser.add_argument('--log-level', default=None,
                            choices=['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR'],
                            help='Log level for stderr output (default: WARNING)')
        parser.add_argument('--base-dir', default=None,
                            help='Base directory holding docs/ (overrides DOCS_BASE_DIR)')

        subparsers = parser.add_subparsers(dest='command', help='Commands')

        list_parser = subparsers.add_parser('list', help='List documents')
        list_parser.add_argument('--pattern', '-p', help="File pattern, e.g. '*.md' or 'repos/**/*.cs'")
        list_parser.add_argument('--directory', '-d', help='Directory prefix to list under')
        list_parser.add_argument('--max', '-m', type=int, default=DEFAULT_MAX_RESULTS, dest='max_results',
                                 help=f'Maximum number of results (default: {DEFAULT_MAX_RESULTS})')

        subparsers.add_parser('summary', help='Show repository summary and statistics')

        tree_parser = subparsers.add_parser('tree', help='Show directory tree')
        tree_parser.add_argument('--directory', '-d', help='Root directory of the tree')
        tree_parser.add_argument('--depth', type=int, default=DEFAULT_TREE_DEPTH,
                                 help=f'Maximum depth (default: {DEFAULT_TREE_DEPTH})')

        get_parser = subparsers.add_parser('get', help='Show a document, optionally one page')
        get_parser.add_argument('path', help='Document path')
        get_parser.add_argument('--page', type=int, default=None, help='Page number (starts at 1)')

        grep_parser = subparsers.add_parser('grep', help='Regex search over all documents')
        grep_parser.add_argument('pattern', help='Regular expression')
        grep_parser.add_argument('--case-sensitive', '-c', action='store_true',
                                 help='Match case (default: ignore case)')

        subparsers.add_parser('serve', help='Run the MCP server on stdio')

        return parser

    def get_usage_examples(self) -> str:
        """Get usage examples for help text"""
        return """
Examples:
  docsref summary                          # Folder and file-type statistics
  docsref list --pattern '*.md'            # All Markdown documents
  docsref list -d repos/R3 --max 20        # First 20 documents under repos/R3
  docsref tree -d repos --depth 2          # Directory tree
  docsref get repos/R3/README.md --page 2  # Second page of a document
  docsref grep 'async\\s+def'               # Regex search
  docsref serve                            # Run as MCP server

Environment Variables:
  DOCS_BASE_DIR            Base directory (documents are read from <base>/docs)
  DOCS_FOLDERS             Comma-separated top-level folders to load
  DOCS_FILE_EXTENSIONS     Comma-separated extension allowlist
  DOCS_EXCLUDE_PATTERNS    Comma-separated extra exclude patterns
  DOCS_SMART_FILTER        Always include source/config files (default: true)
  DOCSREF_LOG_LEVEL        Log level (TRACE, DEBUG, INFO, WARNING, ERROR)
"""

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point"""
        parser = self.build_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return 0

        configure_logging(
            args.log_level
            or self.environ.get('DOCSREF_LOG_LEVEL')
            or self.environ.get('LOG_LEVEL')
            or 'WARNING'
        )

        config = DocsConfig.from_env(self.environ)
        if args.base_dir:
            config.base_dir = Path(args.base_dir)

        engine = DocumentEngine(config)
        engine.load()

        formatter: ResultFormatter = JsonFormatter() if args.json else TextFormatter()

        handler = getattr(self, f'cmd_{args.command}')
        return handler(engine, formatter, args)

    # Command handlers
    def cmd_list(self, engine: DocumentEngine, formatter: ResultFormatter,
                 args: argparse.Namespace) -> int:
        result = engine.query.list_filtered(args.pattern, args.directory, args.max_results)
        print(formatter.format_listing(result))
        return 0

    def cmd_summary(self, engine: DocumentEngine, formatter: ResultFormatter,
                    args: argparse.Namespace) -> int:
        print(formatter.format_summary(engine.query.summary()))
        return 0

    def cmd_tree(self, engine: DocumentEngine, formatter: ResultFormatter,
                 args: argparse.Namespace) -> int:
        tree = engine.query.tree(args.directory, args.depth)
        print(formatter.format_tree(tree))
        return 1 if tree.error else 0

    def cmd_get(self, engine: DocumentEngine, formatter: ResultFormatter,
                args: argparse.Namespace) -> int:
        page = engine.query.get_document(args.path, args.page)
        print(formatter.format_page(page))
        return 1 if page.error else 0

    def cmd_grep(self, engine: DocumentEngine, formatter: ResultFormatter,
                 args: argparse.Namespace) -> int:
        result = engine.query.grep(args.pattern, ignore_case=not args.case_sensitive)
        print(formatter.format_grep(result))
        return 1 if result.error or result.total_matches == 0 else 0

    def cmd_serve(self, engine: DocumentEngine, formatter: ResultFormatter,
                  args: argparse.Namespace) -> int:
        from docsref.server import serve

        try:
            asyncio.run(serve(engine))
        except KeyboardInterrupt:
            logger.info("MCP server interrupted")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    return DocsCLI().run(argv)


if __name__ == '__main__':
    sys.exit(main())

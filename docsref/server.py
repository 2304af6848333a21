#!/usr/bin/env python3
"""
MCP (Model Context Protocol) server for docsref

Exposes the document engine's read-only queries as MCP tools over stdio.
Everything except MCP frames goes to stderr.
"""

import asyncio
import sys
from typing import Any, Dict, List, Optional

from mcp.server import Server, NotificationOptions
from mcp.server.models import InitializationOptions
import mcp.server.stdio
import mcp.types as types

from docsref import __version__
from docsref.core import CancellationToken, DocumentEngine
from docsref.core.constants import DEFAULT_MAX_RESULTS, DEFAULT_TREE_DEPTH, ERROR_PREFIX
from docsref.utils import configure_logging, get_logger

logger = get_logger('docsref.mcp-server')

SERVER_NAME = "docsref-mcp"

SUMMARY_NOTE = (
    "Note: Full document list is too large. Showing summary instead.\n"
    "Use parameters to filter: list_docs(pattern=\"*.cs\", directory=\"repos/R3\")\n\n"
)


class InvalidArgumentError(ValueError):
    """Tool argument of the wrong type"""


def _optional_str(arguments: Dict[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentError(f"'{key}' must be a string")
    return value or None


def _optional_int(arguments: Dict[str, Any], key: str, default: Optional[int] = None) -> Optional[int]:
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidArgumentError(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"'{key}' must be an integer")


def _optional_bool(arguments: Dict[str, Any], key: str, default: bool) -> bool:
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    raise InvalidArgumentError(f"'{key}' must be a boolean")


class DocsMCPServer:
    """MCP server implementation for docsref"""

    def __init__(self, engine: DocumentEngine):
        """
        Args:
            engine: Loaded document engine
        """
        self.engine = engine
        self.app = Server(SERVER_NAME)
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP handlers"""
        self.app.list_tools()(self.handle_list_tools)
        self.app.call_tool()(self.handle_call_tool)

    async def handle_list_tools(self) -> List[types.Tool]:
        """List available tools"""
        return [
            types.Tool(
                name="list_docs",
                description="List available documents with optional filtering",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "pattern": {
                            "type": "string",
                            "description": "File path pattern (e.g., '*.cs', 'repos/UniVRM/**/*.shader')"
                        },
                        "directory": {
                            "type": "string",
                            "description": "Directory to search in (e.g., 'repos/R3')"
                        },
                        "max_results": {
                            "type": "integer",
                            "default": DEFAULT_MAX_RESULTS,
                            "description": "Maximum number of results to return"
                        }
                    }
                }
            ),
            types.Tool(
                name="list_docs_summary",
                description="Show document repository summary and statistics",
                inputSchema={"type": "object", "properties": {}}
            ),
            types.Tool(
                name="list_docs_tree",
                description="Show directory tree structure",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "directory": {
                            "type": "string",
                            "description": "Root directory to show tree for (e.g., 'repos/UniVRM')"
                        },
                        "max_depth": {
                            "type": "integer",
                            "default": DEFAULT_TREE_DEPTH,
                            "description": "Maximum depth to display"
                        }
                    }
                }
            ),
            types.Tool(
                name="get_doc",
                description="Get document content by path with pagination support",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "path": {
                            "type": "string",
                            "description": "Document file path"
                        },
                        "page": {
                            "type": "integer",
                            "description": "Page number (starts from 1, omit for full document)"
                        }
                    },
                    "required": ["path"]
                }
            ),
            types.Tool(
                name="grep_docs",
                description="Search documents using grep with regex support",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "pattern": {
                            "type": "string",
                            "description": "Search pattern (supports regex)"
                        },
                        "ignore_case": {
                            "type": "boolean",
                            "default": True,
                            "description": "Ignore case"
                        }
                    },
                    "required": ["pattern"]
                }
            ),
        ]

    async def handle_call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        """Handle tool calls"""
        arguments = arguments or {}
        handlers = {
            "list_docs": self._handle_list_docs,
            "list_docs_summary": self._handle_summary,
            "list_docs_tree": self._handle_tree,
            "get_doc": self._handle_get_doc,
            "grep_docs": self._handle_grep,
        }
        handler = handlers.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")

        logger.debug(f"Tool call {name} with {arguments}")
        try:
            text = await handler(arguments)
        except InvalidArgumentError as e:
            text = f"{ERROR_PREFIX} Invalid argument: {e}"
        return [types.TextContent(type="text", text=text)]

    async def _handle_list_docs(self, arguments: Dict[str, Any]) -> str:
        pattern = _optional_str(arguments, "pattern")
        directory = _optional_str(arguments, "directory")
        max_results = _optional_int(arguments, "max_results", DEFAULT_MAX_RESULTS)

        if not pattern and not directory and max_results == DEFAULT_MAX_RESULTS:
            return SUMMARY_NOTE + self.engine.get_summary()
        return self.engine.list_docs(pattern, directory, max_results)

    async def _handle_summary(self, arguments: Dict[str, Any]) -> str:
        return self.engine.get_summary()

    async def _handle_tree(self, arguments: Dict[str, Any]) -> str:
        directory = _optional_str(arguments, "directory")
        max_depth = _optional_int(arguments, "max_depth", DEFAULT_TREE_DEPTH)
        return await self._run_bounded(self.engine.get_tree, directory, max_depth)

    async def _handle_get_doc(self, arguments: Dict[str, Any]) -> str:
        path = _optional_str(arguments, "path")
        if path is None:
            raise InvalidArgumentError("'path' is required")
        page = _optional_int(arguments, "page")
        return self.engine.get_doc(path, page)

    async def _handle_grep(self, arguments: Dict[str, Any]) -> str:
        pattern = _optional_str(arguments, "pattern")
        if pattern is None:
            raise InvalidArgumentError("'pattern' is required")
        ignore_case = _optional_bool(arguments, "ignore_case", True)
        return await self._run_bounded(self.engine.grep_docs, pattern, ignore_case)

    async def _run_bounded(self, func, *args) -> str:
        """Run a scan in a worker thread under the configured query deadline"""
        token = CancellationToken(timeout=self.engine.config.query_timeout)
        try:
            return await asyncio.to_thread(func, *args, cancel_token=token)
        except asyncio.CancelledError:
            token.cancel("request cancelled")
            raise

    async def run(self):
        """Run the MCP server"""
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            await self.app.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=self.app.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


async def serve(engine: Optional[DocumentEngine] = None):
    """Load documents (unless an engine is supplied) and serve until stdin closes"""
    if engine is None:
        engine = DocumentEngine()
        engine.load()

    logger.info(f"Starting docsref MCP server with {engine.document_count} documents")
    server = DocsMCPServer(engine)
    await server.run()


def main():
    """Main entry point"""
    configure_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("MCP server interrupted")
    except Exception as e:
        logger.error(f"MCP server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()

"""
Document engine: owns configuration, the one-time load and the query API
"""

import threading
from typing import List, Optional

from docsref.utils import get_logger, log_with_context
from .cancellation import CancellationToken
from .config import DocsConfig
from .constants import DEFAULT_MAX_RESULTS, DEFAULT_TREE_DEPTH
from .corpus import CorpusIndex, CorpusNotReadyError
from .loader import CorpusLoader, LoadResult
from .models import LoadEvent
from .query_engine import QueryEngine
from .result_formatters import TextFormatter

logger = get_logger(__name__)


class DocumentEngine:
    """
    Explicitly constructed engine over one document root.

    ``load()`` runs once; queries issued before it has finished raise
    CorpusNotReadyError. The text methods return the rendered plain-text
    contract, while ``query`` exposes the typed results.
    """

    def __init__(self, config: Optional[DocsConfig] = None):
        """
        Args:
            config: Engine settings; read from the environment when omitted
        """
        self.config = config or DocsConfig.from_env()
        self.formatter = TextFormatter()
        self._lock = threading.Lock()
        self._load_started = False
        self._index: Optional[CorpusIndex] = None
        self._query: Optional[QueryEngine] = None
        self._events: List[LoadEvent] = []

    def load(self, folders: Optional[List[str]] = None) -> LoadResult:
        """
        Build the corpus

        Args:
            folders: Top-level folders to load (overrides the configured selection)

        Returns:
            LoadResult with the Ready index and load diagnostics

        Raises:
            RuntimeError: If called more than once
        """
        with self._lock:
            if self._load_started:
                raise RuntimeError("Documents have already been loaded; create a new engine to re-index")
            self._load_started = True

            logger.info(f"Loading documents from {self.config.docs_dir}")
            result = CorpusLoader(self.config).load(folders)

            for event in result.events:
                log_with_context(
                    logger,
                    event.level,
                    event.message,
                    kind=event.kind.value,
                    path=event.path,
                )

            self._events = list(result.events)
            self._index = result.index
            self._query = QueryEngine(
                result.index,
                max_chars_per_page=self.config.max_chars_per_page,
                large_file_threshold=self.config.large_file_threshold,
            )
            logger.info(f"Loaded {len(result.index)} documents (excluded ignored and binary files)")
            return result

    @property
    def is_ready(self) -> bool:
        return self._query is not None

    @property
    def query(self) -> QueryEngine:
        """Typed query API"""
        if self._query is None:
            raise CorpusNotReadyError("Documents have not been loaded yet")
        return self._query

    @property
    def events(self) -> List[LoadEvent]:
        return list(self._events)

    @property
    def document_count(self) -> int:
        return self.query.document_count

    def list_docs(self, pattern: Optional[str] = None, directory: Optional[str] = None,
                  max_results: int = DEFAULT_MAX_RESULTS) -> str:
        return self.formatter.format_listing(self.query.list_filtered(pattern, directory, max_results))

    def get_summary(self) -> str:
        return self.formatter.format_summary(self.query.summary())

    def get_tree(self, directory: Optional[str] = None, max_depth: int = DEFAULT_TREE_DEPTH,
                 cancel_token: Optional[CancellationToken] = None) -> str:
        return self.formatter.format_tree(self.query.tree(directory, max_depth, cancel_token))

    def get_doc(self, path: str, page: Optional[int] = None) -> str:
        return self.formatter.format_page(self.query.get_document(path, page))

    def grep_docs(self, pattern: str, ignore_case: bool = True,
                  cancel_token: Optional[CancellationToken] = None) -> str:
        return self.formatter.format_grep(self.query.grep(pattern, ignore_case, cancel_token))

"""
Document corpus engine: loading, indexing and read-only queries
"""

from .cancellation import CancellationToken, QueryCancelledError
from .config import DocsConfig
from .corpus import CorpusIndex, CorpusNotReadyError, CorpusState
from .engine import DocumentEngine
from .loader import CorpusLoader, LoadResult
from .models import (
    CorpusDocument,
    CorpusSummary,
    DocumentPage,
    DocumentTree,
    GrepMatch,
    GrepResult,
    ListingResult,
    LoadEvent,
    LoadEventKind,
)
from .query_engine import QueryEngine
from .result_formatters import JsonFormatter, TextFormatter

__all__ = [
    'CancellationToken',
    'QueryCancelledError',
    'DocsConfig',
    'CorpusIndex',
    'CorpusNotReadyError',
    'CorpusState',
    'DocumentEngine',
    'CorpusLoader',
    'LoadResult',
    'CorpusDocument',
    'CorpusSummary',
    'DocumentPage',
    'DocumentTree',
    'GrepMatch',
    'GrepResult',
    'ListingResult',
    'LoadEvent',
    'LoadEventKind',
    'QueryEngine',
    'JsonFormatter',
    'TextFormatter',
]

"""
In-memory document corpus with a one-way load lifecycle
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from docsref.utils import get_logger
from .models import CorpusDocument

logger = get_logger(__name__)


class CorpusState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class CorpusNotReadyError(RuntimeError):
    """Raised when the corpus is queried before loading has finished"""


class CorpusIndex:
    """
    Mapping from normalized relative path to document.

    Documents can only be added while LOADING. After ``mark_ready()`` the
    mapping is exposed through a read-only proxy and never changes again, so
    concurrent readers need no locking.
    """

    def __init__(self):
        self._state = CorpusState.UNINITIALIZED
        self._documents: Dict[str, CorpusDocument] = {}
        self._view: Mapping[str, CorpusDocument] = MappingProxyType(self._documents)
        self._sorted_paths: Optional[List[str]] = None

    @property
    def state(self) -> CorpusState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is CorpusState.READY

    def begin_loading(self) -> None:
        if self._state is not CorpusState.UNINITIALIZED:
            raise RuntimeError(f"Corpus cannot start loading from state '{self._state.value}'")
        self._state = CorpusState.LOADING

    def add(self, document: CorpusDocument) -> None:
        """Add or replace a document while loading"""
        if self._state is not CorpusState.LOADING:
            raise RuntimeError(f"Cannot add documents in state '{self._state.value}'")
        self._documents[document.path] = document

    def mark_ready(self) -> None:
        if self._state is not CorpusState.LOADING:
            raise RuntimeError(f"Corpus cannot become ready from state '{self._state.value}'")
        self._sorted_paths = sorted(self._documents)
        self._state = CorpusState.READY
        logger.debug(f"Corpus ready with {len(self._documents)} documents")

    def require_ready(self) -> None:
        if self._state is not CorpusState.READY:
            raise CorpusNotReadyError(
                f"Document corpus is not ready (state: {self._state.value})"
            )

    @property
    def documents(self) -> Mapping[str, CorpusDocument]:
        """Read-only view of the documents"""
        self.require_ready()
        return self._view

    def sorted_paths(self) -> List[str]:
        """All document paths in ascending order"""
        self.require_ready()
        return list(self._sorted_paths)

    def get(self, path: str) -> Optional[CorpusDocument]:
        self.require_ready()
        return self._documents.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[str]:
        return iter(self.sorted_paths())

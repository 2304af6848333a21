"""
Corpus loader: walks the document root once and builds the CorpusIndex
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from docsref.ignore import IGNORE_FILENAME, IgnoreFileLoader, PatternMatcher
from docsref.ignore.file_loader import describe_errors
from docsref.utils import get_logger
from docsref.utils.paths import file_extension, has_allowed_extension
from .config import DocsConfig
from .constants import BINARY_CHECK_BYTES, BINARY_HIGH_BYTE_RATIO
from .corpus import CorpusIndex
from .models import CorpusDocument, LoadEvent, LoadEventKind

logger = get_logger(__name__)


def is_binary_file(path: Path) -> bool:
    """
    Heuristic binary check on the first 8000 bytes.

    Any NUL byte, or more than 30% of bytes above 127, means binary. Empty
    files are text; unreadable files are treated as binary.
    """
    try:
        with open(path, 'rb') as f:
            chunk = f.read(BINARY_CHECK_BYTES)
    except OSError:
        return True

    if not chunk:
        return False
    if b'\x00' in chunk:
        return True

    high = sum(1 for byte in chunk if byte > 127)
    return high / len(chunk) > BINARY_HIGH_BYTE_RATIO


def read_text(path: Path) -> str:
    """Decode as UTF-8, dropping a BOM, replacing bad bytes, keeping line endings"""
    with open(path, 'r', encoding='utf-8-sig', errors='replace', newline='') as f:
        return f.read()


@dataclass
class LoadResult:
    """Outcome of a load: the Ready index plus every diagnostic raised"""
    index: CorpusIndex
    events: List[LoadEvent] = field(default_factory=list)
    matcher: Optional[PatternMatcher] = None

    @property
    def document_count(self) -> int:
        return len(self.index)

    def events_of(self, kind: LoadEventKind) -> List[LoadEvent]:
        return [event for event in self.events if event.kind is kind]


class CorpusLoader:
    """
    Builds a CorpusIndex from the configured document root.

    Ignore files under every selected root are registered before any document
    is evaluated, and custom exclude patterns are added after all of them.
    """

    def __init__(self, config: DocsConfig):
        self.config = config
        self._ignore_loader = IgnoreFileLoader(IGNORE_FILENAME)

    def load(self, folders: Optional[List[str]] = None) -> LoadResult:
        """
        Walk the document root and index every accepted file

        Args:
            folders: Top-level folder names to load; defaults to the configured
                selection, and None there means the whole document root

        Returns:
            LoadResult holding a Ready index and the load diagnostics
        """
        if folders is None:
            folders = self.config.folders

        index = CorpusIndex()
        index.begin_loading()
        events: List[LoadEvent] = []
        result = LoadResult(index=index, events=events)

        metadata = self._load_metadata(events)

        matcher = PatternMatcher(
            smart_filter=self.config.smart_filter,
            precedence=self.config.rule_precedence,
        )
        result.matcher = matcher

        docs_dir = self.config.docs_dir
        if not docs_dir.is_dir():
            events.append(LoadEvent(
                kind=LoadEventKind.MISSING_FOLDER,
                message=f"Docs directory not found: {docs_dir}",
                path=str(docs_dir),
            ))
            index.mark_ready()
            return result

        docs_dir = docs_dir.resolve()
        roots = self._resolve_roots(docs_dir, folders, events)
        on_walk_error = self._walk_error_handler(docs_dir, events)

        if self.config.respect_gitignore:
            for root in roots:
                self._register_ignore_files(matcher, docs_dir, root, events, on_walk_error)

        for pattern in self.config.exclude_patterns:
            matcher.add_pattern(pattern)

        for root in roots:
            self._load_root(index, matcher, docs_dir, root, metadata, events, on_walk_error)

        index.mark_ready()
        logger.info(f"Loaded {len(index)} documents from {docs_dir} ({len(events)} load events)")
        return result

    def _resolve_roots(self, docs_dir: Path, folders: Optional[List[str]],
                       events: List[LoadEvent]) -> List[Path]:
        if not folders:
            return [docs_dir]

        roots = []
        for folder in folders:
            candidate = (docs_dir / folder).resolve()
            inside = candidate == docs_dir or docs_dir in candidate.parents
            if not inside or not candidate.is_dir():
                events.append(LoadEvent(
                    kind=LoadEventKind.MISSING_FOLDER,
                    message=f"Folder not found: {folder}",
                    path=folder,
                ))
                continue
            if candidate in roots:
                continue
            roots.append(candidate)
        return roots

    def _load_metadata(self, events: List[LoadEvent]) -> Dict[str, str]:
        metadata_file = self.config.metadata_file
        if not metadata_file.is_file():
            return {}

        try:
            with open(metadata_file, 'r', encoding='utf-8-sig') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            events.append(LoadEvent(
                kind=LoadEventKind.METADATA_ERROR,
                message=f"Error loading metadata: {e}",
                path=str(metadata_file),
            ))
            return {}

        if not isinstance(data, dict):
            events.append(LoadEvent(
                kind=LoadEventKind.METADATA_ERROR,
                message="Error loading metadata: expected a JSON object of path to description",
                path=str(metadata_file),
            ))
            return {}

        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _walk_error_handler(self, docs_dir: Path,
                            events: List[LoadEvent]) -> Callable[[OSError], None]:
        """Record each directory that cannot be listed once, across all walks"""
        reported = set()

        def on_error(error: OSError) -> None:
            relative = self._relative(docs_dir, Path(error.filename)) if error.filename else ""
            if relative in reported:
                return
            reported.add(relative)
            events.append(LoadEvent(
                kind=LoadEventKind.READ_ERROR,
                message=f"Error reading directory {relative or '.'}: {error}",
                path=relative,
            ))

        return on_error

    def _register_ignore_files(self, matcher: PatternMatcher, docs_dir: Path, root: Path,
                               events: List[LoadEvent],
                               on_walk_error: Callable[[OSError], None]) -> None:
        for ignore_file in self._ignore_loader.find_ignore_files(root, onerror=on_walk_error):
            scope = self._relative(docs_dir, ignore_file.parent)
            info = matcher.add_ignore_file(ignore_file, scope)
            relative_file = self._relative(docs_dir, ignore_file)

            summary = describe_errors(info)
            if summary:
                events.append(LoadEvent(
                    kind=LoadEventKind.IGNORE_FILE_ERROR,
                    message=f"{relative_file}: {summary}",
                    path=relative_file,
                ))
            for warning in info.warnings:
                events.append(LoadEvent(
                    kind=LoadEventKind.IGNORE_PATTERN_WARNING,
                    message=f"{relative_file}:{warning.line}: '{warning.pattern}' {warning.message}",
                    path=relative_file,
                    level=logging.INFO,
                ))

    def _load_root(self, index: CorpusIndex, matcher: PatternMatcher, docs_dir: Path,
                   root: Path, metadata: Dict[str, str], events: List[LoadEvent],
                   on_walk_error: Callable[[OSError], None]) -> None:
        allowed = self.config.file_extensions

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_walk_error):
            current = Path(dirpath)
            relative_dir = self._relative(docs_dir, current)

            kept = []
            for name in sorted(dirnames):
                child = f"{relative_dir}/{name}" if relative_dir else name
                if matcher.prunes_directory(child):
                    logger.trace(f"Pruned {child}/")
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                if not has_allowed_extension(name, allowed):
                    continue

                relative = f"{relative_dir}/{name}" if relative_dir else name
                if matcher.is_ignored(relative, file_extension(name)):
                    continue

                document = self._read_document(current / name, relative, metadata, events)
                if document is not None:
                    index.add(document)

    def _read_document(self, path: Path, relative: str, metadata: Dict[str, str],
                       events: List[LoadEvent]) -> Optional[CorpusDocument]:
        try:
            size = path.stat().st_size
        except OSError as e:
            events.append(LoadEvent(
                kind=LoadEventKind.READ_ERROR,
                message=f"Error loading {relative}: {e}",
                path=relative,
            ))
            return None

        if size > self.config.max_file_size:
            events.append(LoadEvent(
                kind=LoadEventKind.OVERSIZED_FILE,
                message=(
                    f"Skipping large file: {relative} "
                    f"({size:,} bytes, max {self.config.max_file_size:,})"
                ),
                path=relative,
                level=logging.INFO,
            ))
            return None

        if is_binary_file(path):
            events.append(LoadEvent(
                kind=LoadEventKind.BINARY_FILE,
                message=f"Skipping binary file: {relative}",
                path=relative,
                level=logging.DEBUG,
            ))
            return None

        try:
            content = read_text(path)
        except OSError as e:
            events.append(LoadEvent(
                kind=LoadEventKind.READ_ERROR,
                message=f"Error loading {relative}: {e}",
                path=relative,
            ))
            return None

        return CorpusDocument(path=relative, content=content, description=metadata.get(relative) or None)

    @staticmethod
    def _relative(docs_dir: Path, path: Path) -> str:
        """Path relative to the document root with '/' separators ('' for the root)"""
        relative = os.path.relpath(path, docs_dir)
        if relative == '.':
            return ""
        return Path(relative).as_posix()

"""
Shared fixtures for building document trees on disk
"""

import logging
from pathlib import Path
from typing import Dict, Union

import pytest

from docsref.core import CorpusDocument, CorpusIndex, DocsConfig, DocumentEngine


def write_files(root: Path, files: Dict[str, Union[str, bytes]]) -> None:
    """Create files under root; str content is written as UTF-8 without newline translation"""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content if isinstance(content, bytes) else content.encode('utf-8')
        path.write_bytes(data)


def make_index(documents: Dict[str, str]) -> CorpusIndex:
    """Ready index holding the given path -> content pairs"""
    index = CorpusIndex()
    index.begin_loading()
    for path, content in documents.items():
        index.add(CorpusDocument(path=path, content=content))
    index.mark_ready()
    return index


@pytest.fixture
def docs_base(tmp_path):
    """Base directory with an empty docs/ root"""
    (tmp_path / "docs").mkdir()
    return tmp_path


@pytest.fixture
def make_engine(docs_base):
    """Factory: write files under docs/ and return a loaded engine"""
    def factory(files: Dict[str, Union[str, bytes]], **config_overrides) -> DocumentEngine:
        write_files(docs_base / "docs", files)
        config = DocsConfig(base_dir=docs_base, **config_overrides)
        engine = DocumentEngine(config)
        engine.load()
        return engine
    return factory


@pytest.fixture
def restore_logging():
    """Undo configure_logging() changes to the root logger"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    mcp_level = logging.getLogger('mcp').level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger('mcp').setLevel(mcp_level)

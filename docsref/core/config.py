"""
Configuration for the document engine.

Values come from DOCS_* environment variables; malformed values are logged and
replaced by their defaults so a typo never prevents the server from starting.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional, TypeVar

from docsref.ignore.rule_engine import RulePrecedence
from docsref.utils import get_logger
from .constants import (
    DEFAULT_EXTENSIONS,
    DEFAULT_LARGE_FILE_THRESHOLD,
    DEFAULT_MAX_CHARS_PER_PAGE,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_QUERY_TIMEOUT,
    DOCS_DIRNAME,
    METADATA_FILENAME,
)

logger = get_logger(__name__)

T = TypeVar('T')

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated value, dropping blanks"""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot"""
    extension = extension.strip().lower()
    return extension if extension.startswith('.') else f".{extension}"


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: '{value}'")


def parse_positive_int(value: str) -> int:
    number = int(value.strip())
    if number <= 0:
        raise ValueError(f"must be positive, got {number}")
    return number


def parse_positive_float(value: str) -> float:
    number = float(value.strip())
    if number <= 0:
        raise ValueError(f"must be positive, got {number}")
    return number


@dataclass
class DocsConfig:
    """Settings consumed by the loader, the query engine and the server"""
    base_dir: Path = field(default_factory=Path.cwd)
    folders: Optional[List[str]] = None
    file_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_patterns: List[str] = field(default_factory=list)
    max_chars_per_page: int = DEFAULT_MAX_CHARS_PER_PAGE
    large_file_threshold: int = DEFAULT_LARGE_FILE_THRESHOLD
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    respect_gitignore: bool = True
    smart_filter: bool = True
    rule_precedence: RulePrecedence = RulePrecedence.FIRST_MATCH
    query_timeout: float = DEFAULT_QUERY_TIMEOUT

    def __post_init__(self):
        """Validate configuration"""
        self.base_dir = Path(self.base_dir)
        if self.max_chars_per_page <= 0:
            raise ValueError(f"max_chars_per_page must be positive, got {self.max_chars_per_page}")
        if self.large_file_threshold <= 0:
            raise ValueError(f"large_file_threshold must be positive, got {self.large_file_threshold}")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")
        if self.query_timeout <= 0:
            raise ValueError(f"query_timeout must be positive, got {self.query_timeout}")
        if isinstance(self.rule_precedence, str) and not isinstance(self.rule_precedence, RulePrecedence):
            self.rule_precedence = RulePrecedence.parse(self.rule_precedence)

        self.file_extensions = [normalize_extension(ext) for ext in self.file_extensions if ext.strip()]
        if not self.file_extensions:
            raise ValueError("file_extensions must not be empty")
        if self.folders is not None:
            self.folders = [folder.strip().strip('/\\') for folder in self.folders if folder.strip()]
            if not self.folders:
                self.folders = None

    @property
    def docs_dir(self) -> Path:
        """Document root: <base>/docs"""
        return self.base_dir / DOCS_DIRNAME

    @property
    def metadata_file(self) -> Path:
        """Description sidecar beside the document root"""
        return self.base_dir / METADATA_FILENAME

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DocsConfig":
        """
        Build a configuration from DOCS_* environment variables

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            DocsConfig with defaults for unset or malformed values
        """
        env = os.environ if environ is None else environ

        def read(name: str, parser: Callable[[str], T], default: T) -> T:
            raw = env.get(name)
            if raw is None or not raw.strip():
                return default
            try:
                return parser(raw)
            except ValueError as e:
                logger.warning(f"Invalid value for {name}='{raw}' ({e}); using default {default}")
                return default

        base_dir = env.get('DOCS_BASE_DIR')
        extensions = split_list(env.get('DOCS_FILE_EXTENSIONS'))
        folders = split_list(env.get('DOCS_FOLDERS'))

        config = cls(
            base_dir=Path(base_dir) if base_dir else Path.cwd(),
            folders=folders or None,
            file_extensions=extensions or list(DEFAULT_EXTENSIONS),
            exclude_patterns=split_list(env.get('DOCS_EXCLUDE_PATTERNS')),
            max_chars_per_page=read('DOCS_MAX_CHARS_PER_PAGE', parse_positive_int, DEFAULT_MAX_CHARS_PER_PAGE),
            large_file_threshold=read('DOCS_LARGE_FILE_THRESHOLD', parse_positive_int, DEFAULT_LARGE_FILE_THRESHOLD),
            max_file_size=read('DOCS_MAX_FILE_SIZE', parse_positive_int, DEFAULT_MAX_FILE_SIZE),
            respect_gitignore=read('DOCS_RESPECT_GITIGNORE', parse_bool, True),
            smart_filter=read('DOCS_SMART_FILTER', parse_bool, True),
            rule_precedence=read('DOCS_RULE_PRECEDENCE', RulePrecedence.parse, RulePrecedence.FIRST_MATCH),
            query_timeout=read('DOCS_QUERY_TIMEOUT', parse_positive_float, DEFAULT_QUERY_TIMEOUT),
        )

        if extensions:
            logger.info(f"Using custom file extensions: {', '.join(config.file_extensions)}")
        return config

"""
File loader for discovering, parsing and validating ignore files
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from docsref.utils import get_logger
from .constants import IGNORE_FILENAME, MAX_IGNORE_FILE_SIZE, MAX_PATTERNS_PER_FILE
from .rule_engine import IgnoreRuleEngine

logger = get_logger(__name__)


@dataclass
class ValidationError:
    """Represents a validation error in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class ValidationWarning:
    """Represents a validation warning in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class IgnoreFileInfo:
    """Information about a loaded ignore file"""
    path: Path
    patterns: List[str]
    valid_patterns: List[str]
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Check if file has no errors"""
        return len(self.errors) == 0

    @property
    def readable(self) -> bool:
        """False when the file itself could not be read (line 0 errors)"""
        return not any(error.line == 0 for error in self.errors)


class IgnoreFileLoader:
    """
    Handles loading, parsing, and validating ignore files
    """

    def __init__(self, ignore_filename: str = IGNORE_FILENAME):
        """
        Initialize loader

        Args:
            ignore_filename: Name of ignore files to look for
        """
        self.ignore_filename = ignore_filename
        self._engine = IgnoreRuleEngine()

    def load_file(self, file_path: Path) -> IgnoreFileInfo:
        """
        Load and validate an ignore file

        Args:
            file_path: Path to the ignore file

        Returns:
            IgnoreFileInfo with patterns and validation results
        """
        info = IgnoreFileInfo(
            path=file_path,
            patterns=[],
            valid_patterns=[],
            stats={
                'total_lines': 0,
                'empty_lines': 0,
                'comment_lines': 0,
                'pattern_lines': 0,
            }
        )

        try:
            file_size = file_path.stat().st_size
        except OSError as e:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Cannot stat file: {e}"
            ))
            return info

        if file_size > MAX_IGNORE_FILE_SIZE:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"File too large: {file_size} bytes (max: {MAX_IGNORE_FILE_SIZE})"
            ))
            return info

        try:
            with open(file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
                lines = f.readlines()
        except OSError as e:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Error reading file: {e}"
            ))
            return info

        info.stats['total_lines'] = len(lines)

        for line_num, line in enumerate(lines, 1):
            stripped = line.strip()

            if not stripped:
                info.stats['empty_lines'] += 1
                continue

            if stripped.startswith('#'):
                info.stats['comment_lines'] += 1
                continue

            info.stats['pattern_lines'] += 1
            info.patterns.append(stripped)

            is_valid, validation_msg = self._engine.validate_pattern(stripped)
            if is_valid:
                info.valid_patterns.append(stripped)
            else:
                info.errors.append(ValidationError(
                    line=line_num,
                    pattern=stripped,
                    message=validation_msg or "Invalid pattern"
                ))

            for warning_msg in self._check_pattern_warnings(stripped):
                info.warnings.append(ValidationWarning(
                    line=line_num,
                    pattern=stripped,
                    message=warning_msg
                ))

        if len(info.valid_patterns) > MAX_PATTERNS_PER_FILE:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Too many patterns: {len(info.valid_patterns)} (max: {MAX_PATTERNS_PER_FILE})"
            ))
            info.valid_patterns = info.valid_patterns[:MAX_PATTERNS_PER_FILE]

        return info

    def find_ignore_files(self, root_path: Path,
                          onerror: Optional[Callable[[OSError], None]] = None) -> List[Path]:
        """
        Find all ignore files under a root path

        Args:
            root_path: Root directory to search from
            onerror: Called with the OSError for each directory that cannot be
                listed; such directories are skipped

        Returns:
            List of paths to ignore files, root first, then by depth and name
        """
        ignore_files = []

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=onerror):
            dirnames.sort()
            if self.ignore_filename in filenames:
                ignore_files.append(Path(dirpath) / self.ignore_filename)

        ignore_files.sort(key=lambda p: (len(p.parts), p.as_posix()))
        return ignore_files

    def _check_pattern_warnings(self, pattern: str) -> List[str]:
        """
        Check pattern for potential issues that aren't errors

        Args:
            pattern: Pattern to check

        Returns:
            List of warning messages
        """
        warnings = []

        if '\\' in pattern:
            warnings.append(
                "Pattern contains backslash. Use forward slashes for paths."
            )

        if pattern in ['*', '**', '**/*']:
            warnings.append(
                "Very broad pattern - will exclude many files"
            )

        if pattern.startswith('*.') and '/' in pattern:
            warnings.append(
                "Extension pattern with path separator - this may not work as expected"
            )

        return warnings


def describe_errors(info: IgnoreFileInfo) -> Optional[str]:
    """One-line summary of an ignore file's errors, or None"""
    if not info.errors:
        return None
    return "; ".join(
        f"line {error.line}: {error.message}" if error.line else error.message
        for error in info.errors
    )

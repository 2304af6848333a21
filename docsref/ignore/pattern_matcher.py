"""
Inclusion / exclusion decisions for candidate document paths
"""

from pathlib import Path
from typing import List, Optional

from docsref.utils import get_logger
from docsref.utils.paths import file_extension, normalize_path
from .constants import BASELINE_EXCLUSIONS, BUILD_OUTPUT_DIRECTORIES, SMART_FILTER_EXTENSIONS
from .file_loader import IgnoreFileInfo, IgnoreFileLoader
from .rule_engine import (
    IgnoreRule,
    IgnoreRuleEngine,
    RuleOrigin,
    RulePrecedence,
    compile_rules,
)

logger = get_logger(__name__)


class PatternMatcher:
    """
    Ordered ignore rules plus the smart-filter bypass.

    Rules are kept in the order they were added. The baseline exclusions are
    always installed first, so ignore files and custom patterns come after them.
    """

    def __init__(self, smart_filter: bool = False,
                 precedence: RulePrecedence = RulePrecedence.FIRST_MATCH):
        """
        Initialize the matcher with the baseline exclusions

        Args:
            smart_filter: Always include source/config extensions unless a baseline
                rule or the build-output check excludes them
            precedence: Which matching rule decides outside the bypass
        """
        self.smart_filter = smart_filter
        self.precedence = precedence
        self._engine = IgnoreRuleEngine()
        self._loader = IgnoreFileLoader()

        self._baseline_rules = compile_rules(BASELINE_EXCLUSIONS, origin=RuleOrigin.BASELINE)
        self._rules: List[IgnoreRule] = list(self._baseline_rules)

        logger.debug(
            f"PatternMatcher initialized with {len(self._baseline_rules)} baseline rules "
            f"(smart_filter={smart_filter}, precedence={precedence.value})"
        )

    @property
    def rules(self) -> List[IgnoreRule]:
        """Rules in evaluation order (copy)"""
        return list(self._rules)

    def add_pattern(self, text: str, scope: str = "",
                    origin: RuleOrigin = RuleOrigin.CUSTOM) -> Optional[IgnoreRule]:
        """
        Compile and append one rule

        Args:
            text: Raw pattern text
            scope: Directory relative to the document root the rule applies under
            origin: Where the rule came from

        Returns:
            The compiled rule, or None when the pattern was rejected
        """
        text = text.strip()
        if not text or text.startswith('#'):
            return None

        is_valid, error = self._engine.validate_pattern(text)
        if not is_valid:
            logger.warning(f"Ignoring invalid pattern '{text}': {error}")
            return None

        try:
            rule = self._engine.compile_rule(text, scope, origin)
        except ValueError as e:
            logger.warning(f"Ignoring invalid pattern '{text}': {e}")
            return None

        self._rules.append(rule)
        logger.debug(f"Added {origin.value} rule '{text}'" + (f" scoped to '{rule.scope}'" if rule.scope else ""))
        return rule

    def add_ignore_file(self, path: Path, scope_directory: str = "") -> IgnoreFileInfo:
        """
        Parse an ignore file and append its valid patterns, scoped to a directory

        Args:
            path: Ignore file on disk
            scope_directory: Directory holding the file, relative to the document root

        Returns:
            IgnoreFileInfo describing what was loaded, errors and warnings included
        """
        info = self._loader.load_file(Path(path))
        added = 0
        for pattern in info.valid_patterns:
            if self.add_pattern(pattern, scope_directory, RuleOrigin.IGNORE_FILE) is not None:
                added += 1

        logger.debug(f"Loaded {added} rules from {path}")
        return info

    def is_ignored(self, candidate_path: str, extension: Optional[str] = None) -> bool:
        """
        Decide whether a candidate path is excluded

        Args:
            candidate_path: Path relative to the document root (either separator)
            extension: Lower-cased extension; derived from the path when omitted

        Returns:
            True when the path must not be indexed
        """
        path = normalize_path(candidate_path)
        if extension is None:
            extension = file_extension(path)
        else:
            extension = extension.lower()

        if self.smart_filter and extension in SMART_FILTER_EXTENSIONS:
            baseline = self._engine.any_match(path, self._baseline_rules)
            if baseline is not None:
                logger.trace(f"Excluded {path} (baseline rule '{baseline.pattern}')")
                return True
            if self.is_build_output_path(path):
                logger.trace(f"Excluded {path} (build output)")
                return True
            logger.trace(f"Included {path} (smart filter)")
            return False

        result = self._engine.evaluate(path, self._rules, self.precedence)
        if result.matched_rule is not None:
            verdict = "Excluded" if result.should_ignore else "Included"
            logger.trace(f"{verdict} {path} (rule '{result.matched_rule.pattern}')")
        return result.should_ignore

    def prunes_directory(self, directory: str) -> bool:
        """
        True when nothing under the directory can be included, so a walk may skip it.

        Only baseline matches qualify, and only under first-match precedence:
        baseline rules come first and also bind the smart-filter bypass.
        """
        if self.precedence is not RulePrecedence.FIRST_MATCH:
            return False
        probe = normalize_path(directory) + '/'
        return self._engine.any_match(probe, self._baseline_rules) is not None

    @staticmethod
    def is_build_output_path(path: str) -> bool:
        """True when any directory segment of the path is a build-output directory"""
        segments = normalize_path(path).split('/')[:-1]
        return any(segment.lower() in BUILD_OUTPUT_DIRECTORIES for segment in segments)

"""
Rule engine for ignore pattern compilation and ordered matching
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Sequence, Tuple

import pathspec

from docsref.utils import get_logger
from docsref.utils.paths import normalize_path

logger = get_logger(__name__)


class RuleOrigin(str, Enum):
    """Where an ignore rule came from"""
    BASELINE = "baseline"
    IGNORE_FILE = "ignore_file"
    CUSTOM = "custom"


class RulePrecedence(str, Enum):
    """
    Which matching rule decides the outcome.

    FIRST_MATCH is the compatible behaviour: rules are evaluated in the order
    they were added and the first one that matches wins, so a negation only
    re-includes a path when it was added before any broader exclusion.
    LAST_MATCH is the conventional ignore-file precedence.
    """
    FIRST_MATCH = "first-match"
    LAST_MATCH = "last-match"

    @classmethod
    def parse(cls, value: str) -> "RulePrecedence":
        normalized = value.strip().lower().replace('_', '-')
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(
            f"Unknown rule precedence '{value}' "
            f"(expected one of: {', '.join(m.value for m in cls)})"
        )


@dataclass(frozen=True)
class IgnoreRule:
    """A single compiled ignore rule"""
    pattern: str
    negation: bool
    directory_only: bool
    scope: str
    regex: Pattern[str]
    origin: RuleOrigin = RuleOrigin.CUSTOM

    def matches(self, path: str) -> bool:
        """
        Check whether the rule's pattern matches a normalized relative path.

        Scoped rules only see paths under their scope directory, and match
        against the remainder below it. The negation flag is not applied here;
        it is interpreted by the precedence strategy.
        """
        target = path
        if self.scope:
            prefix = self.scope + "/"
            if not path.startswith(prefix):
                return False
            target = path[len(prefix):]
        return self.regex.search(target) is not None


@dataclass
class MatchResult:
    """Result of matching a path against ignore rules"""
    should_ignore: bool
    matched_rule: Optional[IgnoreRule] = None


def pattern_to_regex(pattern: str, directory_only: bool = False) -> str:
    """
    Convert a stripped ignore pattern (no leading '!' nor trailing '/') to a regex.

    '*' matches any run of characters, including separators, and '?' any single
    character. A pattern without a separator matches a whole path segment
    anywhere; a leading '/' anchors at the scope root; any other pattern
    anchors at a segment boundary anywhere under the scope.
    """
    anchored = pattern.startswith('/')
    if anchored:
        pattern = pattern[1:]

    body = re.escape(pattern).replace(r'\*', '.*').replace(r'\?', '.')
    tail = '/' if directory_only else '(/|$)'

    if anchored:
        return f'^{body}{tail}'
    return f'(^|/){body}{tail}'


class IgnoreRuleEngine:
    """
    Compiles ignore patterns and evaluates ordered rule lists
    """

    def compile_rule(self, text: str, scope: str = "",
                     origin: RuleOrigin = RuleOrigin.CUSTOM) -> IgnoreRule:
        """
        Compile one ignore pattern

        Args:
            text: Raw pattern text, optionally prefixed with '!' and/or suffixed with '/'
            scope: Directory (relative to the document root) the rule is confined to
            origin: Where the rule came from

        Returns:
            Immutable compiled rule

        Raises:
            ValueError: If nothing is left of the pattern after stripping markers
        """
        raw = text.strip()
        pattern = raw

        negation = pattern.startswith('!')
        if negation:
            pattern = pattern[1:]

        directory_only = pattern.endswith('/')
        if directory_only:
            pattern = pattern.rstrip('/')

        if not pattern:
            raise ValueError(f"Empty ignore pattern: '{raw}'")

        regex = re.compile(pattern_to_regex(pattern, directory_only))
        return IgnoreRule(
            pattern=raw,
            negation=negation,
            directory_only=directory_only,
            scope=normalize_path(scope),
            regex=regex,
            origin=origin,
        )

    def validate_pattern(self, pattern: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a single pattern as a gitwildmatch pattern

        Args:
            pattern: Pattern to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        test_pattern = pattern[1:] if pattern.startswith('!') else pattern
        if not test_pattern.strip('/').strip():
            return False, "Pattern is empty"
        try:
            pathspec.PathSpec.from_lines('gitwildmatch', [test_pattern])
            return True, None
        except ValueError as e:
            return False, str(e)

    def evaluate(self, path: str, rules: Sequence[IgnoreRule],
                 precedence: RulePrecedence = RulePrecedence.FIRST_MATCH) -> MatchResult:
        """
        Decide whether a path is ignored by an ordered rule list

        Args:
            path: Normalized path relative to the document root
            rules: Rules in the order they were added
            precedence: Which matching rule decides

        Returns:
            MatchResult with decision and the deciding rule (None when no rule matched)
        """
        deciding: Optional[IgnoreRule] = None
        for rule in rules:
            if not rule.matches(path):
                continue
            deciding = rule
            if precedence is RulePrecedence.FIRST_MATCH:
                break

        if deciding is None:
            return MatchResult(should_ignore=False)
        return MatchResult(should_ignore=not deciding.negation, matched_rule=deciding)

    def any_match(self, path: str, rules: Sequence[IgnoreRule]) -> Optional[IgnoreRule]:
        """Return the first non-negated rule matching the path, if any"""
        for rule in rules:
            if not rule.negation and rule.matches(path):
                return rule
        return None


def compile_rules(patterns: List[str], scope: str = "",
                  origin: RuleOrigin = RuleOrigin.CUSTOM) -> List[IgnoreRule]:
    """Compile a list of patterns, skipping empty ones"""
    engine = IgnoreRuleEngine()
    rules = []
    for text in patterns:
        try:
            rules.append(engine.compile_rule(text, scope, origin))
        except ValueError as e:
            logger.warning(f"Skipping pattern: {e}")
    return rules

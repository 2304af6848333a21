"""
Ignore rules deciding which files enter the document corpus
"""

from .constants import IGNORE_FILENAME, BASELINE_EXCLUSIONS
from .file_loader import IgnoreFileInfo, IgnoreFileLoader, ValidationError, ValidationWarning
from .pattern_matcher import PatternMatcher
from .rule_engine import IgnoreRule, IgnoreRuleEngine, MatchResult, RuleOrigin, RulePrecedence

__all__ = [
    'PatternMatcher',
    'IgnoreRule',
    'IgnoreRuleEngine',
    'MatchResult',
    'RuleOrigin',
    'RulePrecedence',
    'IgnoreFileLoader',
    'IgnoreFileInfo',
    'ValidationError',
    'ValidationWarning',
    'IGNORE_FILENAME',
    'BASELINE_EXCLUSIONS',
]

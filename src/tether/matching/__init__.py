"""Keyword extraction, context analysis and relevance scoring."""

from tether.matching.context import ContextAnalyzer
from tether.matching.keywords import KeywordMatcher, KeywordTables, levenshtein_distance
from tether.matching.relevance import RelevanceBreakdown, RelevanceScorer

__all__ = [
    "ContextAnalyzer",
    "KeywordMatcher",
    "KeywordTables",
    "RelevanceBreakdown",
    "RelevanceScorer",
    "levenshtein_distance",
]

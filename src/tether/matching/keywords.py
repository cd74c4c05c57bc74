"""Keyword extraction and keyword-set matching.

KeywordMatcher turns free text into a clean keyword list and scores how
well a constraint's target keywords are covered by an interaction's
keywords. Per target keyword the best of the following wins:

    exact (case-insensitive)   1.0
    synonym-table membership   0.9
    fuzzy (edit distance)      0.7
    nothing                    0.0

The stop-word and synonym tables are immutable and shared. The defaults
are process-wide; hosts can build their own via ``KeywordTables.build``
(or ``KeywordConfig.to_tables``) and pass them in.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

EXACT_MATCH_SCORE = 1.0
SYNONYM_MATCH_SCORE = 0.9
FUZZY_MATCH_SCORE = 0.7
MIN_FUZZY_LENGTH = 3
DEFAULT_FUZZY_THRESHOLD = 0.7

# All-caps acronyms (API, TDD) survive as-is, everything else is lowercased.
_TOKEN_PATTERN = re.compile(r"\b[A-Z]{2,}\b|\b\w+\b")
_ACRONYM_PATTERN = re.compile(r"^[A-Z]{2,}$")

DEFAULT_STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "were", "will", "with", "i", "need", "want", "would",
    "could", "should", "can", "may", "might", "must", "shall", "do",
    "does", "did", "have", "had", "this", "these", "those", "they",
    "them", "their", "there", "then", "than", "but", "or", "so", "if",
})

_TEST_GROUP = ("test", "testing", "unittest", "unit-test", "spec", "specification")
_TDD_GROUP = ("tdd", "test-driven", "test-driven-development", "testing")
_LAYERED_GROUP = ("hexagonal", "ports-adapters", "clean-architecture", "layered")
_DDD_GROUP = ("domain-driven", "ddd", "clean-architecture", "layered")
_BUILD_GROUP = ("implement", "implementation", "create", "build", "develop")
_REFACTOR_GROUP = ("refactor", "refactoring", "restructure", "reorganize", "cleanup")

DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    "test": _TEST_GROUP,
    "testing": _TEST_GROUP,
    "unittest": _TEST_GROUP,
    "unit-test": _TEST_GROUP,
    "tdd": _TDD_GROUP,
    "test-driven": _TDD_GROUP,
    "hexagonal": _LAYERED_GROUP,
    "ports-adapters": _LAYERED_GROUP,
    "clean-architecture": _LAYERED_GROUP + ("domain-driven",),
    "domain-driven": _DDD_GROUP,
    "implement": _BUILD_GROUP,
    "implementation": _BUILD_GROUP,
    "refactor": _REFACTOR_GROUP,
    "refactoring": _REFACTOR_GROUP,
}


@dataclass(frozen=True)
class KeywordTables:
    """Immutable stop-word set and synonym map (word -> synonym set)."""

    stop_words: frozenset[str]
    synonyms: Mapping[str, frozenset[str]]

    @classmethod
    def build(
        cls,
        stop_words: Iterable[str],
        synonyms: Mapping[str, Iterable[str]],
    ) -> KeywordTables:
        """Normalize to lowercase and freeze."""
        frozen = {
            key.strip().lower(): frozenset(v.strip().lower() for v in values if v.strip())
            for key, values in synonyms.items()
            if key.strip()
        }
        return cls(
            stop_words=frozenset(w.strip().lower() for w in stop_words if w.strip()),
            synonyms=MappingProxyType(frozen),
        )

    def synonyms_for(self, word: str) -> frozenset[str]:
        return self.synonyms.get(word.lower(), frozenset())


DEFAULT_TABLES = KeywordTables.build(DEFAULT_STOP_WORDS, DEFAULT_SYNONYMS)


def levenshtein_distance(source: str, target: str) -> int:
    """Classic dynamic-programming edit distance, two rows at a time."""
    if source == target:
        return 0
    if not source:
        return len(target)
    if not target:
        return len(source)

    previous = list(range(len(target) + 1))
    for i, s_char in enumerate(source, start=1):
        current = [i] + [0] * len(target)
        for j, t_char in enumerate(target, start=1):
            cost = 0 if s_char == t_char else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[-1]


def similarity(source: str, target: str) -> float:
    """Normalized similarity: 1 - distance / longer length."""
    longest = max(len(source), len(target))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(source, target) / longest


class KeywordMatcher:
    """Extracts keywords from text and scores keyword-set overlap.

    Stateless apart from its (immutable) tables, so one instance can be
    shared freely across sessions.
    """

    def __init__(
        self,
        tables: KeywordTables | None = None,
        *,
        enable_fuzzy: bool = True,
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> None:
        self._tables = tables or DEFAULT_TABLES
        self._enable_fuzzy = enable_fuzzy
        self._fuzzy_threshold = fuzzy_threshold

    @property
    def tables(self) -> KeywordTables:
        return self._tables

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract_keywords(self, text: str | None) -> list[str]:
        """Tokenize *text* into unique, ordered, stop-word-free keywords."""
        if not text or not text.strip():
            return []

        seen: set[str] = set()
        keywords: list[str] = []
        for match in _TOKEN_PATTERN.finditer(text):
            token = match.group(0)
            if not _ACRONYM_PATTERN.match(token):
                token = token.lower()
            if token.lower() in self._tables.stop_words or token in seen:
                continue
            seen.add(token)
            keywords.append(token)
        return keywords

    def expand_synonyms(self, keywords: Iterable[str] | None) -> set[str]:
        """Return *keywords* (lowercased) plus every configured synonym."""
        expanded: set[str] = set()
        for keyword in keywords or ():
            if not keyword:
                continue
            lowered = keyword.lower()
            expanded.add(lowered)
            expanded.update(self._tables.synonyms_for(lowered))
        return expanded

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def are_synonyms(self, first: str, second: str) -> bool:
        a, b = first.lower(), second.lower()
        return b in self._tables.synonyms_for(a) or a in self._tables.synonyms_for(b)

    def is_fuzzy_match(self, first: str, second: str) -> bool:
        if not self._enable_fuzzy:
            return False
        if len(first) < MIN_FUZZY_LENGTH or len(second) < MIN_FUZZY_LENGTH:
            return False
        return similarity(first.lower(), second.lower()) >= self._fuzzy_threshold

    def calculate_match_confidence(
        self,
        target_keywords: Iterable[str] | None,
        context_keywords: Iterable[str] | None,
    ) -> float:
        """Average best-match score over the target keywords that matched.

        Returns 0.0 when either side is empty or nothing matches.
        """
        targets = [t.lower() for t in (target_keywords or ()) if t and t.strip()]
        context = {c.lower() for c in (context_keywords or ()) if c and c.strip()}
        if not targets or not context:
            return 0.0

        expanded = self.expand_synonyms(context)
        scores = [self._best_match(target, context, expanded) for target in targets]
        matched = [s for s in scores if s > 0.0]
        if not matched:
            return 0.0
        return min(sum(matched) / len(matched), 1.0)

    def _best_match(self, target: str, context: set[str], expanded: set[str]) -> float:
        if target in context:
            return EXACT_MATCH_SCORE
        if target in expanded or any(self.are_synonyms(target, c) for c in context):
            return SYNONYM_MATCH_SCORE
        if any(self.is_fuzzy_match(target, candidate) for candidate in sorted(expanded)):
            return FUZZY_MATCH_SCORE
        return 0.0

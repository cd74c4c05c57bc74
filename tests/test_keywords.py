"""Tests for KeywordMatcher, KeywordTables and the edit-distance helpers.

Covers:
- Keyword extraction: stop words, acronyms, ordering, blank input
- Match confidence: exact, synonym, fuzzy, partial and empty inputs
- Custom tables built from KeywordConfig
- Property tests for confidence bounds and distance symmetry
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tether.matching.keywords import (
    DEFAULT_TABLES,
    EXACT_MATCH_SCORE,
    FUZZY_MATCH_SCORE,
    SYNONYM_MATCH_SCORE,
    KeywordMatcher,
    KeywordTables,
    levenshtein_distance,
    similarity,
)
from tether.models.config import KeywordConfig

from tests.strategies import keyword_lists, words


@pytest.fixture
def matcher() -> KeywordMatcher:
    return KeywordMatcher()


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class TestExtractKeywords:
    """KeywordMatcher.extract_keywords."""

    def test_drops_stop_words_and_keeps_order(self, matcher):
        keywords = matcher.extract_keywords("I need to write unit tests for the parser")
        assert keywords == ["write", "unit", "tests", "parser"]

    def test_acronyms_keep_their_case(self, matcher):
        assert matcher.extract_keywords("Design the REST API") == ["design", "REST", "API"]

    def test_duplicates_are_removed(self, matcher):
        assert matcher.extract_keywords("refactor, then refactor again") == ["refactor", "again"]

    @pytest.mark.parametrize("text", [None, "", "   ", "the and of"])
    def test_blank_or_stop_word_only_input(self, matcher, text):
        assert matcher.extract_keywords(text) == []

    def test_custom_stop_words(self):
        tables = KeywordTables.build(stop_words=["foo"], synonyms={})
        assert KeywordMatcher(tables).extract_keywords("foo bar the") == ["bar", "the"]


# ---------------------------------------------------------------------------
# Synonyms
# ---------------------------------------------------------------------------


class TestSynonyms:
    """Synonym expansion and membership."""

    def test_expand_includes_original_and_group(self, matcher):
        expanded = matcher.expand_synonyms(["TDD"])
        assert "tdd" in expanded
        assert "test-driven" in expanded

    def test_expand_unknown_word(self, matcher):
        assert matcher.expand_synonyms(["banana"]) == {"banana"}

    def test_expand_empty(self, matcher):
        assert matcher.expand_synonyms(None) == set()

    def test_are_synonyms_is_symmetric(self, matcher):
        assert matcher.are_synonyms("test", "spec")
        assert matcher.are_synonyms("spec", "test")

    def test_unrelated_words_are_not_synonyms(self, matcher):
        assert not matcher.are_synonyms("test", "deploy")

    def test_tables_are_immutable(self):
        with pytest.raises(TypeError):
            DEFAULT_TABLES.synonyms["new"] = frozenset({"x"})

    def test_keyword_config_overrides_synonyms(self):
        tables = KeywordConfig(synonyms={"DB": ["Database"]}).to_tables()
        matcher = KeywordMatcher(tables)
        assert matcher.are_synonyms("db", "database")
        assert not matcher.are_synonyms("test", "spec")

    def test_default_keyword_config_uses_shared_tables(self):
        assert KeywordConfig().to_tables() is DEFAULT_TABLES


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------


class TestMatchConfidence:
    """KeywordMatcher.calculate_match_confidence."""

    def test_exact_match(self, matcher):
        assert matcher.calculate_match_confidence(["test"], ["test"]) == EXACT_MATCH_SCORE

    def test_exact_match_ignores_case(self, matcher):
        assert matcher.calculate_match_confidence(["Test"], ["TEST"]) == EXACT_MATCH_SCORE

    def test_synonym_match(self, matcher):
        assert matcher.calculate_match_confidence(["test"], ["testing"]) == SYNONYM_MATCH_SCORE

    def test_synonym_match_across_groups(self, matcher):
        assert matcher.calculate_match_confidence(["tdd"], ["test-driven"]) == SYNONYM_MATCH_SCORE

    def test_fuzzy_match(self, matcher):
        assert matcher.calculate_match_confidence(["refactor"], ["refactr"]) == FUZZY_MATCH_SCORE

    def test_fuzzy_disabled(self):
        matcher = KeywordMatcher(enable_fuzzy=False)
        assert matcher.calculate_match_confidence(["refactor"], ["refactr"]) == 0.0

    def test_fuzzy_threshold_is_configurable(self):
        strict = KeywordMatcher(fuzzy_threshold=0.95)
        assert strict.calculate_match_confidence(["refactor"], ["refactr"]) == 0.0

    def test_averages_over_matched_targets_only(self, matcher):
        # "deploy" matches nothing and does not dilute the score
        assert matcher.calculate_match_confidence(["test", "deploy"], ["test"]) == 1.0

    def test_mixed_match_kinds_are_averaged(self, matcher):
        score = matcher.calculate_match_confidence(["test", "refactor"], ["test", "refactr"])
        assert score == pytest.approx((EXACT_MATCH_SCORE + FUZZY_MATCH_SCORE) / 2)

    def test_no_match(self, matcher):
        assert matcher.calculate_match_confidence(["deploy"], ["banana"]) == 0.0

    @pytest.mark.parametrize("targets,context", [([], ["test"]), (["test"], []), (None, None)])
    def test_empty_inputs(self, matcher, targets, context):
        assert matcher.calculate_match_confidence(targets, context) == 0.0

    def test_short_words_never_fuzzy_match(self, matcher):
        assert not matcher.is_fuzzy_match("ab", "ac")


# ---------------------------------------------------------------------------
# Edit distance
# ---------------------------------------------------------------------------


class TestEditDistance:
    def test_known_distance(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_empty_strings(self):
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3
        assert similarity("", "") == 1.0

    def test_similarity_of_one_edit(self):
        assert similarity("tests", "test") == pytest.approx(0.8)


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestKeywordProperties:
    @given(targets=keyword_lists, context=keyword_lists)
    def test_confidence_is_bounded(self, targets, context):
        score = KeywordMatcher().calculate_match_confidence(targets, context)
        assert 0.0 <= score <= 1.0

    @given(a=words, b=words)
    def test_distance_is_symmetric(self, a, b):
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)

    @given(a=words, b=words)
    def test_similarity_is_bounded(self, a, b):
        assert 0.0 <= similarity(a, b) <= 1.0

    @given(word=words)
    def test_word_matches_itself_exactly(self, word):
        assert KeywordMatcher().calculate_match_confidence([word], [word]) == 1.0

    @given(text=st.text(max_size=200))
    def test_extraction_never_yields_stop_words(self, text):
        for keyword in KeywordMatcher().extract_keywords(text):
            assert keyword.lower() not in DEFAULT_TABLES.stop_words

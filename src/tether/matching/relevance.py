"""Relevance scoring: how well a TriggerContext fits a TriggerConfiguration.

Three factors contribute, each weighted by RelevanceWeights:

- keyword: KeywordMatcher confidence of the configured keywords against
  the context keywords (partial, 0..1)
- file pattern: 1 if the file path matches any configured glob, else 0
- context pattern: 1 if the context type contains any configured
  pattern, else 0

Only factors the configuration actually defines take part, and the sum
is divided by the weight of those factors. A constraint that only lists
keywords can therefore reach 1.0.

Anti-patterns are a hard veto: any hit scores exactly 0.0.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from tether.matching.keywords import KeywordMatcher
from tether.models.config import RelevanceWeights
from tether.models.constraint import AtomicConstraint, CompositeConstraint, PhaseConstraint
from tether.models.trigger import ActivationReason

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tether.models.constraint import Constraint, TriggerConfiguration
    from tether.models.trigger import TriggerContext

# Composite relevance blends its own triggers with its components.
COMPOSITE_OWN_WEIGHT = 0.7
COMPOSITE_COMPONENT_WEIGHT = 0.3

_PRECISION = 6


# ---------------------------------------------------------------------------
# Factor predicates
# ---------------------------------------------------------------------------


def contains_any_keyword(context: TriggerContext, keywords: Iterable[str]) -> bool:
    """Case-insensitive: any of *keywords* occurs inside a context keyword.

    Substring semantics, so "fix" is found in "hotfix". Anti-pattern
    detection is built on the same check.
    """
    present = [k.lower() for k in context.keywords]
    wanted = [k.lower() for k in keywords or () if k]
    return any(target in keyword for target in wanted for keyword in present)


def matches_file_pattern(file_path: str, pattern: str) -> bool:
    """Case-insensitive glob match against the full path or its basename."""
    path = file_path.replace("\\", "/").lower()
    pattern = pattern.replace("\\", "/").lower()
    if fnmatch.fnmatchcase(path, pattern):
        return True
    basename = path.rsplit("/", 1)[-1]
    return fnmatch.fnmatchcase(basename, pattern)


def matches_any_file_pattern(context: TriggerContext, patterns: Iterable[str]) -> bool:
    if not context.file_path:
        return False
    return any(matches_file_pattern(context.file_path, p) for p in patterns or () if p)


def matches_any_context_pattern(context: TriggerContext, patterns: Iterable[str]) -> bool:
    """Substring match of each pattern against the context type."""
    context_type = context.context_type.lower()
    return any(p.lower() in context_type for p in patterns or () if p)


def has_any_anti_pattern(context: TriggerContext, anti_patterns: Iterable[str]) -> bool:
    """True if an anti-pattern occurs in a keyword or equals the context type."""
    anti_patterns = [a for a in anti_patterns or () if a]
    if contains_any_keyword(context, anti_patterns):
        return True
    context_type = context.context_type.lower()
    return any(anti.lower() == context_type for anti in anti_patterns)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RelevanceBreakdown:
    """Per-factor detail behind a relevance score."""

    score: float
    keyword_score: float = 0.0
    file_match: bool = False
    context_match: bool = False
    vetoed: bool = False

    @property
    def reason(self) -> ActivationReason:
        matched = []
        if self.keyword_score > 0.0:
            matched.append(ActivationReason.KEYWORD_MATCH)
        if self.file_match:
            matched.append(ActivationReason.FILE_PATTERN_MATCH)
        if self.context_match:
            matched.append(ActivationReason.CONTEXT_PATTERN_MATCH)
        if len(matched) > 1:
            return ActivationReason.COMBINED_FACTORS
        if matched:
            return matched[0]
        return ActivationReason.UNKNOWN


_VETOED = RelevanceBreakdown(score=0.0, vetoed=True)
_NO_MATCH = RelevanceBreakdown(score=0.0)


class RelevanceScorer:
    """Pure relevance function parameterized by matcher and weights."""

    def __init__(
        self,
        matcher: KeywordMatcher | None = None,
        weights: RelevanceWeights | None = None,
    ) -> None:
        self._matcher = matcher or KeywordMatcher()
        self._weights = weights or RelevanceWeights()

    def breakdown(self, context: TriggerContext, config: TriggerConfiguration) -> RelevanceBreakdown:
        if has_any_anti_pattern(context, config.anti_patterns):
            return _VETOED
        if not config.has_activation_criteria:
            return _NO_MATCH

        weighted = 0.0
        total_weight = 0.0
        keyword_score = 0.0
        file_match = False
        context_match = False

        if config.keywords:
            keyword_score = self._matcher.calculate_match_confidence(
                config.keywords, context.keywords
            )
            weighted += keyword_score * self._weights.keyword
            total_weight += self._weights.keyword
        if config.file_patterns:
            file_match = matches_any_file_pattern(context, config.file_patterns)
            weighted += self._weights.file_pattern if file_match else 0.0
            total_weight += self._weights.file_pattern
        if config.context_patterns:
            context_match = matches_any_context_pattern(context, config.context_patterns)
            weighted += self._weights.context_pattern if context_match else 0.0
            total_weight += self._weights.context_pattern

        score = weighted / total_weight if total_weight > 0 else 0.0
        return RelevanceBreakdown(
            score=_clamp(score),
            keyword_score=keyword_score,
            file_match=file_match,
            context_match=context_match,
        )

    def score(self, context: TriggerContext, config: TriggerConfiguration) -> float:
        return self.breakdown(context, config).score

    def score_constraint(self, context: TriggerContext, constraint: Constraint) -> RelevanceBreakdown:
        """Score any constraint shape. Phase constraints are never trigger-scored."""
        if isinstance(constraint, AtomicConstraint):
            return self.breakdown(context, constraint.triggers)
        if isinstance(constraint, CompositeConstraint):
            return self._score_composite(context, constraint)
        if isinstance(constraint, PhaseConstraint):
            return _NO_MATCH
        raise TypeError(f"Unsupported constraint type: {type(constraint).__name__}")

    def _score_composite(self, context: TriggerContext, composite: CompositeConstraint) -> RelevanceBreakdown:
        if has_any_anti_pattern(context, composite.triggers.anti_patterns):
            return _VETOED

        parts = [self.breakdown(context, c.triggers) for c in composite.components]
        component_mean = sum(p.score for p in parts) / len(parts)
        keyword_score = max(p.keyword_score for p in parts)
        file_match = any(p.file_match for p in parts)
        context_match = any(p.context_match for p in parts)

        if not composite.triggers.has_activation_criteria:
            score = component_mean
        else:
            own = self.breakdown(context, composite.triggers)
            if own.score == 0.0:
                return _NO_MATCH
            score = COMPOSITE_OWN_WEIGHT * own.score + COMPOSITE_COMPONENT_WEIGHT * component_mean
            keyword_score = max(keyword_score, own.keyword_score)
            file_match = file_match or own.file_match
            context_match = context_match or own.context_match

        return RelevanceBreakdown(
            score=_clamp(score),
            keyword_score=keyword_score,
            file_match=file_match,
            context_match=context_match,
        )


def _clamp(score: float) -> float:
    return round(min(max(score, 0.0), 1.0), _PRECISION)


@lru_cache(maxsize=1)
def default_scorer() -> RelevanceScorer:
    """Shared scorer with default tables and weights."""
    return RelevanceScorer()

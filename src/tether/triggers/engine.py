"""TriggerMatchingEngine -- score every known constraint against a context.

For each constraint in the resolver's snapshot the engine computes a
relevance score, applies registered confidence boosts, keeps the ones
that clear their threshold, ranks them by score (stable, so ties keep
declaration order) and caps the list at ``max_active_constraints``.

Failure isolation:
    - a constraint whose scoring raises is logged and skipped
    - a resolver that cannot produce its snapshot yields an empty result

Callers therefore always get either a clean ranked list or nothing.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from tether.matching.keywords import KeywordMatcher
from tether.matching.relevance import RelevanceScorer
from tether.models.config import MatchingConfig
from tether.models.constraint import AtomicConstraint, CompositeConstraint
from tether.models.trigger import ConstraintActivation

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tether.models.constraint import Constraint
    from tether.models.trigger import TriggerContext
    from tether.triggers.protocols import ConfidenceBoost, ConstraintResolver

logger = logging.getLogger(__name__)


class TriggerMatchingEngine:
    """Evaluates constraint triggers against a TriggerContext.

    Features:
    - Per-constraint thresholds, falling back to the configured default
    - Pluggable confidence boosts (see ``tether.triggers.builtin``)
    - Stable ranking and a hard cap on the number of activations
    - Fail-open behaviour: errors never surface as partial results
    """

    def __init__(
        self,
        resolver: ConstraintResolver | None = None,
        config: MatchingConfig | None = None,
        matcher: KeywordMatcher | None = None,
        boosts: Sequence[ConfidenceBoost] | None = None,
    ) -> None:
        self._resolver = resolver
        self._config = config or MatchingConfig()
        self._matcher = matcher or KeywordMatcher(
            enable_fuzzy=self._config.enable_fuzzy_matching,
            fuzzy_threshold=self._config.fuzzy_similarity_threshold,
        )
        self._scorer = RelevanceScorer(self._matcher, self._config.weights)
        self._boosts: list[ConfidenceBoost] = list(boosts or [])

    @property
    def config(self) -> MatchingConfig:
        return self._config

    @property
    def matcher(self) -> KeywordMatcher:
        return self._matcher

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def configure_resolver(self, resolver: ConstraintResolver) -> None:
        """Swap the constraint library used for subsequent evaluations."""
        self._resolver = resolver

    def register_boost(self, boost: ConfidenceBoost) -> None:
        self._boosts.append(boost)

    def unregister_boost(self, name: str) -> None:
        self._boosts = [b for b in self._boosts if b.name != name]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_constraints(self, context: TriggerContext) -> list[ConstraintActivation]:
        """Ranked, bounded activations for *context*.

        Returns:
            Activations sorted by descending confidence, at most
            ``max_active_constraints`` long. Empty on systemic failure.
        """
        if self._resolver is None:
            logger.debug("No constraint resolver configured; nothing to evaluate")
            return []

        started = time.perf_counter()
        try:
            constraints = list(self._resolver.list_constraints())
        except Exception as exc:
            logger.error(
                "Constraint resolver raised %s: %s",
                type(exc).__name__,
                exc,
            )
            return []

        activations: list[ConstraintActivation] = []
        for constraint in constraints:
            try:
                activation = self._evaluate_one(constraint, context)
            except Exception as exc:
                logger.error(
                    "Evaluating constraint '%s' raised %s: %s",
                    getattr(constraint, "id", "?"),
                    type(exc).__name__,
                    exc,
                )
                continue
            if activation is not None:
                activations.append(activation)

        activations.sort(key=lambda a: a.confidence_score, reverse=True)
        result = activations[: self._config.max_active_constraints]

        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms > self._config.max_evaluation_time_ms:
            logger.warning(
                "Constraint evaluation took %.1fms (limit %dms) for %d constraints",
                elapsed_ms,
                self._config.max_evaluation_time_ms,
                len(constraints),
            )
        logger.debug(
            "Evaluated %d constraints: %d activated, %d returned",
            len(constraints),
            len(activations),
            len(result),
        )
        return result

    def get_relevant_constraints(
        self,
        context: TriggerContext,
        min_confidence: float = 0.7,
    ) -> list[ConstraintActivation]:
        """Ranked activations with a caller-supplied confidence floor."""
        return [
            a for a in self.evaluate_constraints(context)
            if a.confidence_score >= min_confidence
        ]

    def _evaluate_one(
        self, constraint: Constraint, context: TriggerContext
    ) -> ConstraintActivation | None:
        if not isinstance(constraint, (AtomicConstraint, CompositeConstraint)):
            return None
        if isinstance(constraint, AtomicConstraint) and not constraint.triggers.has_activation_criteria:
            return None

        breakdown = self._scorer.score_constraint(context, constraint)
        score = breakdown.score
        if score <= 0.0:
            return None

        for boost in self._boosts:
            if boost.applies_to(constraint, context):
                boosted = min(boost.apply(score), 1.0)
                logger.debug(
                    "Boost '%s' adjusted '%s': %.3f -> %.3f",
                    boost.name,
                    constraint.id,
                    score,
                    boosted,
                )
                score = boosted

        threshold = constraint.triggers.effective_threshold(
            self._config.default_confidence_threshold
        )
        if score < threshold:
            return None

        return ConstraintActivation(
            constraint_id=constraint.id,
            confidence_score=score,
            reason=breakdown.reason,
            trigger_context=context,
            constraint=constraint,
        )

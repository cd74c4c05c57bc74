"""Domain models for trigger matching.

TriggerContext is the normalized snapshot of one interaction;
ConstraintActivation is the immutable result of a constraint matching
that context.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING

from tether.exceptions import ConstraintValidationError
from tether.models.constraint import ConstraintId

if TYPE_CHECKING:
    from tether.models.constraint import Constraint, TriggerConfiguration

UNKNOWN_CONTEXT = "unknown"


class ActivationReason(str, enum.Enum):
    """Which trigger criteria produced an activation."""

    KEYWORD_MATCH = "keyword_match"
    FILE_PATTERN_MATCH = "file_pattern_match"
    CONTEXT_PATTERN_MATCH = "context_pattern_match"
    COMBINED_FACTORS = "combined_factors"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TriggerContext:
    """Normalized snapshot of a single interaction.

    Keywords keep their order and may repeat. Blank keywords are
    dropped, a blank context type becomes ``"unknown"``.
    """

    keywords: tuple[str, ...] = ()
    file_path: str | None = None
    context_type: str = UNKNOWN_CONTEXT
    session_id: str | None = None
    metadata: dict = field(default_factory=dict, compare=False, hash=False)
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self) -> None:
        keywords = tuple(
            k.strip() for k in (self.keywords or ()) if isinstance(k, str) and k.strip()
        )
        object.__setattr__(self, "keywords", keywords)
        if self.file_path is not None and not self.file_path.strip():
            object.__setattr__(self, "file_path", None)
        if not self.context_type or not self.context_type.strip():
            object.__setattr__(self, "context_type", UNKNOWN_CONTEXT)
        else:
            object.__setattr__(self, "context_type", self.context_type.strip())

    # ------------------------------------------------------------------
    # Relevance
    # ------------------------------------------------------------------

    def relevance_score(self, config: TriggerConfiguration) -> float:
        """Score this context against *config* with the default weights.

        Pure and deterministic. Returns 0.0 whenever an anti-pattern of
        *config* is present.
        """
        from tether.matching.relevance import default_scorer

        return default_scorer().score(self, config)

    def contains_any_keyword(self, keywords) -> bool:
        from tether.matching.relevance import contains_any_keyword

        return contains_any_keyword(self, keywords)

    def matches_any_file_pattern(self, patterns) -> bool:
        from tether.matching.relevance import matches_any_file_pattern

        return matches_any_file_pattern(self, patterns)

    def matches_any_context_pattern(self, patterns) -> bool:
        from tether.matching.relevance import matches_any_context_pattern

        return matches_any_context_pattern(self, patterns)

    def has_any_anti_pattern(self, anti_patterns) -> bool:
        from tether.matching.relevance import has_any_anti_pattern

        return has_any_anti_pattern(self, anti_patterns)

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def with_keywords(self, keywords) -> TriggerContext:
        return replace(self, keywords=tuple(keywords))

    def with_context_type(self, context_type: str) -> TriggerContext:
        return replace(self, context_type=context_type)


@dataclass(frozen=True)
class ConstraintActivation:
    """A constraint that matched a context, with its confidence.

    Immutable: a changed score produces a new activation via
    ``with_confidence``.
    """

    constraint_id: ConstraintId
    confidence_score: float
    reason: ActivationReason
    trigger_context: TriggerContext
    timestamp: datetime = field(default_factory=datetime.now)
    constraint: Constraint | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraint_id", ConstraintId(self.constraint_id))
        object.__setattr__(self, "reason", ActivationReason(self.reason))
        if not 0.0 <= self.confidence_score <= 1.0:
            raise ConstraintValidationError(
                f"Confidence score must be between 0.0 and 1.0, got {self.confidence_score}"
            )

    @property
    def context_type(self) -> str:
        return self.trigger_context.context_type

    @property
    def reminders(self) -> tuple[str, ...]:
        """Reminder texts of the activated constraint, if it was attached."""
        if self.constraint is None:
            return ()
        return self.constraint.reminders

    def with_confidence(self, confidence_score: float) -> ConstraintActivation:
        return replace(self, confidence_score=confidence_score)

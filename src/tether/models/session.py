"""SessionContext -- per-session activation history and derived signals.

One SessionContext exists per session id. It is the only mutable entity
in the activation pipeline and must only be touched by the single
logical worker that owns the session. History is append-only; ``reset``
clears it but keeps the session id.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from tether.models.trigger import UNKNOWN_CONTEXT

if TYPE_CHECKING:
    from tether.models.trigger import ConstraintActivation

# A previously activated constraint is boosted by this multiplier.
FAMILIARITY_BOOST = 1.2
NEUTRAL_ADJUSTMENT = 1.0

TEST_DRIVEN_MIN_ACTIVATIONS = 3
MIXED_MIN_CONTEXT_TYPES = 3
DOMINANCE_RATIO = 0.4

TEST_DRIVEN = "test-driven"
MIXED_DEVELOPMENT = "mixed-development"
MIXED = "mixed"

_PATTERN_LABELS = {
    "testing": TEST_DRIVEN,
    "refactoring": "refactoring-session",
    "architecture": "architecture-focused",
    UNKNOWN_CONTEXT: "exploratory",
}


@dataclass(frozen=True)
class SessionAnalytics:
    """Read-only summary of a session."""

    session_id: str
    started_at: datetime
    duration: timedelta
    total_tool_calls: int
    total_activations: int
    dominant_context_type: str
    activity_pattern: str
    most_activated_constraint: str
    context_type_counts: dict = field(default_factory=dict)


class SessionContext:
    """Aggregate root for one session's activation history."""

    def __init__(self, session_id: str) -> None:
        if not session_id or not session_id.strip():
            raise ValueError("Session id cannot be empty")
        self._session_id = session_id.strip()
        self._history: list[ConstraintActivation] = []
        self._tool_calls = 0
        self._started_at = datetime.now()

    def __repr__(self) -> str:
        return (
            f"SessionContext(session_id={self._session_id!r}, "
            f"activations={len(self._history)}, tool_calls={self._tool_calls})"
        )

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def activation_history(self) -> tuple[ConstraintActivation, ...]:
        return tuple(self._history)

    @property
    def total_tool_calls(self) -> int:
        return self._tool_calls

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def record_activation(self, activation: ConstraintActivation) -> None:
        self._history.append(activation)

    def record_tool_call(self) -> None:
        self._tool_calls += 1

    def reset(self) -> None:
        """Forget history and counters; identity is preserved."""
        self._history.clear()
        self._tool_calls = 0
        self._started_at = datetime.now()

    # ------------------------------------------------------------------
    # Derived signals
    # ------------------------------------------------------------------

    def context_type_counts(self) -> Counter[str]:
        return Counter(a.context_type for a in self._history)

    @property
    def dominant_context_type(self) -> str:
        """Plurality context type if it holds >= 40% of history, else "mixed"."""
        if not self._history:
            return UNKNOWN_CONTEXT
        context_type, count = self.context_type_counts().most_common(1)[0]
        if count / len(self._history) >= DOMINANCE_RATIO:
            return context_type
        return MIXED

    @property
    def detected_activity_pattern(self) -> str:
        if not self._history:
            return UNKNOWN_CONTEXT
        counts = self.context_type_counts()
        if counts.get("testing", 0) >= TEST_DRIVEN_MIN_ACTIVATIONS:
            return TEST_DRIVEN

        plurality = counts.most_common(1)[0][0]
        if len(counts) >= MIXED_MIN_CONTEXT_TYPES and self.dominant_context_type == MIXED:
            return MIXED_DEVELOPMENT
        return _PATTERN_LABELS.get(plurality, f"{plurality}-focused")

    def has_activated(self, constraint_id: str) -> bool:
        return any(a.constraint_id == constraint_id for a in self._history)

    def activation_count(self, constraint_id: str) -> int:
        return sum(1 for a in self._history if a.constraint_id == constraint_id)

    def session_relevance_adjustment(self, constraint_id: str) -> float:
        """Multiplier for *constraint_id*: fixed boost once it has activated."""
        if self.has_activated(constraint_id):
            return FAMILIARITY_BOOST
        return NEUTRAL_ADJUSTMENT

    def analytics(self) -> SessionAnalytics:
        counts = Counter(a.constraint_id for a in self._history)
        most_activated = counts.most_common(1)[0][0] if counts else "none"
        return SessionAnalytics(
            session_id=self._session_id,
            started_at=self._started_at,
            duration=datetime.now() - self._started_at,
            total_tool_calls=self._tool_calls,
            total_activations=len(self._history),
            dominant_context_type=self.dominant_context_type,
            activity_pattern=self.detected_activity_pattern,
            most_activated_constraint=str(most_activated),
            context_type_counts=dict(self.context_type_counts()),
        )

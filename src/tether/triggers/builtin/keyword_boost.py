"""KeywordBoost -- raise confidence when indicator words accompany a constraint.

The classic use is nudging test-first reminders when the agent is about
to implement a feature::

    KeywordBoost("tdd.", indicators=("implement", "feature", "test"))

multiplies the score of every ``tdd.*`` constraint by 1.1 whenever one
of the indicators appears among the context keywords.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tether.exceptions import ConfigurationError
from tether.triggers.protocols import ConfidenceBoost

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tether.models.constraint import Constraint
    from tether.models.trigger import TriggerContext


class KeywordBoost(ConfidenceBoost):
    """Multiply the score of matching constraints by *factor*.

    Constructor Args:
        constraint_prefix: Constraint ids starting with this prefix are
            eligible. An id equal to the prefix also matches.
        indicators: Context keywords (case-insensitive) that enable the
            boost. Any one of them is enough.
        factor: Multiplier, must be >= 1.0 (default 1.1).
    """

    def __init__(
        self,
        constraint_prefix: str,
        indicators: Iterable[str],
        factor: float = 1.1,
    ) -> None:
        if not constraint_prefix or not constraint_prefix.strip():
            raise ConfigurationError("KeywordBoost needs a constraint prefix")
        if factor < 1.0:
            raise ConfigurationError(f"Boost factor must be >= 1.0, got {factor}")
        self._prefix = constraint_prefix.strip()
        self._indicators = frozenset(i.lower() for i in indicators if i)
        self._factor = factor

    @property
    def name(self) -> str:
        return f"keyword-boost:{self._prefix}"

    def applies_to(self, constraint: Constraint, context: TriggerContext) -> bool:
        if not constraint.id.startswith(self._prefix):
            return False
        return any(k.lower() in self._indicators for k in context.keywords)

    def apply(self, score: float) -> float:
        return min(score * self._factor, 1.0)

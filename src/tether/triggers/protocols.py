"""Pluggable collaborators of the trigger matching engine.

ConstraintResolver supplies the constraint library snapshot.
ConfidenceBoost adjusts a computed score for specific constraints.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from tether.exceptions import ConstraintNotFoundError
from tether.models.constraint import LookupResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tether.models.constraint import Constraint
    from tether.models.trigger import TriggerContext


class ConstraintResolver(ABC):
    """Read-only view of the constraint library.

    ``list_constraints`` is called once per evaluation and its result is
    treated as an immutable snapshot, in declaration order.

    Example::

        class StaticResolver(ConstraintResolver):
            def __init__(self, constraints):
                self._by_id = {c.id: c for c in constraints}

            def resolve(self, constraint_id):
                try:
                    return self._by_id[constraint_id]
                except KeyError:
                    raise ConstraintNotFoundError(constraint_id) from None

            def list_constraints(self):
                return list(self._by_id.values())
    """

    @abstractmethod
    def resolve(self, constraint_id: str) -> Constraint:
        """Return the constraint with *constraint_id*.

        Raises:
            ConstraintNotFoundError: If no such constraint exists.
        """
        ...

    @abstractmethod
    def list_constraints(self) -> Sequence[Constraint]:
        """Return every known constraint in declaration order."""
        ...

    def find(self, constraint_id: str) -> LookupResult:
        """Non-raising lookup for callers where a miss is an expected outcome."""
        try:
            return LookupResult(constraint_id=constraint_id, constraint=self.resolve(constraint_id))
        except ConstraintNotFoundError as exc:
            return LookupResult(constraint_id=constraint_id, reason=str(exc))


class ConfidenceBoost(ABC):
    """Adjusts a constraint's score when extra signals are present.

    Boosts run after relevance scoring and before threshold filtering.
    The engine clamps the boosted score to 1.0.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this boost (used in logs)."""
        ...

    @abstractmethod
    def applies_to(self, constraint: Constraint, context: TriggerContext) -> bool:
        """Whether this boost should adjust *constraint* for *context*."""
        ...

    @abstractmethod
    def apply(self, score: float) -> float:
        """Return the adjusted score."""
        ...

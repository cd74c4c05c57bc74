"""ConstraintSelector -- phase-based constraint selection.

The simpler activation path, used when constraints are tied to fixed
workflow phases instead of triggers. No scoring is involved: filter by
phase, rank by static priority, keep the top K.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tether.models.constraint import PhaseConstraint

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tether.models.constraint import Constraint


class ConstraintSelector:
    """Pure phase filter and priority ranker."""

    def select_constraints(
        self,
        constraints: Iterable[Constraint],
        phase: str,
        top_k: int,
    ) -> list[PhaseConstraint]:
        """Phase constraints applying to *phase*, highest priority first.

        Ties keep their input order. Constraints without phases never
        match.

        Raises:
            ValueError: If *top_k* is negative.
        """
        if top_k < 0:
            raise ValueError(f"top_k must be non-negative, got {top_k}")

        applicable = [
            c for c in constraints
            if isinstance(c, PhaseConstraint) and c.applies_to(phase)
        ]
        applicable.sort(key=lambda c: c.priority, reverse=True)
        return applicable[:top_k]

"""In-memory constraint library."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tether.exceptions import ConstraintNotFoundError, DuplicateConstraintError
from tether.triggers.protocols import ConstraintResolver

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tether.models.constraint import Constraint


class LibraryResolver(ConstraintResolver):
    """Resolver over a fixed list of constraints, kept in declaration order."""

    def __init__(self, constraints: Iterable[Constraint] | None = None) -> None:
        self._constraints: dict[str, Constraint] = {}
        for constraint in constraints or ():
            self.register(constraint)

    def register(self, constraint: Constraint) -> None:
        """Add a constraint.

        Raises:
            DuplicateConstraintError: If the id is already registered.
        """
        if constraint.id in self._constraints:
            raise DuplicateConstraintError(constraint.id)
        self._constraints[constraint.id] = constraint

    def resolve(self, constraint_id: str) -> Constraint:
        try:
            return self._constraints[constraint_id]
        except KeyError:
            raise ConstraintNotFoundError(constraint_id) from None

    def list_constraints(self) -> list[Constraint]:
        return list(self._constraints.values())

    def __len__(self) -> int:
        return len(self._constraints)

    def __contains__(self, constraint_id: object) -> bool:
        return constraint_id in self._constraints

"""Hierarchical composition -- levels first, priority within a level.

Constraints carry an integer hierarchy level whose meaning is
user-defined (e.g. 0 = architecture, 1 = design, 2 = implementation).
Ordering is strict: ascending level always wins, priority (descending)
only breaks ties inside a level, and exact ties keep input order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tether.composition.protocols import CompositionStrategy
from tether.exceptions import ConstraintValidationError, UnknownHierarchyLevelError
from tether.models.composition import (
    CompositionResult,
    HierarchicalCompositionState,
    HierarchicalConstraintInfo,
    StepActivation,
)
from tether.models.constraint import CompositionType

if TYPE_CHECKING:
    from tether.models.composition import CompositionStrategyContext


@dataclass(frozen=True)
class HierarchyDefinition:
    """User-defined levels: level number -> description."""

    levels: Mapping[int, str]
    name: str = ""

    def __post_init__(self) -> None:
        if not self.levels:
            raise ConstraintValidationError("A hierarchy needs at least one level")
        if any(level < 0 for level in self.levels):
            raise ConstraintValidationError("Hierarchy levels must be non-negative")
        object.__setattr__(self, "levels", dict(sorted(self.levels.items())))

    @property
    def ordered_levels(self) -> list[int]:
        return list(self.levels)

    def has_level(self, level: int) -> bool:
        return level in self.levels

    def describe(self, level: int) -> str:
        return self.levels.get(level, f"Level {level}")


@dataclass(frozen=True)
class HierarchicalConfiguration:
    """A hierarchy plus the constraints placed in it."""

    hierarchy: HierarchyDefinition
    constraints: tuple[HierarchicalConstraintInfo, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraints", tuple(self.constraints))


def order_by_hierarchy(
    constraints: Iterable[HierarchicalConstraintInfo],
    hierarchy: HierarchyDefinition | None = None,
) -> list[HierarchicalConstraintInfo]:
    """Ascending level, then descending priority. Stable on exact ties.

    Raises:
        UnknownHierarchyLevelError: If a constraint uses a level the
            hierarchy does not define.
    """
    items = list(constraints)
    if hierarchy is not None:
        for info in items:
            if not hierarchy.has_level(info.hierarchy_level):
                raise UnknownHierarchyLevelError(info.constraint_id, info.hierarchy_level)
    return sorted(items, key=lambda info: (info.hierarchy_level, -info.priority))


class HierarchicalCompositionStrategy(CompositionStrategy):
    """Surfaces constraints level by level."""

    @property
    def composition_type(self) -> CompositionType:
        return CompositionType.HIERARCHICAL

    def order_constraints(
        self,
        constraints: Iterable[HierarchicalConstraintInfo],
        hierarchy: HierarchyDefinition,
    ) -> list[HierarchicalConstraintInfo]:
        return order_by_hierarchy(constraints, hierarchy)

    def get_constraints_for_level(
        self,
        constraints: Iterable[HierarchicalConstraintInfo],
        level: int,
        hierarchy: HierarchyDefinition,
    ) -> list[HierarchicalConstraintInfo]:
        return [c for c in order_by_hierarchy(constraints, hierarchy) if c.hierarchy_level == level]

    def get_next_hierarchy_level(
        self,
        completed_levels: Iterable[int],
        hierarchy: HierarchyDefinition,
    ) -> int | None:
        """Lowest level not yet completed, or None when all are done."""
        done = set(completed_levels)
        for level in hierarchy.ordered_levels:
            if level not in done:
                return level
        return None

    def completed_levels(
        self,
        state: HierarchicalCompositionState,
        config: HierarchicalConfiguration,
    ) -> set[int]:
        """Levels whose every constraint is completed."""
        by_level: dict[int, list[str]] = {}
        for info in config.constraints:
            by_level.setdefault(info.hierarchy_level, []).append(info.constraint_id)
        return {
            level
            for level in config.hierarchy.ordered_levels
            if all(cid in state.completed for cid in by_level.get(level, []))
        }

    def get_next_constraint(
        self,
        state: HierarchicalCompositionState,
        config: HierarchicalConfiguration,
        context: CompositionStrategyContext | None = None,
    ) -> CompositionResult:
        ordered = order_by_hierarchy(config.constraints, config.hierarchy)
        for info in ordered:
            if info.constraint_id in state.completed:
                continue
            level = info.hierarchy_level
            return CompositionResult.success(
                StepActivation(
                    constraint_id=info.constraint_id,
                    level=level,
                    guidance=f"Level {level}: {config.hierarchy.describe(level)}",
                )
            )
        return CompositionResult.success(
            StepActivation.complete(
                f"Hierarchy complete: all {len(ordered)} constraints satisfied"
            )
        )

    def advance_state(
        self,
        state: HierarchicalCompositionState,
        completed: StepActivation,
        config: HierarchicalConfiguration,
        context: CompositionStrategyContext | None = None,
    ) -> HierarchicalCompositionState:
        if not completed.is_activation:
            return state
        return state.with_completed(completed.constraint_id)

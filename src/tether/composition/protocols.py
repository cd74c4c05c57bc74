"""CompositionStrategy ABC -- common contract of the four strategies.

A strategy is a pure state machine over an explicit state record:

- ``get_next_constraint(state, config, context)`` decides what to
  surface next and returns a CompositionResult.
- ``advance_state(state, completed, config, context)`` folds a completed
  StepActivation into a new state instance.

``config`` is the strategy's user-defined definition (sequence,
hierarchy, layer policy, progression). Strategies hold no mutable data
of their own and are safe to share across sessions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tether.models.composition import (
        CompositionResult,
        CompositionStrategyContext,
        StepActivation,
    )
    from tether.models.constraint import CompositionType


class CompositionStrategy(ABC):
    """Abstract base class for composition strategies."""

    @property
    @abstractmethod
    def composition_type(self) -> CompositionType:
        """Which CompositionType this strategy implements."""
        ...

    @abstractmethod
    def get_next_constraint(
        self,
        state: Any,
        config: Any,
        context: CompositionStrategyContext | None = None,
    ) -> CompositionResult:
        """Decide the next step to surface. Must not mutate *state*."""
        ...

    @abstractmethod
    def advance_state(
        self,
        state: Any,
        completed: StepActivation,
        config: Any,
        context: CompositionStrategyContext | None = None,
    ) -> Any:
        """Return a new state with *completed* folded in."""
        ...

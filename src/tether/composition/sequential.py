"""Sequential composition -- one stage at a time, in a fixed order.

A SequenceDefinition lists the step constraint ids in order, plus
optional rules mapping workflow-state and evaluation-status names to
steps. Without explicit rules a workflow state maps to the step whose
last id segment carries the same name (state "red" -> ``tdd.red``).

The active step is whichever step the context maps to. Mapping to a step
whose predecessors are not complete is an invalid transition and is
reported as a failure result. Without a mapping, the first incomplete
step is active. Only one step is ever active.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tether.composition.protocols import CompositionStrategy
from tether.exceptions import CompositionError, ConstraintValidationError
from tether.models.composition import (
    ActivationErrorCode,
    CompositionResult,
    SequenceProgress,
    SequentialCompositionState,
    StepActivation,
)
from tether.models.constraint import CompositionType, ConstraintId

if TYPE_CHECKING:
    from tether.models.composition import CompositionStrategyContext
    from tether.models.constraint import CompositeConstraint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequenceDefinition:
    """Ordered steps and the user rules that select the active one."""

    steps: tuple[str, ...]
    state_rules: Mapping[str, str] = field(default_factory=dict)
    status_rules: Mapping[str, str] = field(default_factory=dict)
    name: str = ""

    def __post_init__(self) -> None:
        steps = tuple(ConstraintId(s) for s in self.steps or ())
        if not steps:
            raise ConstraintValidationError("A sequence needs at least one step")
        if len(set(steps)) != len(steps):
            raise ConstraintValidationError("Sequence steps must be unique")
        object.__setattr__(self, "steps", steps)
        object.__setattr__(self, "state_rules", self._normalize_rules(self.state_rules, steps))
        object.__setattr__(self, "status_rules", self._normalize_rules(self.status_rules, steps))

    @staticmethod
    def _normalize_rules(rules: Mapping[str, str], steps: tuple[str, ...]) -> dict[str, str]:
        normalized = {}
        for state_name, step in (rules or {}).items():
            if step not in steps:
                raise ConstraintValidationError(
                    f"Rule {state_name!r} maps to unknown step {step!r}"
                )
            normalized[state_name.strip().casefold()] = ConstraintId(step)
        return normalized

    @classmethod
    def from_composite(
        cls,
        composite: CompositeConstraint,
        state_rules: Mapping[str, str] | None = None,
        status_rules: Mapping[str, str] | None = None,
    ) -> SequenceDefinition:
        """Steps taken from the composite's components in sequence order."""
        return cls(
            steps=tuple(c.id for c in composite.ordered_components()),
            state_rules=state_rules or {},
            status_rules=status_rules or {},
            name=composite.title,
        )

    def step_for(self, context: CompositionStrategyContext | None) -> str | None:
        """The step the context's workflow state or evaluation status selects."""
        if context is None:
            return None
        if context.workflow_state is not None:
            key = context.workflow_state.key
            if key in self.state_rules:
                return self.state_rules[key]
            if not self.state_rules:
                for step in self.steps:
                    if step.last_segment.casefold() == key:
                        return step
        if context.evaluation_status is not None:
            return self.status_rules.get(context.evaluation_status.key)
        return None


class SequentialCompositionStrategy(CompositionStrategy):
    """Strict ordered progression through a SequenceDefinition."""

    @property
    def composition_type(self) -> CompositionType:
        return CompositionType.SEQUENTIAL

    def get_next_constraint(
        self,
        state: SequentialCompositionState,
        config: SequenceDefinition,
        context: CompositionStrategyContext | None = None,
    ) -> CompositionResult:
        steps = config.steps
        pending = [s for s in steps if s not in state.completed]
        if not pending:
            return CompositionResult.success(
                StepActivation.complete(
                    f"Sequential workflow complete: all {len(steps)} steps finished"
                )
            )

        next_step = pending[0]
        next_index = steps.index(next_step)
        requested = config.step_for(context)

        if requested is not None:
            requested_index = steps.index(requested)
            if requested_index > next_index:
                return CompositionResult.failure(
                    ActivationErrorCode.INVALID_STATE,
                    f"Invalid sequential workflow transition: '{requested}' "
                    f"requires '{next_step}' to be completed first",
                )
            step, index = requested, requested_index
        else:
            step, index = next_step, next_index

        return CompositionResult.success(
            StepActivation(
                constraint_id=step,
                level=index,
                guidance=f"Next in sequence: {step} (Step {index + 1} of {len(steps)})",
            )
        )

    def advance_state(
        self,
        state: SequentialCompositionState,
        completed: StepActivation,
        config: SequenceDefinition,
        context: CompositionStrategyContext | None = None,
    ) -> SequentialCompositionState:
        """Mark *completed* done. Out-of-order completions leave the state unchanged.

        Raises:
            CompositionError: If the step is not part of the sequence.
        """
        if not completed.is_activation:
            return state
        step = completed.constraint_id
        if step not in config.steps:
            raise CompositionError(f"Step {step!r} is not part of this sequence")

        index = config.steps.index(step)
        missing = [s for s in config.steps[:index] if s not in state.completed]
        if missing:
            logger.warning(
                "Ignoring completion of '%s': predecessors %s are incomplete",
                step,
                ", ".join(missing),
            )
            return state
        return state.with_completed(step)

    def is_sequence_complete(
        self, state: SequentialCompositionState, config: SequenceDefinition
    ) -> bool:
        return all(s in state.completed for s in config.steps)

    def get_sequence_progress(
        self, state: SequentialCompositionState, config: SequenceDefinition
    ) -> SequenceProgress:
        done = sum(1 for s in config.steps if s in state.completed)
        return SequenceProgress(completed=done, total=len(config.steps))

"""Progressive composition -- numbered stages with a cursor.

A ProgressionDefinition numbers its stages (any non-negative integers,
typically 0..N or 1..N). Completing a stage moves the cursor to the
next one, capped at the last stage. Users may try to jump ahead with
``try_skip_to_stage``; the rules are:

1. The target must be a defined stage after the current one.
2. Every stage below the target must be completed or be the current
   stage.
3. Unless the progression allows skipping, only the immediately
   following stage may be targeted.

Rejections come back as SkipResult values. Stages flagged as barriers
carry extra guidance exposed through ``get_barrier_support``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tether.composition.protocols import CompositionStrategy
from tether.exceptions import CompositionError, ConstraintValidationError
from tether.models.composition import (
    ActivationErrorCode,
    BarrierSupportInfo,
    CompositionResult,
    ProgressionPathInfo,
    ProgressiveCompositionState,
    SkipFailureReason,
    SkipResult,
    StepActivation,
)
from tether.models.constraint import CompositionType, ConstraintId

if TYPE_CHECKING:
    from tether.models.composition import CompositionStrategyContext


@dataclass(frozen=True)
class StageDefinition:
    constraint_id: ConstraintId
    description: str = ""
    is_barrier: bool = False
    barrier_guidance: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraint_id", ConstraintId(self.constraint_id))
        object.__setattr__(
            self, "barrier_guidance", tuple(g for g in self.barrier_guidance if g and g.strip())
        )


@dataclass(frozen=True)
class ProgressionDefinition:
    """User-defined stages keyed by stage number."""

    stages: Mapping[int, StageDefinition]
    allow_stage_skipping: bool = False
    name: str = ""
    metadata: dict = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.stages:
            raise ConstraintValidationError("A progression needs at least one stage")
        if any(number < 0 for number in self.stages):
            raise ConstraintValidationError("Stage numbers must be non-negative")
        object.__setattr__(self, "stages", dict(sorted(self.stages.items())))

    @property
    def stage_numbers(self) -> list[int]:
        return list(self.stages)

    @property
    def first_stage(self) -> int:
        return self.stage_numbers[0]

    @property
    def last_stage(self) -> int:
        return self.stage_numbers[-1]

    def initial_state(self) -> ProgressiveCompositionState:
        return ProgressiveCompositionState(current_level=self.first_stage)


class ProgressiveCompositionStrategy(CompositionStrategy):
    """Cursor-based progression with guarded skipping."""

    @property
    def composition_type(self) -> CompositionType:
        return CompositionType.PROGRESSIVE

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    def get_active_constraint(
        self, state: ProgressiveCompositionState, config: ProgressionDefinition
    ) -> StageDefinition:
        """Stage definition at the cursor.

        Raises:
            CompositionError: If the cursor points at an undefined stage.
        """
        try:
            return config.stages[state.current_level]
        except KeyError:
            raise CompositionError(
                f"Progression has no stage {state.current_level}"
            ) from None

    def complete_stage(
        self,
        state: ProgressiveCompositionState,
        completed_stage: int,
        config: ProgressionDefinition,
    ) -> ProgressiveCompositionState:
        """Mark *completed_stage* done and move the cursor past it.

        Raises:
            CompositionError: If the stage is not defined.
        """
        if completed_stage not in config.stages:
            raise CompositionError(f"Progression has no stage {completed_stage}")
        later = [n for n in config.stage_numbers if n > completed_stage]
        next_stage = later[0] if later else config.last_stage
        return ProgressiveCompositionState(
            current_level=next_stage,
            completed_levels=state.completed_levels | {completed_stage},
        )

    def try_skip_to_stage(
        self,
        state: ProgressiveCompositionState,
        target_stage: int,
        config: ProgressionDefinition,
    ) -> SkipResult:
        if target_stage <= state.current_level:
            return SkipResult.rejected(
                SkipFailureReason.INVALID_TARGET,
                "Cannot skip to a stage that is current or previous",
            )
        if target_stage not in config.stages:
            return SkipResult.rejected(
                SkipFailureReason.UNKNOWN_STAGE,
                f"Stage {target_stage} is not part of this progression",
            )

        missing = [
            n for n in config.stage_numbers
            if n < target_stage and n not in state.completed_levels and n != state.current_level
        ]
        if missing:
            return SkipResult.rejected(
                SkipFailureReason.MISSING_PREREQUISITES,
                f"Cannot skip to stage {target_stage}: prerequisite stage "
                f"{missing[0]} not completed",
            )

        following = [n for n in config.stage_numbers if n > state.current_level]
        is_next = bool(following) and following[0] == target_stage
        if not is_next and not config.allow_stage_skipping:
            return SkipResult.rejected(
                SkipFailureReason.SYSTEMATIC_PROGRESSION_REQUIRED,
                "Stage skipping not allowed: complete prerequisite stages systematically",
            )
        return SkipResult.allowed(target_stage)

    # ------------------------------------------------------------------
    # Support info
    # ------------------------------------------------------------------

    def get_barrier_support(self, stage: int, config: ProgressionDefinition) -> BarrierSupportInfo:
        definition = config.stages.get(stage)
        if definition is None or not definition.is_barrier:
            return BarrierSupportInfo(is_barrier=False)
        return BarrierSupportInfo(is_barrier=True, guidance=definition.barrier_guidance)

    def get_progression_path(
        self, state: ProgressiveCompositionState, config: ProgressionDefinition
    ) -> ProgressionPathInfo:
        return ProgressionPathInfo(
            levels=tuple(config.stage_numbers),
            descriptions={n: s.description for n, s in config.stages.items()},
            current_level=state.current_level,
            completed_levels=state.completed_levels,
        )

    # ------------------------------------------------------------------
    # CompositionStrategy
    # ------------------------------------------------------------------

    def get_next_constraint(
        self,
        state: ProgressiveCompositionState,
        config: ProgressionDefinition,
        context: CompositionStrategyContext | None = None,
    ) -> CompositionResult:
        if set(config.stage_numbers) <= state.completed_levels:
            return CompositionResult.success(
                StepActivation.complete(f"Progression complete: all {len(config.stages)} stages done")
            )
        if state.current_level not in config.stages:
            return CompositionResult.failure(
                ActivationErrorCode.INVALID_STATE,
                f"Progression has no stage {state.current_level}",
            )

        stage = config.stages[state.current_level]
        guidance = stage.description or f"Stage {state.current_level}"
        if stage.is_barrier and stage.barrier_guidance:
            guidance += " | " + " | ".join(stage.barrier_guidance)
        return CompositionResult.success(
            StepActivation(
                constraint_id=stage.constraint_id,
                level=state.current_level,
                guidance=guidance,
            )
        )

    def advance_state(
        self,
        state: ProgressiveCompositionState,
        completed: StepActivation,
        config: ProgressionDefinition,
        context: CompositionStrategyContext | None = None,
    ) -> ProgressiveCompositionState:
        if not completed.is_activation:
            return state
        return self.complete_stage(state, completed.level, config)

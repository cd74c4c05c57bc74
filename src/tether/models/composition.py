"""Domain models for composition strategies.

Composition strategies sequence the components of a multi-step
methodology. Every record here is immutable: strategies return updated
copies and never mutate the state they were given, so any run can be
replayed from its inputs.

Workflow and evaluation state names are user-defined ("red", "green",
"planning", "failing", ...); nothing in this module hardcodes them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING

from tether.exceptions import ConstraintValidationError
from tether.models.constraint import ConstraintId

if TYPE_CHECKING:
    from tether.models.constraint import AtomicConstraint


def _require_name(kind: str, name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ConstraintValidationError(f"{kind} name cannot be empty")
    return name.strip()


# ---------------------------------------------------------------------------
# Strategy context
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class WorkflowState:
    """A user-named workflow state. Equality ignores case."""

    name: str
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _require_name("Workflow state", self.name))

    @property
    def key(self) -> str:
        return self.name.casefold()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkflowState):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


@dataclass(frozen=True, eq=False)
class EvaluationStatus:
    """A user-named evaluation outcome, e.g. "failing" / "passing"."""

    name: str
    is_successful: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _require_name("Evaluation status", self.name))

    @property
    def key(self) -> str:
        return self.name.casefold()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EvaluationStatus):
            return NotImplemented
        return self.key == other.key and self.is_successful == other.is_successful

    def __hash__(self) -> int:
        return hash((self.key, self.is_successful))


@dataclass(frozen=True)
class DependencyInfo:
    """One code dependency fact: *source* namespace depends on *target*."""

    source: str
    target: str
    dependency_type: str = "import"


@dataclass(frozen=True)
class FileInfo:
    path: str
    namespace: str | None = None


@dataclass(frozen=True)
class CodeAnalysisInfo:
    """Static facts about the code under edit, supplied by the host."""

    dependencies: tuple[DependencyInfo, ...] = ()
    current_file: FileInfo | None = None
    project_structure: dict = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass(frozen=True)
class CompositionStrategyContext:
    """Inputs a strategy may consult besides its own state."""

    workflow_state: WorkflowState | None = None
    evaluation_status: EvaluationStatus | None = None
    code_analysis: CodeAnalysisInfo | None = None
    metadata: dict = field(default_factory=dict, compare=False, hash=False)

    def with_workflow_state(self, state: WorkflowState) -> CompositionStrategyContext:
        return replace(self, workflow_state=state)

    def with_evaluation_status(self, status: EvaluationStatus) -> CompositionStrategyContext:
        return replace(self, evaluation_status=status)

    def with_code_analysis(self, analysis: CodeAnalysisInfo) -> CompositionStrategyContext:
        return replace(self, code_analysis=analysis)


# ---------------------------------------------------------------------------
# Strategy output
# ---------------------------------------------------------------------------


class StepKind(str, enum.Enum):
    ACTIVATE = "activate"
    NONE = "none"
    COMPLETE = "complete"


@dataclass(frozen=True)
class StepActivation:
    """What a composition strategy wants surfaced next.

    ``kind`` distinguishes a real step from the two sentinels:
    ``none()`` (nothing to surface right now) and ``complete()`` (the
    methodology is finished).
    """

    constraint_id: ConstraintId | None
    level: int
    guidance: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    kind: StepKind = StepKind.ACTIVATE

    def __post_init__(self) -> None:
        if self.kind is StepKind.ACTIVATE:
            object.__setattr__(self, "constraint_id", ConstraintId(self.constraint_id))

    @classmethod
    def none(cls) -> StepActivation:
        return cls(constraint_id=None, level=0, kind=StepKind.NONE)

    @classmethod
    def complete(cls, guidance: str = "") -> StepActivation:
        return cls(constraint_id=None, level=-1, guidance=guidance, kind=StepKind.COMPLETE)

    @property
    def is_activation(self) -> bool:
        return self.kind is StepKind.ACTIVATE

    @property
    def is_none(self) -> bool:
        return self.kind is StepKind.NONE

    @property
    def is_complete(self) -> bool:
        return self.kind is StepKind.COMPLETE


class ActivationErrorCode(str, enum.Enum):
    INVALID_STATE = "invalid_state"
    MISSING_CONFIGURATION = "missing_configuration"
    VALIDATION_FAILURE = "validation_failure"
    LAYER_VIOLATION = "layer_violation"
    EXCEPTION = "exception"


@dataclass(frozen=True)
class ActivationError:
    code: ActivationErrorCode
    message: str


@dataclass(frozen=True)
class CompositionResult:
    """Either a StepActivation or an ActivationError, never both."""

    activation: StepActivation | None = None
    error: ActivationError | None = None

    @classmethod
    def success(cls, activation: StepActivation) -> CompositionResult:
        return cls(activation=activation)

    @classmethod
    def failure(cls, code: ActivationErrorCode, message: str) -> CompositionResult:
        return cls(error=ActivationError(code=code, message=message))

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None


# ---------------------------------------------------------------------------
# Sequential / hierarchical state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SequentialCompositionState:
    completed: frozenset[str] = frozenset()

    def with_completed(self, constraint_id: str) -> SequentialCompositionState:
        return replace(self, completed=self.completed | {constraint_id})


@dataclass(frozen=True)
class SequenceProgress:
    completed: int
    total: int

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 100.0
        return round(self.completed / self.total * 100, 2)


@dataclass(frozen=True)
class HierarchicalConstraintInfo:
    """A constraint's position in a user-defined hierarchy."""

    constraint_id: ConstraintId
    hierarchy_level: int
    priority: float
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraint_id", ConstraintId(self.constraint_id))
        if self.hierarchy_level < 0:
            raise ConstraintValidationError(
                f"Hierarchy level must be non-negative, got {self.hierarchy_level}"
            )
        if not 0.0 <= self.priority <= 1.0:
            raise ConstraintValidationError(
                f"Priority must be between 0.0 and 1.0, got {self.priority}"
            )

    @classmethod
    def from_constraint(cls, constraint: AtomicConstraint) -> HierarchicalConstraintInfo:
        if constraint.hierarchy_level is None:
            raise ConstraintValidationError(
                f"Constraint {constraint.id} has no hierarchy level"
            )
        return cls(
            constraint_id=constraint.id,
            hierarchy_level=constraint.hierarchy_level,
            priority=float(constraint.priority),
            description=constraint.title,
        )


@dataclass(frozen=True)
class HierarchicalCompositionState:
    completed: frozenset[str] = frozenset()

    def with_completed(self, constraint_id: str) -> HierarchicalCompositionState:
        return replace(self, completed=self.completed | {constraint_id})


# ---------------------------------------------------------------------------
# Layered state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerViolation:
    """A dependency that breaks the configured layer policy."""

    source_layer: int
    target_layer: int
    source_namespace: str
    target_namespace: str
    message: str


@dataclass(frozen=True)
class LayeredCompositionState:
    completed_layers: frozenset[int] = frozenset()
    current_layer: int | None = None
    last_activation: datetime | None = None
    violations: tuple[LayerViolation, ...] = ()

    def with_completed_layer(self, level: int) -> LayeredCompositionState:
        return replace(self, completed_layers=self.completed_layers | {level})

    def is_complete(self, total_layers: int) -> bool:
        return len(self.completed_layers) >= total_layers

    def validate(self) -> list[str]:
        """Consistency problems, empty when the state is sound."""
        problems = []
        if any(level < 0 for level in self.completed_layers):
            problems.append("Completed layers cannot be negative")
        if self.current_layer is not None and self.current_layer < 0:
            problems.append("Current layer cannot be negative")
        if self.last_activation is not None and self.last_activation > datetime.now():
            problems.append("Last activation cannot be in the future")
        return problems

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)


# ---------------------------------------------------------------------------
# Progressive state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProgressiveCompositionState:
    current_level: int = 0
    completed_levels: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if self.current_level < 0:
            raise ConstraintValidationError(
                f"Current level must be non-negative, got {self.current_level}"
            )
        object.__setattr__(self, "completed_levels", frozenset(self.completed_levels))


class SkipFailureReason(str, enum.Enum):
    INVALID_TARGET = "invalid_target"
    UNKNOWN_STAGE = "unknown_stage"
    MISSING_PREREQUISITES = "missing_prerequisites"
    SYSTEMATIC_PROGRESSION_REQUIRED = "systematic_progression_required"


@dataclass(frozen=True)
class SkipResult:
    """Outcome of a stage skip attempt. Rejections are values, not errors."""

    success: bool
    target_level: int | None = None
    failure_reason: SkipFailureReason | None = None
    message: str = ""

    @classmethod
    def allowed(cls, target_level: int) -> SkipResult:
        return cls(success=True, target_level=target_level)

    @classmethod
    def rejected(cls, reason: SkipFailureReason, message: str) -> SkipResult:
        return cls(success=False, failure_reason=reason, message=message)


class BarrierDifficulty(str, enum.Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class BarrierSupportInfo:
    is_barrier: bool
    guidance: tuple[str, ...] = ()

    @property
    def difficulty(self) -> BarrierDifficulty:
        count = len(self.guidance)
        if count == 0:
            return BarrierDifficulty.NONE
        if count <= 2:
            return BarrierDifficulty.LOW
        if count <= 4:
            return BarrierDifficulty.MEDIUM
        return BarrierDifficulty.HIGH


@dataclass(frozen=True)
class ProgressionPathInfo:
    """Snapshot of where a progression stands."""

    levels: tuple[int, ...]
    descriptions: dict = field(compare=False, hash=False)
    current_level: int
    completed_levels: frozenset[int] = frozenset()

    @property
    def next_level(self) -> int | None:
        later = [level for level in self.levels if level > self.current_level]
        return later[0] if later else None

    @property
    def previous_level(self) -> int | None:
        earlier = [level for level in self.levels if level < self.current_level]
        return earlier[-1] if earlier else None

    @property
    def completion_percentage(self) -> float:
        if not self.levels:
            return 0.0
        done = len(self.completed_levels & set(self.levels))
        return round(done / len(self.levels) * 100, 2)

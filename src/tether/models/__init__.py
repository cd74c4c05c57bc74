"""Tether domain models."""

from tether.models.composition import (
    ActivationError,
    ActivationErrorCode,
    BarrierDifficulty,
    BarrierSupportInfo,
    CodeAnalysisInfo,
    CompositionResult,
    CompositionStrategyContext,
    DependencyInfo,
    EvaluationStatus,
    FileInfo,
    HierarchicalCompositionState,
    HierarchicalConstraintInfo,
    LayeredCompositionState,
    LayerViolation,
    ProgressionPathInfo,
    ProgressiveCompositionState,
    SequenceProgress,
    SequentialCompositionState,
    SkipFailureReason,
    SkipResult,
    StepActivation,
    WorkflowState,
)
from tether.models.config import (
    ContextRule,
    KeywordConfig,
    MatchingConfig,
    RelevanceWeights,
    ScheduleConfig,
    TetherConfig,
)
from tether.models.constraint import (
    AtomicConstraint,
    CompositeConstraint,
    CompositionType,
    Constraint,
    ConstraintId,
    LookupResult,
    PhaseConstraint,
    Priority,
    TriggerConfiguration,
)
from tether.models.session import SessionAnalytics, SessionContext
from tether.models.trigger import ActivationReason, ConstraintActivation, TriggerContext

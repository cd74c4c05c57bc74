"""Tether: decides which methodology reminders to surface to a coding agent.

Each tool call is turned into a trigger context, gated by an injection
cadence, matched against a constraint library and ranked into a small,
confidence-scored set of reminders. Composition strategies sequence
multi-step methodologies and a per-session context biases future
decisions toward constraints the session has already seen.
"""

from tether._version import __version__

# Pipeline entry points
from tether.pipeline import ActivationPipeline, InjectionDecision
from tether.session import SessionStore

# Components
from tether.matching import ContextAnalyzer, KeywordMatcher, KeywordTables, RelevanceScorer
from tether.scheduler import Scheduler
from tether.selection import ConstraintSelector
from tether.triggers import (
    ConfidenceBoost,
    ConstraintResolver,
    KeywordBoost,
    LibraryResolver,
    TriggerMatchingEngine,
)
from tether.library import library_from_dict, load_library

# Composition strategies
from tether.composition import (
    CompositionStrategy,
    HierarchicalCompositionStrategy,
    HierarchicalConfiguration,
    HierarchyDefinition,
    LayerDefinition,
    LayerHierarchy,
    LayeredCompositionStrategy,
    ProgressionDefinition,
    ProgressiveCompositionStrategy,
    SequenceDefinition,
    SequentialCompositionStrategy,
    StageDefinition,
    order_by_hierarchy,
)

# Domain models
from tether.models import (
    ActivationReason,
    AtomicConstraint,
    CompositeConstraint,
    CompositionStrategyContext,
    CompositionType,
    Constraint,
    ConstraintActivation,
    ConstraintId,
    EvaluationStatus,
    MatchingConfig,
    PhaseConstraint,
    Priority,
    ScheduleConfig,
    SessionContext,
    StepActivation,
    TetherConfig,
    TriggerConfiguration,
    TriggerContext,
    WorkflowState,
)

# Exceptions
from tether.exceptions import (
    CompositionError,
    ConfigurationError,
    ConstraintNotFoundError,
    ConstraintValidationError,
    ResolverError,
    TetherError,
)

__all__ = [
    "__version__",
    "ActivationPipeline",
    "ActivationReason",
    "AtomicConstraint",
    "CompositeConstraint",
    "CompositionError",
    "CompositionStrategy",
    "CompositionStrategyContext",
    "CompositionType",
    "ConfidenceBoost",
    "ConfigurationError",
    "Constraint",
    "ConstraintActivation",
    "ConstraintId",
    "ConstraintNotFoundError",
    "ConstraintResolver",
    "ConstraintSelector",
    "ConstraintValidationError",
    "ContextAnalyzer",
    "EvaluationStatus",
    "HierarchicalCompositionStrategy",
    "HierarchicalConfiguration",
    "HierarchyDefinition",
    "InjectionDecision",
    "KeywordBoost",
    "KeywordMatcher",
    "KeywordTables",
    "LayerDefinition",
    "LayerHierarchy",
    "LayeredCompositionStrategy",
    "LibraryResolver",
    "MatchingConfig",
    "PhaseConstraint",
    "Priority",
    "ProgressionDefinition",
    "ProgressiveCompositionStrategy",
    "RelevanceScorer",
    "ResolverError",
    "ScheduleConfig",
    "Scheduler",
    "SequenceDefinition",
    "SequentialCompositionStrategy",
    "SessionContext",
    "SessionStore",
    "StageDefinition",
    "StepActivation",
    "TetherConfig",
    "TetherError",
    "TriggerConfiguration",
    "TriggerContext",
    "TriggerMatchingEngine",
    "WorkflowState",
    "library_from_dict",
    "load_library",
    "order_by_hierarchy",
]

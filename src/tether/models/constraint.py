"""Constraint domain models.

A constraint is a methodology reminder ("write a failing test first",
"domain must not import infrastructure") together with the rules that
decide when it is relevant. Three shapes exist:

- AtomicConstraint: a single reminder activated by triggers.
- CompositeConstraint: a methodology built from atomic components and
  sequenced by a composition strategy.
- PhaseConstraint: the legacy shape, activated by fixed workflow phases
  rather than triggers.

``Constraint`` is the closed union of the three. Code that needs
type-specific behaviour matches on the concrete class.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field, replace
from typing import Union

from tether.exceptions import ConstraintValidationError

DEFAULT_CONFIDENCE_THRESHOLD = 0.7

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*$")


class ConstraintId(str):
    """Non-empty, dot-segmented constraint identifier (e.g. ``tdd.test-first``).

    Subclasses ``str`` so ids compare equal to plain strings and can be
    used directly as dict keys and in log output.
    """

    def __new__(cls, value: str) -> ConstraintId:
        if isinstance(value, ConstraintId):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ConstraintValidationError("Constraint id cannot be empty")
        value = value.strip()
        if not _ID_PATTERN.match(value):
            raise ConstraintValidationError(
                f"Constraint id must be dot-segmented "
                f"(letters, digits, '-' and '_'): {value!r}"
            )
        return super().__new__(cls, value)

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.split("."))

    @property
    def last_segment(self) -> str:
        return self.rsplit(".", 1)[-1]


class Priority(float):
    """Static priority in [0.0, 1.0]. Higher sorts first."""

    def __new__(cls, value: float) -> Priority:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConstraintValidationError(f"Priority must be a number, got {value!r}")
        if not 0.0 <= float(value) <= 1.0:
            raise ConstraintValidationError(
                f"Priority must be between 0.0 and 1.0, got {value}"
            )
        return super().__new__(cls, float(value))


class CompositionType(str, enum.Enum):
    """How the components of a composite constraint are sequenced."""

    SEQUENTIAL = "sequential"
    HIERARCHICAL = "hierarchical"
    LAYERED = "layered"
    PROGRESSIVE = "progressive"


def _clean_strings(values) -> tuple[str, ...]:
    """Strip every entry and drop blanks, preserving order."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = (values,)
    return tuple(v.strip() for v in values if isinstance(v, str) and v.strip())


def _require_reminders(constraint_id: str, reminders) -> tuple[str, ...]:
    cleaned = _clean_strings(reminders)
    if not cleaned:
        raise ConstraintValidationError(
            f"Constraint {constraint_id} must have at least one reminder"
        )
    return cleaned


def _require_title(constraint_id: str, title: str) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ConstraintValidationError(f"Constraint {constraint_id} must have a title")
    return title.strip()


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TriggerConfiguration:
    """When a constraint should activate.

    ``anti_patterns`` are a hard veto: if any of them is present in the
    interaction, the constraint scores 0.0 no matter how well the other
    criteria match. ``confidence_threshold`` of None defers to the
    matching engine's configured default.
    """

    keywords: tuple[str, ...] = ()
    file_patterns: tuple[str, ...] = ()
    context_patterns: tuple[str, ...] = ()
    anti_patterns: tuple[str, ...] = ()
    confidence_threshold: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "keywords", _clean_strings(self.keywords))
        object.__setattr__(self, "file_patterns", _clean_strings(self.file_patterns))
        object.__setattr__(self, "context_patterns", _clean_strings(self.context_patterns))
        object.__setattr__(self, "anti_patterns", _clean_strings(self.anti_patterns))
        threshold = self.confidence_threshold
        if threshold is not None and not 0.0 <= threshold <= 1.0:
            raise ConstraintValidationError(
                f"Confidence threshold must be between 0.0 and 1.0, got {threshold}"
            )

    @property
    def has_activation_criteria(self) -> bool:
        """Whether any positive criterion (not counting anti-patterns) is set."""
        return bool(self.keywords or self.file_patterns or self.context_patterns)

    def effective_threshold(self, default: float = DEFAULT_CONFIDENCE_THRESHOLD) -> float:
        if self.confidence_threshold is None:
            return default
        return self.confidence_threshold


# ---------------------------------------------------------------------------
# Constraint variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AtomicConstraint:
    """A single reminder activated by its triggers.

    ``sequence_order`` places the constraint inside a sequential
    composite; ``hierarchy_level`` places it inside a hierarchical one
    (0 = outermost, meaning is user-defined).
    """

    id: ConstraintId
    title: str
    priority: Priority
    triggers: TriggerConfiguration
    reminders: tuple[str, ...]
    sequence_order: int | None = None
    hierarchy_level: int | None = None

    def __post_init__(self) -> None:
        constraint_id = ConstraintId(self.id)
        object.__setattr__(self, "id", constraint_id)
        object.__setattr__(self, "title", _require_title(constraint_id, self.title))
        object.__setattr__(self, "priority", Priority(self.priority))
        object.__setattr__(self, "reminders", _require_reminders(constraint_id, self.reminders))
        if not isinstance(self.triggers, TriggerConfiguration):
            raise ConstraintValidationError(
                f"Constraint {constraint_id} requires a TriggerConfiguration"
            )
        if self.sequence_order is not None and self.sequence_order < 1:
            raise ConstraintValidationError(
                f"Sequence order must be positive, got {self.sequence_order}"
            )
        if self.hierarchy_level is not None and self.hierarchy_level < 0:
            raise ConstraintValidationError(
                f"Hierarchy level must be non-negative, got {self.hierarchy_level}"
            )

    def with_priority(self, priority: float) -> AtomicConstraint:
        return replace(self, priority=Priority(priority))

    def with_triggers(self, triggers: TriggerConfiguration) -> AtomicConstraint:
        return replace(self, triggers=triggers)

    def with_reminders(self, reminders: tuple[str, ...] | list[str]) -> AtomicConstraint:
        return replace(self, reminders=tuple(reminders))

    def with_sequence_order(self, order: int | None) -> AtomicConstraint:
        return replace(self, sequence_order=order)

    def with_hierarchy_level(self, level: int | None) -> AtomicConstraint:
        return replace(self, hierarchy_level=level)


@dataclass(frozen=True)
class CompositeConstraint:
    """A methodology made of atomic components.

    Sequential composites require unique component sequence orders;
    hierarchical composites require every component to declare a level.
    """

    id: ConstraintId
    title: str
    priority: Priority
    composition_type: CompositionType
    components: tuple[AtomicConstraint, ...]
    triggers: TriggerConfiguration = field(default_factory=TriggerConfiguration)
    reminders: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        constraint_id = ConstraintId(self.id)
        object.__setattr__(self, "id", constraint_id)
        object.__setattr__(self, "title", _require_title(constraint_id, self.title))
        object.__setattr__(self, "priority", Priority(self.priority))
        object.__setattr__(self, "composition_type", CompositionType(self.composition_type))
        object.__setattr__(self, "reminders", _clean_strings(self.reminders))
        components = tuple(self.components or ())
        if not components:
            raise ConstraintValidationError(
                f"Composite constraint {constraint_id} must have at least one component"
            )
        object.__setattr__(self, "components", components)

        if self.composition_type is CompositionType.SEQUENTIAL:
            orders = [c.sequence_order for c in components if c.sequence_order is not None]
            if len(orders) != len(set(orders)):
                raise ConstraintValidationError(
                    f"Composite constraint {constraint_id} has duplicate sequence orders"
                )
        elif self.composition_type is CompositionType.HIERARCHICAL:
            missing = [c.id for c in components if c.hierarchy_level is None]
            if missing:
                raise ConstraintValidationError(
                    f"Hierarchical composite {constraint_id} has components "
                    f"without a hierarchy level: {', '.join(missing)}"
                )

    @property
    def component_ids(self) -> tuple[ConstraintId, ...]:
        return tuple(c.id for c in self.components)

    def ordered_components(self) -> list[AtomicConstraint]:
        """Components by sequence order; unordered components keep declaration order at the end."""
        ordered = [c for c in self.components if c.sequence_order is not None]
        ordered.sort(key=lambda c: c.sequence_order)
        return ordered + [c for c in self.components if c.sequence_order is None]


@dataclass(frozen=True)
class PhaseConstraint:
    """Legacy constraint activated by workflow phase membership."""

    id: ConstraintId
    title: str
    priority: Priority
    phases: tuple[str, ...]
    reminders: tuple[str, ...]

    def __post_init__(self) -> None:
        constraint_id = ConstraintId(self.id)
        object.__setattr__(self, "id", constraint_id)
        object.__setattr__(self, "title", _require_title(constraint_id, self.title))
        object.__setattr__(self, "priority", Priority(self.priority))
        phases = _clean_strings(self.phases)
        if not phases:
            raise ConstraintValidationError(
                f"Constraint {constraint_id} must apply to at least one phase"
            )
        object.__setattr__(self, "phases", phases)
        object.__setattr__(self, "reminders", _require_reminders(constraint_id, self.reminders))

    def applies_to(self, phase: str) -> bool:
        """Case-insensitive phase membership."""
        if not phase:
            return False
        wanted = phase.strip().casefold()
        return any(p.casefold() == wanted for p in self.phases)


Constraint = Union[AtomicConstraint, CompositeConstraint, PhaseConstraint]


@dataclass(frozen=True)
class LookupResult:
    """Outcome of looking up a constraint by id.

    A missing id is an expected outcome, so it is reported here rather
    than raised.
    """

    constraint_id: str
    constraint: Constraint | None = None
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.constraint is not None

"""Constraint library documents.

Hosts describe their constraint library as plain data (usually JSON):

    {"constraints": [
        {"id": "tdd.test-first", "title": "Write a failing test first",
         "priority": 0.92, "reminders": ["Start with a failing test."],
         "triggers": {"keywords": ["test", "implement"],
                      "anti_patterns": ["hotfix"]}}
    ]}

An entry with ``phases`` becomes a PhaseConstraint, one with
``composition_type`` and ``components`` a CompositeConstraint, anything
else an AtomicConstraint. The pydantic models only check shape; domain
rules are enforced by the constraint constructors.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from tether.exceptions import ConfigurationError
from tether.models.constraint import (
    AtomicConstraint,
    CompositeConstraint,
    CompositionType,
    PhaseConstraint,
    TriggerConfiguration,
)
from tether.triggers.resolver import LibraryResolver


class TriggerDocument(BaseModel):
    keywords: list[str] = Field(default_factory=list)
    file_patterns: list[str] = Field(default_factory=list)
    context_patterns: list[str] = Field(default_factory=list)
    anti_patterns: list[str] = Field(default_factory=list)
    confidence_threshold: Optional[float] = None

    def to_domain(self) -> TriggerConfiguration:
        return TriggerConfiguration(
            keywords=tuple(self.keywords),
            file_patterns=tuple(self.file_patterns),
            context_patterns=tuple(self.context_patterns),
            anti_patterns=tuple(self.anti_patterns),
            confidence_threshold=self.confidence_threshold,
        )


class ConstraintDocument(BaseModel):
    id: str
    title: str
    priority: float
    reminders: list[str] = Field(default_factory=list)
    triggers: Optional[TriggerDocument] = None
    phases: Optional[list[str]] = None
    sequence_order: Optional[int] = None
    hierarchy_level: Optional[int] = None
    composition_type: Optional[CompositionType] = None
    components: list[ConstraintDocument] = Field(default_factory=list)

    def to_atomic(self) -> AtomicConstraint:
        return AtomicConstraint(
            id=self.id,
            title=self.title,
            priority=self.priority,
            triggers=self.triggers.to_domain() if self.triggers else TriggerConfiguration(),
            reminders=tuple(self.reminders),
            sequence_order=self.sequence_order,
            hierarchy_level=self.hierarchy_level,
        )

    def to_constraint(self):
        if self.phases is not None:
            return PhaseConstraint(
                id=self.id,
                title=self.title,
                priority=self.priority,
                phases=tuple(self.phases),
                reminders=tuple(self.reminders),
            )
        if self.composition_type is not None:
            return CompositeConstraint(
                id=self.id,
                title=self.title,
                priority=self.priority,
                composition_type=self.composition_type,
                components=tuple(c.to_atomic() for c in self.components),
                triggers=self.triggers.to_domain() if self.triggers else TriggerConfiguration(),
                reminders=tuple(self.reminders),
            )
        return self.to_atomic()


ConstraintDocument.model_rebuild()


class LibraryDocument(BaseModel):
    constraints: list[ConstraintDocument] = Field(default_factory=list)


def library_from_dict(data: dict) -> LibraryResolver:
    """Build a resolver from already-parsed library data.

    Raises:
        ConfigurationError: If the data is not shaped like a library.
        ConstraintValidationError: If a constraint breaks a domain rule.
    """
    try:
        document = LibraryDocument.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid constraint library: {exc}") from exc
    return LibraryResolver(c.to_constraint() for c in document.constraints)


def load_library(path: str | Path) -> LibraryResolver:
    """Read a JSON library file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read constraint library {path}: {exc}") from exc
    if isinstance(data, list):
        data = {"constraints": data}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Constraint library {path} must contain a JSON object")
    return library_from_dict(data)

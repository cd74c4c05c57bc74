"""Layered composition -- enforce a user-defined layer dependency policy.

A LayerHierarchy names the layers (by integer level), says which
namespace fragments belong to each layer, and which layers each layer
may depend on. On every evaluation the strategy maps the supplied
dependency facts to layers:

- If any dependency is forbidden, a remediation activation
  (``arch.violation.layer-<source>-to-<target>``) is returned first.
- Otherwise the lowest-level layer not yet completed is surfaced, with
  its allowed dependencies in the guidance.
- When every layer is completed there is nothing left to surface.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from tether.composition.protocols import CompositionStrategy
from tether.exceptions import ConstraintValidationError
from tether.models.composition import (
    CompositionResult,
    LayeredCompositionState,
    LayerViolation,
    StepActivation,
)
from tether.models.constraint import CompositionType

if TYPE_CHECKING:
    from tether.models.composition import CodeAnalysisInfo, CompositionStrategyContext

_ID_UNSAFE = re.compile(r"[^a-z0-9_-]+")


def _id_fragment(name: str) -> str:
    return _ID_UNSAFE.sub("-", name.lower()).strip("-") or "layer"


@dataclass(frozen=True)
class LayerDefinition:
    level: int
    name: str
    description: str = ""

    def __post_init__(self) -> None:
        if self.level < 0:
            raise ConstraintValidationError(f"Layer level must be non-negative, got {self.level}")
        if not self.name or not self.name.strip():
            raise ConstraintValidationError("Layer name cannot be empty")
        object.__setattr__(self, "name", self.name.strip())

    @property
    def constraint_id(self) -> str:
        return f"layer.{_id_fragment(self.name)}"


@dataclass(frozen=True)
class LayerHierarchy:
    """Layers, their namespace patterns and the allowed-dependency table.

    A source layer with no entry in ``allowed_dependencies`` may depend
    on anything. A dependency within one layer is always allowed.
    """

    layers: tuple[LayerDefinition, ...]
    namespace_patterns: Mapping[int, tuple[str, ...]] = field(default_factory=dict)
    allowed_dependencies: Mapping[int, tuple[int, ...]] = field(default_factory=dict)
    name: str = ""

    def __post_init__(self) -> None:
        layers = tuple(sorted(self.layers or (), key=lambda layer: layer.level))
        if not layers:
            raise ConstraintValidationError("A layer hierarchy needs at least one layer")
        levels = [layer.level for layer in layers]
        if len(set(levels)) != len(levels):
            raise ConstraintValidationError("Layer levels must be unique")
        known = set(levels)
        for level in list(self.namespace_patterns) + list(self.allowed_dependencies):
            if level not in known:
                raise ConstraintValidationError(f"Layer level {level} is not defined")
        for targets in self.allowed_dependencies.values():
            unknown = [t for t in targets if t not in known]
            if unknown:
                raise ConstraintValidationError(
                    f"Allowed dependency targets {unknown} are not defined layers"
                )
        object.__setattr__(self, "layers", layers)
        object.__setattr__(
            self,
            "namespace_patterns",
            {k: tuple(p.lower() for p in v if p) for k, v in sorted(self.namespace_patterns.items())},
        )
        object.__setattr__(
            self,
            "allowed_dependencies",
            {k: tuple(v) for k, v in self.allowed_dependencies.items()},
        )

    @classmethod
    def from_simple_configuration(
        cls,
        definitions: Iterable[tuple[int, str, str, Iterable[str]]],
        name: str = "",
    ) -> LayerHierarchy:
        """Build from ``(level, name, description, namespace_patterns)`` tuples.

        Each layer may depend on every lower-numbered (inner) layer, so
        the lowest level depends on nothing.
        """
        ordered = sorted(definitions, key=lambda d: d[0])
        levels = [d[0] for d in ordered]
        return cls(
            layers=tuple(LayerDefinition(level, layer_name, desc) for level, layer_name, desc, _ in ordered),
            namespace_patterns={level: tuple(patterns) for level, _, _, patterns in ordered},
            allowed_dependencies={level: tuple(other for other in levels if other < level) for level in levels},
            name=name,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def lowest_level(self) -> int:
        return self.layers[0].level

    @property
    def highest_level(self) -> int:
        return self.layers[-1].level

    def layer(self, level: int) -> LayerDefinition | None:
        for layer in self.layers:
            if layer.level == level:
                return layer
        return None

    def layer_name(self, level: int) -> str:
        layer = self.layer(level)
        return layer.name if layer is not None else f"Layer {level}"

    def determine_layer(self, namespace: str) -> int:
        """First level (ascending) with a matching fragment; the highest level otherwise."""
        lowered = (namespace or "").lower()
        for level, patterns in self.namespace_patterns.items():
            if any(p in lowered for p in patterns):
                return level
        return self.highest_level

    def allowed_for(self, level: int) -> tuple[int, ...]:
        return self.allowed_dependencies.get(level, ())

    def is_violation(self, source_level: int, target_level: int) -> bool:
        if source_level == target_level:
            return False
        if source_level not in self.allowed_dependencies:
            return False
        return target_level not in self.allowed_dependencies[source_level]

    def next_level(self, level: int) -> int:
        """The layer after *level*, or *level* itself when it is the last."""
        levels = [layer.level for layer in self.layers]
        if level in levels:
            index = levels.index(level)
            if index < len(levels) - 1:
                return levels[index + 1]
        return level


class LayeredCompositionStrategy(CompositionStrategy):
    """Violation-first, then lowest-level-first layer progression."""

    @property
    def composition_type(self) -> CompositionType:
        return CompositionType.LAYERED

    def detect_violations(
        self,
        hierarchy: LayerHierarchy,
        analysis: CodeAnalysisInfo | None,
    ) -> list[LayerViolation]:
        if analysis is None:
            return []
        violations = []
        for dependency in analysis.dependencies:
            source = hierarchy.determine_layer(dependency.source)
            target = hierarchy.determine_layer(dependency.target)
            if hierarchy.is_violation(source, target):
                violations.append(
                    LayerViolation(
                        source_layer=source,
                        target_layer=target,
                        source_namespace=dependency.source,
                        target_namespace=dependency.target,
                        message=(
                            f"Layer '{hierarchy.layer_name(source)}' should not depend on "
                            f"layer '{hierarchy.layer_name(target)}'"
                        ),
                    )
                )
        return violations

    def current_layer(
        self,
        hierarchy: LayerHierarchy,
        context: CompositionStrategyContext | None,
    ) -> int:
        """Layer of the file under edit, the lowest level when unknown."""
        analysis = context.code_analysis if context is not None else None
        if analysis is not None and analysis.current_file is not None:
            namespace = analysis.current_file.namespace or analysis.current_file.path
            return hierarchy.determine_layer(namespace)
        return hierarchy.lowest_level

    def get_next_constraint(
        self,
        state: LayeredCompositionState,
        config: LayerHierarchy,
        context: CompositionStrategyContext | None = None,
    ) -> CompositionResult:
        analysis = context.code_analysis if context is not None else None
        violations = self.detect_violations(config, analysis)
        if violations:
            return CompositionResult.success(self._violation_activation(violations[0], config))

        for layer in config.layers:
            if layer.level in state.completed_layers:
                continue
            return CompositionResult.success(
                StepActivation(
                    constraint_id=layer.constraint_id,
                    level=layer.level,
                    guidance=self._layer_guidance(layer, config),
                )
            )
        return CompositionResult.success(StepActivation.none())

    def advance_state(
        self,
        state: LayeredCompositionState,
        completed: StepActivation,
        config: LayerHierarchy,
        context: CompositionStrategyContext | None = None,
    ) -> LayeredCompositionState:
        analysis = context.code_analysis if context is not None else None
        violations = tuple(self.detect_violations(config, analysis))
        if not completed.is_activation or not completed.constraint_id.startswith("layer."):
            return LayeredCompositionState(
                completed_layers=state.completed_layers,
                current_layer=state.current_layer,
                last_activation=state.last_activation,
                violations=violations,
            )
        return LayeredCompositionState(
            completed_layers=state.completed_layers | {completed.level},
            current_layer=config.next_level(completed.level),
            last_activation=completed.timestamp or datetime.now(),
            violations=violations,
        )

    @staticmethod
    def _violation_activation(violation: LayerViolation, hierarchy: LayerHierarchy) -> StepActivation:
        source = _id_fragment(hierarchy.layer_name(violation.source_layer))
        target = _id_fragment(hierarchy.layer_name(violation.target_layer))
        return StepActivation(
            constraint_id=f"arch.violation.layer-{source}-to-{target}",
            level=violation.source_layer,
            guidance=(
                f"Architectural violation: {violation.message}. Restructure the "
                f"dependency from {violation.source_namespace} to "
                f"{violation.target_namespace} to follow the configured layering."
            ),
        )

    @staticmethod
    def _layer_guidance(layer: LayerDefinition, hierarchy: LayerHierarchy) -> str:
        guidance = layer.description or layer.name
        allowed = hierarchy.allowed_for(layer.level)
        if allowed:
            names = ", ".join(hierarchy.layer_name(level) for level in allowed)
            guidance += f" | Allowed dependencies: {names}"
        return guidance

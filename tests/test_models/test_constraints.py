"""Tests for constraint and trigger domain models."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest
from hypothesis import given

from tether.exceptions import ConstraintValidationError
from tether.models.constraint import (
    CompositeConstraint,
    CompositionType,
    ConstraintId,
    PhaseConstraint,
    Priority,
    TriggerConfiguration,
)
from tether.models.trigger import ActivationReason, ConstraintActivation, TriggerContext

from tests.conftest import make_atomic
from tests.strategies import constraint_ids


class TestConstraintId:
    def test_segments(self):
        cid = ConstraintId("tdd.test-first")
        assert cid.segments == ("tdd", "test-first")
        assert cid.last_segment == "test-first"
        assert cid == "tdd.test-first"

    def test_strips_whitespace(self):
        assert ConstraintId("  a.b  ") == "a.b"

    @pytest.mark.parametrize("value", ["", "   ", "a..b", ".a", "a b", "a/b", None])
    def test_invalid(self, value):
        with pytest.raises(ConstraintValidationError):
            ConstraintId(value)

    @given(value=constraint_ids)
    def test_generated_ids_are_valid(self, value):
        assert ConstraintId(value).segments == tuple(value.split("."))


class TestPriority:
    @pytest.mark.parametrize("value", [0, 0.0, 0.5, 1, 1.0])
    def test_valid(self, value):
        assert 0.0 <= Priority(value) <= 1.0

    @pytest.mark.parametrize("value", [-0.1, 1.01, "high", True])
    def test_invalid(self, value):
        with pytest.raises(ConstraintValidationError):
            Priority(value)


class TestTriggerConfiguration:
    def test_blank_entries_are_dropped(self):
        config = TriggerConfiguration(keywords=(" test ", "", "  "), anti_patterns=("hotfix",))
        assert config.keywords == ("test",)
        assert config.has_activation_criteria

    def test_anti_patterns_alone_are_not_criteria(self):
        assert not TriggerConfiguration(anti_patterns=("hotfix",)).has_activation_criteria

    def test_effective_threshold(self):
        assert TriggerConfiguration().effective_threshold(0.8) == 0.8
        assert TriggerConfiguration(confidence_threshold=0.6).effective_threshold(0.8) == 0.6

    def test_threshold_range(self):
        with pytest.raises(ConstraintValidationError):
            TriggerConfiguration(confidence_threshold=1.2)


class TestAtomicConstraint:
    def test_requires_reminder(self):
        with pytest.raises(ConstraintValidationError):
            make_atomic("a.b", keywords=("x",), reminders=(" ",))

    def test_requires_title(self):
        with pytest.raises(ConstraintValidationError):
            make_atomic("a.b", keywords=("x",), title="")

    @pytest.mark.parametrize("kwargs", [{"sequence_order": 0}, {"hierarchy_level": -1}])
    def test_positional_fields(self, kwargs):
        with pytest.raises(ConstraintValidationError):
            make_atomic("a.b", keywords=("x",), **kwargs)

    def test_copies(self):
        original = make_atomic("a.b", keywords=("x",))
        changed = original.with_priority(0.1).with_sequence_order(2).with_hierarchy_level(1)
        assert (changed.priority, changed.sequence_order, changed.hierarchy_level) == (0.1, 2, 1)
        assert original.priority == 0.8
        assert original.with_reminders(["new"]).reminders == ("new",)
        assert original.with_triggers(TriggerConfiguration(keywords=("y",))).triggers.keywords == ("y",)

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            make_atomic("a.b", keywords=("x",)).title = "other"


class TestCompositeConstraint:
    def test_requires_components(self):
        with pytest.raises(ConstraintValidationError):
            CompositeConstraint(
                id="m.x", title="X", priority=0.5, composition_type="layered", components=()
            )

    def test_sequential_orders_must_be_unique(self):
        with pytest.raises(ConstraintValidationError):
            CompositeConstraint(
                id="m.x",
                title="X",
                priority=0.5,
                composition_type=CompositionType.SEQUENTIAL,
                components=(
                    make_atomic("a.one", keywords=("x",), sequence_order=1),
                    make_atomic("a.two", keywords=("x",), sequence_order=1),
                ),
            )

    def test_hierarchical_needs_levels(self):
        with pytest.raises(ConstraintValidationError):
            CompositeConstraint(
                id="m.x",
                title="X",
                priority=0.5,
                composition_type=CompositionType.HIERARCHICAL,
                components=(make_atomic("a.one", keywords=("x",)),),
            )

    def test_ordered_components(self):
        composite = CompositeConstraint(
            id="m.x",
            title="X",
            priority=0.5,
            composition_type="progressive",
            components=(
                make_atomic("a.loose", keywords=("x",)),
                make_atomic("a.two", keywords=("x",), sequence_order=2),
                make_atomic("a.one", keywords=("x",), sequence_order=1),
            ),
        )
        assert composite.composition_type is CompositionType.PROGRESSIVE
        assert [c.id for c in composite.ordered_components()] == ["a.one", "a.two", "a.loose"]


class TestPhaseConstraint:
    def test_applies_to(self):
        constraint = PhaseConstraint(
            id="p.x", title="X", priority=0.5, phases=("Red", "green"), reminders=("r",)
        )
        assert constraint.applies_to("RED")
        assert not constraint.applies_to("blue")
        assert not constraint.applies_to("")

    def test_requires_phase(self):
        with pytest.raises(ConstraintValidationError):
            PhaseConstraint(id="p.x", title="X", priority=0.5, phases=(), reminders=("r",))


class TestTriggerModels:
    def test_context_normalization(self):
        context = TriggerContext(keywords=("a", " ", "b"), file_path="  ", context_type="")
        assert context.keywords == ("a", "b")
        assert context.file_path is None
        assert context.context_type == "unknown"

    def test_context_copies(self):
        context = TriggerContext(keywords=("a",))
        assert context.with_keywords(["b"]).keywords == ("b",)
        assert context.with_context_type("testing").context_type == "testing"
        assert context.keywords == ("a",)

    def test_activation_score_range(self):
        with pytest.raises(ConstraintValidationError):
            ConstraintActivation("a.b", 1.5, ActivationReason.KEYWORD_MATCH, TriggerContext())

    def test_activation_with_confidence(self):
        activation = ConstraintActivation("a.b", 0.5, "keyword_match", TriggerContext(context_type="testing"))
        assert activation.reason is ActivationReason.KEYWORD_MATCH
        assert activation.with_confidence(0.6).confidence_score == 0.6
        assert activation.context_type == "testing"
        assert activation.reminders == ()

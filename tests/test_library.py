"""Tests for constraint library documents and the in-memory resolver."""

from __future__ import annotations

import json

import pytest

from tether.exceptions import (
    ConfigurationError,
    ConstraintNotFoundError,
    ConstraintValidationError,
    DuplicateConstraintError,
)
from tether.library import library_from_dict, load_library
from tether.models.constraint import AtomicConstraint, CompositeConstraint, CompositionType, PhaseConstraint
from tether.triggers.resolver import LibraryResolver

from tests.conftest import make_atomic

LIBRARY = {
    "constraints": [
        {
            "id": "tdd.test-first",
            "title": "Write a failing test first",
            "priority": 0.92,
            "reminders": ["Start with a failing test."],
            "triggers": {"keywords": ["test", "implement"], "anti_patterns": ["hotfix"], "confidence_threshold": 0.6},
        },
        {
            "id": "methodology.tdd",
            "title": "Red, green, refactor",
            "priority": 0.9,
            "composition_type": "sequential",
            "components": [
                {"id": "tdd.red", "title": "Red", "priority": 0.9, "reminders": ["Fail first"],
                 "triggers": {"keywords": ["failing"]}, "sequence_order": 1},
                {"id": "tdd.green", "title": "Green", "priority": 0.8, "reminders": ["Make it pass"],
                 "triggers": {"keywords": ["pass"]}, "sequence_order": 2},
            ],
        },
        {
            "id": "legacy.review",
            "title": "Review checklist",
            "priority": 0.5,
            "phases": ["review"],
            "reminders": ["Walk the checklist."],
        },
    ]
}


class TestLibraryFromDict:
    def test_builds_each_constraint_shape(self):
        resolver = library_from_dict(LIBRARY)
        assert len(resolver) == 3
        assert isinstance(resolver.resolve("tdd.test-first"), AtomicConstraint)
        composite = resolver.resolve("methodology.tdd")
        assert isinstance(composite, CompositeConstraint)
        assert composite.composition_type == CompositionType.SEQUENTIAL
        assert composite.component_ids == ("tdd.red", "tdd.green")
        assert isinstance(resolver.resolve("legacy.review"), PhaseConstraint)

    def test_trigger_fields(self):
        constraint = library_from_dict(LIBRARY).resolve("tdd.test-first")
        assert constraint.triggers.keywords == ("test", "implement")
        assert constraint.triggers.anti_patterns == ("hotfix",)
        assert constraint.triggers.effective_threshold() == 0.6

    def test_declaration_order_is_kept(self):
        ids = [c.id for c in library_from_dict(LIBRARY).list_constraints()]
        assert ids == ["tdd.test-first", "methodology.tdd", "legacy.review"]

    def test_shape_errors(self):
        with pytest.raises(ConfigurationError):
            library_from_dict({"constraints": [{"id": "x.y"}]})

    def test_domain_errors(self):
        bad = {"constraints": [{"id": "x.y", "title": "X", "priority": 2.0, "reminders": ["r"]}]}
        with pytest.raises(ConstraintValidationError):
            library_from_dict(bad)

    def test_duplicate_ids(self):
        entry = {"id": "x.y", "title": "X", "priority": 0.5, "reminders": ["r"]}
        with pytest.raises(DuplicateConstraintError):
            library_from_dict({"constraints": [entry, entry]})


class TestLoadLibrary:
    def test_load_object(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps(LIBRARY), encoding="utf-8")
        assert len(load_library(path)) == 3

    def test_load_bare_list(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps(LIBRARY["constraints"]), encoding="utf-8")
        assert "legacy.review" in load_library(path)

    @pytest.mark.parametrize("content", ["{not json", '"just a string"'])
    def test_unreadable(self, tmp_path, content):
        path = tmp_path / "library.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_library(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_library(tmp_path / "nope.json")


class TestLibraryResolver:
    def test_resolve_missing(self):
        with pytest.raises(ConstraintNotFoundError) as excinfo:
            LibraryResolver().resolve("a.b")
        assert excinfo.value.constraint_id == "a.b"

    def test_find_reports_instead_of_raising(self):
        resolver = LibraryResolver([make_atomic("a.b", keywords=("x",))])
        assert resolver.find("a.b").found
        missing = resolver.find("c.d")
        assert not missing.found
        assert "c.d" in missing.reason

    def test_register(self):
        resolver = LibraryResolver()
        resolver.register(make_atomic("a.b", keywords=("x",)))
        assert "a.b" in resolver
        with pytest.raises(DuplicateConstraintError):
            resolver.register(make_atomic("a.b", keywords=("y",)))

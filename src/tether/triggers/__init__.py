"""Trigger matching: engine, resolver protocol and confidence boosts."""

from tether.triggers.builtin import KeywordBoost
from tether.triggers.engine import TriggerMatchingEngine
from tether.triggers.protocols import ConfidenceBoost, ConstraintResolver
from tether.triggers.resolver import LibraryResolver

__all__ = [
    "ConfidenceBoost",
    "ConstraintResolver",
    "KeywordBoost",
    "LibraryResolver",
    "TriggerMatchingEngine",
]

"""Configuration models for Tether.

MatchingConfig tunes the trigger matching engine.
ScheduleConfig controls injection cadence.
KeywordConfig overrides the stop-word and synonym tables.
ContextRule is one entry of the ordered context-type detection table.
TetherConfig bundles all of the above and is what hosts load.

All models validate at construction. The core never parses files on
its own; ``TetherConfig.from_dict`` accepts data the host has already
read.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from tether.exceptions import ConfigurationError

# Named thresholds for quick tuning.
STANDARD_THRESHOLD = 0.7
RELAXED_THRESHOLD = 0.6
STRICT_THRESHOLD = 0.8

MIN_ACTIVE_CONSTRAINTS = 1
MAX_ACTIVE_CONSTRAINTS = 20


class RelevanceWeights(BaseModel):
    """Weights of the three relevance factors. Must sum to 1.0."""

    model_config = {"frozen": True}

    keyword: float = Field(default=0.4, ge=0.0, le=1.0)
    file_pattern: float = Field(default=0.3, ge=0.0, le=1.0)
    context_pattern: float = Field(default=0.3, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_sum(self) -> RelevanceWeights:
        total = self.keyword + self.file_pattern + self.context_pattern
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Relevance weights must sum to 1.0, got {total:.3f}")
        return self


class MatchingConfig(BaseModel):
    """Trigger matching engine settings."""

    model_config = {"frozen": True}

    default_confidence_threshold: float = Field(default=STANDARD_THRESHOLD, ge=0.0, le=1.0)
    max_active_constraints: int = Field(
        default=5, ge=MIN_ACTIVE_CONSTRAINTS, le=MAX_ACTIVE_CONSTRAINTS
    )
    weights: RelevanceWeights = Field(default_factory=RelevanceWeights)
    enable_fuzzy_matching: bool = True
    fuzzy_similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    max_evaluation_time_ms: int = Field(default=45, ge=1, le=1000)

    @classmethod
    def high_performance(cls) -> MatchingConfig:
        """Fewer, more certain activations."""
        return cls(default_confidence_threshold=STRICT_THRESHOLD, max_active_constraints=3)

    @classmethod
    def high_accuracy(cls) -> MatchingConfig:
        """More activations at a relaxed threshold."""
        return cls(
            default_confidence_threshold=RELAXED_THRESHOLD,
            max_active_constraints=8,
            enable_fuzzy_matching=True,
        )


class ScheduleConfig(BaseModel):
    """Injection cadence. Immutable once constructed."""

    model_config = {"frozen": True}

    every_n_interactions: int = Field(default=3, ge=1)
    phase_overrides: dict[str, int] = Field(default_factory=dict)
    inject_on_first_interaction: bool = True
    max_constraints_per_injection: int = Field(default=2, ge=1)

    @field_validator("phase_overrides")
    @classmethod
    def _check_overrides(cls, value: dict[str, int]) -> dict[str, int]:
        cleaned: dict[str, int] = {}
        for phase, cadence in value.items():
            if not phase.strip():
                raise ValueError("Phase override names cannot be blank")
            if cadence < 1:
                raise ValueError(
                    f"Cadence for phase {phase!r} must be at least 1, got {cadence}"
                )
            cleaned[phase.strip().casefold()] = cadence
        return cleaned


class KeywordConfig(BaseModel):
    """Overrides for the keyword matcher's tables. None keeps the defaults."""

    model_config = {"frozen": True}

    stop_words: Optional[list[str]] = None
    synonyms: Optional[dict[str, list[str]]] = None

    def to_tables(self):
        """Build the immutable KeywordTables this configuration describes."""
        from tether.matching.keywords import DEFAULT_TABLES, KeywordTables

        if self.stop_words is None and self.synonyms is None:
            return DEFAULT_TABLES
        return KeywordTables.build(
            stop_words=self.stop_words if self.stop_words is not None else DEFAULT_TABLES.stop_words,
            synonyms=self.synonyms if self.synonyms is not None else DEFAULT_TABLES.synonyms,
        )


class ContextRule(BaseModel):
    """One row of the context-type detection table.

    A rule matches when any interaction keyword starts with one of
    ``keywords``, or when the file path matches one of
    ``path_patterns`` (fnmatch globs, case-insensitive).
    """

    model_config = {"frozen": True}

    context_type: str
    keywords: list[str] = Field(default_factory=list)
    path_patterns: list[str] = Field(default_factory=list)

    @field_validator("context_type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("context_type cannot be blank")
        return value.strip()

    @field_validator("keywords", "path_patterns")
    @classmethod
    def _normalize(cls, value: list[str]) -> list[str]:
        return [v.strip().lower() for v in value if v.strip()]


DEFAULT_CONTEXT_RULES: tuple[ContextRule, ...] = (
    ContextRule(
        context_type="testing",
        keywords=[
            "test", "tdd", "unit", "assert", "mock", "fixture",
            "coverage", "pytest", "specs", "failing",
        ],
        path_patterns=["*/tests/*", "tests/*", "*test_*", "*_test.*", "*.test.*", "*.spec.*"],
    ),
    ContextRule(
        context_type="refactoring",
        keywords=[
            "refactor", "cleanup", "restructur", "reorganiz", "rename",
            "extract", "simplif", "duplicat",
        ],
    ),
    ContextRule(
        context_type="architecture",
        keywords=[
            "architect", "design", "layer", "hexagonal", "ports", "adapter",
            "domain", "dependenc", "boundar", "interface",
        ],
    ),
)


class TetherConfig(BaseModel):
    """Complete pipeline configuration."""

    model_config = {"frozen": True}

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    keywords: KeywordConfig = Field(default_factory=KeywordConfig)
    context_rules: list[ContextRule] = Field(default_factory=lambda: list(DEFAULT_CONTEXT_RULES))

    @classmethod
    def from_dict(cls, data: dict) -> TetherConfig:
        """Validate already-parsed configuration data.

        Raises:
            ConfigurationError: If the data does not describe a valid config.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_json_file(cls, path: str | Path) -> TetherConfig:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration {path} must contain a JSON object")
        return cls.from_dict(data)

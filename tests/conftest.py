"""Shared test fixtures for Tether.

Provides in-memory SQLite engine, session and repository fixtures, plus
a small constraint library used across the matching and pipeline tests.
"""

import pytest
from sqlalchemy.orm import Session, sessionmaker

from tether.models.constraint import (
    AtomicConstraint,
    CompositeConstraint,
    CompositionType,
    PhaseConstraint,
    TriggerConfiguration,
)
from tether.storage.engine import create_tether_engine, init_db
from tether.storage.sqlite import SqliteActivationRepository
from tether.triggers.resolver import LibraryResolver


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_tether_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def activation_repo(session: Session) -> SqliteActivationRepository:
    return SqliteActivationRepository(session)


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

def make_atomic(
    constraint_id: str = "tdd.test-first",
    *,
    keywords=(),
    file_patterns=(),
    context_patterns=(),
    anti_patterns=(),
    threshold=None,
    priority: float = 0.8,
    **kwargs,
) -> AtomicConstraint:
    """Build an AtomicConstraint with just the trigger fields a test cares about."""
    return AtomicConstraint(
        id=constraint_id,
        title=kwargs.pop("title", constraint_id),
        priority=priority,
        triggers=TriggerConfiguration(
            keywords=tuple(keywords),
            file_patterns=tuple(file_patterns),
            context_patterns=tuple(context_patterns),
            anti_patterns=tuple(anti_patterns),
            confidence_threshold=threshold,
        ),
        reminders=kwargs.pop("reminders", (f"Remember {constraint_id}",)),
        **kwargs,
    )


def make_phase(constraint_id: str, phases, priority: float = 0.5) -> PhaseConstraint:
    return PhaseConstraint(
        id=constraint_id,
        title=constraint_id,
        priority=priority,
        phases=tuple(phases),
        reminders=(f"Remember {constraint_id}",),
    )


@pytest.fixture
def tdd_constraint() -> AtomicConstraint:
    """Test-first reminder that backs off during hotfixes."""
    return make_atomic(
        "tdd.test-first",
        keywords=("test",),
        anti_patterns=("hotfix",),
        priority=0.92,
        reminders=("Start with a failing test.",),
    )


@pytest.fixture
def sample_library(tdd_constraint) -> LibraryResolver:
    """Mixed library: two trigger constraints, one composite, one phase constraint."""
    return LibraryResolver([
        tdd_constraint,
        make_atomic(
            "arch.layering",
            keywords=("architecture", "layer"),
            context_patterns=("architecture",),
            priority=0.7,
        ),
        CompositeConstraint(
            id="methodology.tdd",
            title="Red, green, refactor",
            priority=0.9,
            composition_type=CompositionType.SEQUENTIAL,
            components=(
                make_atomic("tdd.red", keywords=("failing",), sequence_order=1),
                make_atomic("tdd.green", keywords=("pass",), sequence_order=2),
                make_atomic("tdd.refactor", keywords=("refactor",), sequence_order=3),
            ),
        ),
        make_phase("legacy.review", ["review"]),
    ])

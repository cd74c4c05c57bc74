"""Hypothesis strategies for Tether value objects.

Provides strategies for constraint ids, trigger configurations, atomic and phase
constraints and trigger contexts.
"""

from hypothesis import strategies as st

from tether.models.constraint import AtomicConstraint, PhaseConstraint, TriggerConfiguration
from tether.models.trigger import TriggerContext

_segment = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_",
    min_size=1,
    max_size=12,
)

constraint_ids = st.lists(_segment, min_size=1, max_size=4).map(".".join)

# Lowercase words long enough to take part in fuzzy matching
words = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=12)

keyword_lists = st.lists(words, max_size=8)

context_types = st.sampled_from(["testing", "refactoring", "architecture", "unknown", "debugging"])

file_paths = st.one_of(
    st.none(),
    st.sampled_from([
        "src/app/service.py",
        "tests/test_service.py",
        "src/domain/model.py",
        "README.md",
        "web/components/button.test.tsx",
    ]),
)

trigger_configurations = st.builds(
    TriggerConfiguration,
    keywords=st.lists(words, max_size=5).map(tuple),
    file_patterns=st.lists(st.sampled_from(["*.py", "tests/*", "*.md", "src/*"]), max_size=3).map(tuple),
    context_patterns=st.lists(context_types, max_size=2).map(tuple),
    anti_patterns=st.lists(words, max_size=2).map(tuple),
    confidence_threshold=st.one_of(st.none(), st.floats(min_value=0.0, max_value=1.0)),
)

atomic_constraints = st.builds(
    AtomicConstraint,
    id=constraint_ids,
    title=st.just("Generated constraint"),
    priority=st.floats(min_value=0.0, max_value=1.0),
    triggers=trigger_configurations,
    reminders=st.just(("Generated reminder",)),
)

trigger_contexts = st.builds(
    TriggerContext,
    keywords=keyword_lists.map(tuple),
    file_path=file_paths,
    context_type=context_types,
)

priorities = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)

phase_names = st.sampled_from(["red", "green", "refactor", "review"])

phase_constraints = st.builds(
    PhaseConstraint,
    id=constraint_ids,
    title=st.just("Generated phase constraint"),
    priority=priorities,
    phases=st.lists(phase_names, min_size=1, max_size=3).map(tuple),
    reminders=st.just(("Generated reminder",)),
)

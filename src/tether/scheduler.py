"""Scheduler -- cadence gate for constraint injection.

The host owns the interaction counter (1-based); the scheduler is a pure
decision function over it::

    should_inject(n) == (n == 1) or (n % every_n_interactions == 0)

With a cadence of 3 the first six interactions give inject, skip,
inject, skip, skip, inject. Interaction 1 always injects so every
session sees at least one reminder. Per-phase overrides replace the
cadence while a named phase is active.
"""

from __future__ import annotations

from collections.abc import Mapping

from tether.exceptions import ConfigurationError
from tether.models.config import ScheduleConfig


class Scheduler:
    """Decides whether injection happens on a given interaction."""

    def __init__(
        self,
        every_n_interactions: int = 3,
        *,
        phase_overrides: Mapping[str, int] | None = None,
        inject_on_first_interaction: bool = True,
    ) -> None:
        if every_n_interactions <= 0:
            raise ConfigurationError(
                f"every_n_interactions must be positive, got {every_n_interactions}"
            )
        overrides: dict[str, int] = {}
        for phase, cadence in (phase_overrides or {}).items():
            if cadence <= 0:
                raise ConfigurationError(
                    f"Cadence for phase {phase!r} must be positive, got {cadence}"
                )
            overrides[phase.strip().casefold()] = cadence
        self._every_n = every_n_interactions
        self._overrides = overrides
        self._inject_on_first = inject_on_first_interaction

    @classmethod
    def from_config(cls, config: ScheduleConfig) -> Scheduler:
        return cls(
            config.every_n_interactions,
            phase_overrides=config.phase_overrides,
            inject_on_first_interaction=config.inject_on_first_interaction,
        )

    @property
    def every_n_interactions(self) -> int:
        return self._every_n

    def cadence_for(self, phase: str | None = None) -> int:
        """Effective cadence, honouring a phase override when one exists."""
        if phase:
            return self._overrides.get(phase.strip().casefold(), self._every_n)
        return self._every_n

    def should_inject(self, interaction_number: int, phase: str | None = None) -> bool:
        """Whether to inject on the *interaction_number*-th interaction.

        Raises:
            ValueError: If *interaction_number* is below 1.
        """
        if interaction_number < 1:
            raise ValueError(
                f"Interaction numbers start at 1, got {interaction_number}"
            )
        if interaction_number == 1 and self._inject_on_first:
            return True
        return interaction_number % self.cadence_for(phase) == 0

    def next_injection(self, after: int, phase: str | None = None) -> int:
        """First interaction number greater than *after* that injects."""
        candidate = max(after, 0) + 1
        while not self.should_inject(candidate, phase):
            candidate += 1
        return candidate

"""Abstract repository interfaces for Tether storage.

The pipeline depends on these ABCs, never on a concrete backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from tether.storage.schema import ActivationLogRow


class ActivationRepository(ABC):
    """Append-only audit log of injected activations."""

    @abstractmethod
    def save_entry(self, entry: ActivationLogRow) -> None:
        """Persist a single log entry."""
        ...

    @abstractmethod
    def get_log(
        self,
        session_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        constraint_id: str | None = None,
        limit: int = 100,
    ) -> list[ActivationLogRow]:
        """Log entries for a session, newest first."""
        ...

    @abstractmethod
    def activation_counts(self, session_id: str) -> dict[str, int]:
        """Number of logged activations per constraint id."""
        ...

    @abstractmethod
    def delete_entries(self, session_id: str, before: datetime) -> int:
        """Delete a session's entries older than *before*. Returns the count."""
        ...

"""SessionStore -- host-owned map of session id to SessionContext.

The store hands out one SessionContext per session id, creating it on
first use. It does no locking: the host serializes work per session id
(one worker per session, or a per-session mutex).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from tether.models.session import SessionContext

logger = logging.getLogger(__name__)


class SessionStore:
    """Keyed store of live sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionContext] = {}

    def get_or_create(self, session_id: str) -> SessionContext:
        session = self._sessions.get(session_id)
        if session is None:
            session = SessionContext(session_id)
            self._sessions[session.session_id] = session
            logger.debug("Created session context %s", session.session_id)
        return session

    def get(self, session_id: str) -> SessionContext | None:
        return self._sessions.get(session_id)

    def end(self, session_id: str) -> SessionContext | None:
        """Remove and return the session, or None if it was unknown."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.debug(
                "Ended session %s after %d tool calls",
                session_id,
                session.total_tool_calls,
            )
        return session

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))

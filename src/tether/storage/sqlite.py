"""SQLite (SQLAlchemy) implementation of the activation repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, delete, func, select
from sqlalchemy.orm import Session

from tether.storage.repositories import ActivationRepository
from tether.storage.schema import ActivationLogRow


class SqliteActivationRepository(ActivationRepository):
    """Activation audit log backed by a SQLAlchemy session.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def save_entry(self, entry: ActivationLogRow) -> None:
        self._session.add(entry)
        self._session.flush()

    def get_log(
        self,
        session_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        constraint_id: str | None = None,
        limit: int = 100,
    ) -> list[ActivationLogRow]:
        conditions = [ActivationLogRow.session_id == session_id]
        if since is not None:
            conditions.append(ActivationLogRow.created_at >= since)
        if until is not None:
            conditions.append(ActivationLogRow.created_at <= until)
        if constraint_id is not None:
            conditions.append(ActivationLogRow.constraint_id == constraint_id)

        stmt = (
            select(ActivationLogRow)
            .where(and_(*conditions))
            .order_by(ActivationLogRow.created_at.desc(), ActivationLogRow.id.desc())
            .limit(limit)
        )
        return list(self._session.execute(stmt).scalars().all())

    def activation_counts(self, session_id: str) -> dict[str, int]:
        stmt = (
            select(ActivationLogRow.constraint_id, func.count(ActivationLogRow.id))
            .where(ActivationLogRow.session_id == session_id)
            .group_by(ActivationLogRow.constraint_id)
        )
        return {constraint_id: count for constraint_id, count in self._session.execute(stmt)}

    def delete_entries(self, session_id: str, before: datetime) -> int:
        stmt = delete(ActivationLogRow).where(
            ActivationLogRow.session_id == session_id,
            ActivationLogRow.created_at < before,
        )
        result = self._session.execute(stmt)
        self._session.flush()
        return result.rowcount or 0

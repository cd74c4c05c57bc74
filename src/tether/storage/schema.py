"""SQLAlchemy ORM schema for Tether.

The only persisted data is the activation audit log: one row per
constraint surfaced to a session. Constraint definitions are never
stored here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all Tether ORM models."""

    pass


class TetherMetaRow(Base):
    """Key-value metadata (schema version)."""

    __tablename__ = "_tether_meta"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)


class ActivationLogRow(Base):
    """Audit log entry for one injected constraint activation."""

    __tablename__ = "activation_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    constraint_id: Mapped[str] = mapped_column(String(255), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(
        String(32), nullable=False
    )  # ActivationReason value, or "composition" / "phase"
    context_type: Mapped[str] = mapped_column(String(64), nullable=False)
    interaction_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_activation_log_session_time", "session_id", "created_at"),
    )

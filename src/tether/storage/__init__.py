"""Activation audit log storage (SQLAlchemy)."""

from tether.storage.engine import create_session_factory, create_tether_engine, init_db
from tether.storage.repositories import ActivationRepository
from tether.storage.schema import ActivationLogRow, Base
from tether.storage.sqlite import SqliteActivationRepository

__all__ = [
    "ActivationLogRow",
    "ActivationRepository",
    "Base",
    "SqliteActivationRepository",
    "create_session_factory",
    "create_tether_engine",
    "init_db",
]

"""Engine and session factory for the activation audit log."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine, event, select
from sqlalchemy.orm import Session, sessionmaker

from tether.storage.schema import Base, TetherMetaRow

SCHEMA_VERSION = "1"

# Applied on every new SQLite connection.
_SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=5000",
    "PRAGMA synchronous=NORMAL",
)


def sqlite_url(db_path: str) -> str:
    """SQLAlchemy URL for a database file, ``":memory:"`` for a private in-memory db."""
    if db_path == ":memory:":
        return "sqlite://"
    return f"sqlite:///{db_path}"


def create_tether_engine(
    db_path: str = ":memory:",
    *,
    url: str | None = None,
) -> Engine:
    """Create the engine that backs the activation log.

    *url* takes precedence over *db_path* and allows non-SQLite
    backends; the SQLite pragmas are only installed for SQLite.
    """
    engine = create_engine(url if url is not None else sqlite_url(db_path), echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _apply_pragmas(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            for pragma in _SQLITE_PRAGMAS:
                cursor.execute(pragma)
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Log rows are read back after the host commits.
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create the log tables and stamp the schema version. Safe to call twice."""
    Base.metadata.create_all(engine)

    with create_session_factory(engine)() as session:
        stamp = session.execute(
            select(TetherMetaRow).where(TetherMetaRow.key == "schema_version")
        ).scalar_one_or_none()
        if stamp is None:
            session.add(TetherMetaRow(key="schema_version", value=SCHEMA_VERSION))
            session.commit()

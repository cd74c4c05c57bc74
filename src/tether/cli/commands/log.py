"""tether log -- show the activation audit log for a session."""

from __future__ import annotations

import click

from tether.cli.formatting import format_activation_log, format_error, get_console


@click.command()
@click.option("--db", "db_path", required=True, envvar="TETHER_DB", help="Path to the activation log database.")
@click.option("-s", "--session", "session_id", required=True, help="Session id to show.")
@click.option("-n", "--limit", default=20, type=int, help="Maximum number of entries to show.")
@click.option("--constraint", "constraint_id", default=None, help="Only show this constraint.")
def log(db_path: str, session_id: str, limit: int, constraint_id: str | None) -> None:
    """Show logged activations for a session, newest first."""
    import os

    from tether.storage.engine import create_session_factory, create_tether_engine
    from tether.storage.sqlite import SqliteActivationRepository

    console = get_console()
    if not os.path.exists(db_path):
        format_error(f"Database not found: {db_path}", console)
        raise SystemExit(1)

    engine = create_tether_engine(db_path)
    try:
        session = create_session_factory(engine)()
        try:
            repo = SqliteActivationRepository(session)
            entries = repo.get_log(session_id, constraint_id=constraint_id, limit=limit)
            format_activation_log(entries, console)
        finally:
            session.close()
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
    finally:
        engine.dispose()

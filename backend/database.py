# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, and the FastAPI
dependency that hands each request its own session.

Services receive the session through ``Depends(get_db)`` and never open
one themselves, so tests can swap in another store with
``app.dependency_overrides[get_db]``.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import settings

# SQLite connections are handed between the threadpool workers FastAPI uses
# for sync endpoints.
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

# pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args)


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """
    SQLite ignores FOREIGN KEY clauses unless each connection opts in.
    Without this, ON DELETE CASCADE on components.user_id does nothing.
    """
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _fk_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

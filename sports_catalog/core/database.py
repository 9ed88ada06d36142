"""
Database configuration and session management.

The engine is created lazily from ``settings.DATABASE_URL`` so importing the
package never opens a connection. SQLite connections get
``PRAGMA foreign_keys=ON`` so the cascade / restrict / set-null rules of the
catalog schema are enforced there too.
"""
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_catalog_engine(database_url: str, echo: bool = False, **engine_kwargs) -> Engine:
    """
    Create an engine for the catalog store.

    Args:
        database_url: SQLAlchemy URL
        echo: Log emitted SQL
        **engine_kwargs: Passed through to ``create_engine``

    Returns:
        Configured engine
    """
    if database_url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        engine_kwargs.setdefault("pool_size", 10)
        engine_kwargs.setdefault("max_overflow", 20)
        engine_kwargs.setdefault("pool_pre_ping", True)  # Verify connections before using

    engine = create_engine(database_url, echo=echo, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine, _SessionLocal

    if _engine is None:
        from sports_catalog.core.config import settings
        _engine = create_catalog_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    return _engine


def get_session_factory() -> sessionmaker:
    """Session factory bound to the application engine."""
    get_engine()
    return _SessionLocal


def SessionLocal() -> Session:
    """Open a new session on the application engine."""
    return get_session_factory()()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create catalog tables that don't exist yet."""
    from sports_catalog.models import Base
    Base.metadata.create_all(bind=engine or get_engine(), checkfirst=True)

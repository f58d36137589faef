"""Database session factory and configuration.

Provides database connectivity and session management for the GearBin backend.
One session per request; tenancy services flush, the request commits once.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from config import get_settings

DATABASE_URL = get_settings().DATABASE_URL


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    """Make SAVEPOINT work on the pysqlite driver.

    pysqlite manages transactions itself and breaks SAVEPOINT semantics;
    this is SQLAlchemy's documented workaround (disable the driver's
    transaction handling and emit BEGIN ourselves). Company inserts rely on
    savepoints to retry join code collisions without losing the request's work.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine with pool settings suited to the backend."""
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,  # Set to True for SQL query logging
    }
    engine_kwargs.update(kwargs)

    # Pool settings only apply to PostgreSQL (not SQLite)
    if url.startswith("sqlite"):
        return enable_sqlite_savepoints(create_engine(url, **engine_kwargs))

    engine_kwargs.setdefault("pool_size", 5)
    engine_kwargs.setdefault("max_overflow", 10)
    return create_engine(url, **engine_kwargs)


engine = build_engine(DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.query(Company).all()

    Automatically commits on success, rolls back on exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Rolls back whatever the request left uncommitted, so a failed tenancy
    transition never leaves a half-applied unit behind.

    Usage:
        @app.get("/companies")
        def list_companies(db: Session = Depends(get_db)):
            return db.query(Company).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

"""
Database session management
"""
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker, Session
from typing import Optional

from homequote.core.config import settings
from homequote.database.connection import DatabasePool
from homequote.database.models import Base


# Session factory - will be initialized after pool is ready
SessionLocal: Optional[sessionmaker] = None


def init_session_factory() -> None:
    """
    Initialize the session factory with the database engine.
    Should be called after DatabasePool.initialize()
    Sets the schema search path for all PostgreSQL connections.
    """
    global SessionLocal
    if SessionLocal is None:
        engine = DatabasePool.get_engine()
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        if (
            not settings.database.is_sqlite
            and settings.database.schema
            and settings.database.schema != "public"
        ):
            @event.listens_for(engine, "connect")
            def set_search_path(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                cursor.execute(f"SET search_path TO {settings.database.schema}, public")
                cursor.close()


def init_db() -> None:
    """
    Initialize database tables.
    Call this to create all tables defined in models.
    """
    engine = DatabasePool.get_engine()
    Base.metadata.create_all(bind=engine)


def get_session() -> Session:
    """
    Get a new database session from the pool.
    Use this for manual session management outside of FastAPI dependencies.

    Raises:
        RuntimeError: If session factory is not initialized
    """
    if SessionLocal is None:
        init_session_factory()

    if SessionLocal is None:
        raise RuntimeError("Session factory not initialized. Call DatabasePool.initialize() first.")

    return SessionLocal()

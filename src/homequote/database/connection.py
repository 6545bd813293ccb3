"""
Database Connection Pool Manager
Uses SQLAlchemy for connection pooling
"""
from sqlalchemy import create_engine, Engine
from sqlalchemy.pool import Pool, StaticPool
from typing import Optional
from homequote.core.config import settings
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class DatabasePool:
    """
    Connection pool manager using SQLAlchemy.
    Manages a single shared connection pool for all database operations.
    """

    _engine: Optional[Engine] = None
    _pool: Optional[Pool] = None
    _initialized: bool = False

    @classmethod
    def _build_engine(cls) -> Engine:
        if settings.database.is_sqlite:
            # Local development and tests: one shared in-process connection
            return create_engine(
                settings.DATABASE_URL,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=settings.database.pool.echo,
            )

        pool_config = settings.database.pool
        return create_engine(
            settings.DATABASE_URL,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=pool_config.size,
            max_overflow=pool_config.max_overflow,
            pool_timeout=pool_config.timeout,
            pool_recycle=pool_config.recycle,
            echo=pool_config.echo,
            connect_args={
                "options": f"-csearch_path={settings.database.schema}"
            } if settings.database.schema else {},
        )

    @classmethod
    def initialize(cls) -> None:
        """
        Initialize the database connection pool.
        Should be called at application startup.
        """
        if cls._initialized:
            logger.warning("Database pool already initialized")
            return

        try:
            cls._engine = cls._build_engine()
            cls._pool = cls._engine.pool
            cls._initialized = True

            pool_config = settings.database.pool
            logger.info(
                f"[green]Database pool initialized:[/green] "
                f"[cyan]size={pool_config.size}[/cyan], [cyan]max_overflow={pool_config.max_overflow}[/cyan], "
                f"[cyan]timeout={pool_config.timeout}s[/cyan], [cyan]recycle={pool_config.recycle}s[/cyan]"
            )
        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    @classmethod
    def get_engine(cls) -> Engine:
        """
        Get the database engine.
        Initializes the pool if not already initialized.

        Raises:
            RuntimeError: If pool is not initialized
        """
        if not cls._initialized:
            cls.initialize()

        if cls._engine is None:
            raise RuntimeError("Database pool not initialized")

        return cls._engine

    @classmethod
    def close(cls) -> None:
        """
        Close the database connection pool.
        Should be called at application shutdown.
        """
        if cls._engine is not None:
            try:
                cls._engine.dispose()
                logger.info("[green]Database pool closed successfully[/green]")
            except Exception as e:
                logger.error(f"Error closing database pool: {e}")
            finally:
                cls._engine = None
                cls._pool = None
                cls._initialized = False

    @classmethod
    def get_pool_status(cls) -> dict:
        """
        Get the current status of the connection pool.

        Returns:
            dict: Pool status information
        """
        if not cls._initialized or cls._pool is None:
            return {
                "initialized": False,
                "size": 0,
                "checked_out": 0,
            }

        # StaticPool (SQLite) has no sizing counters
        size = getattr(cls._pool, "size", None)
        checked_out = getattr(cls._pool, "checkedout", None)
        return {
            "initialized": True,
            "size": size() if callable(size) else 1,
            "checked_out": checked_out() if callable(checked_out) else 0,
        }

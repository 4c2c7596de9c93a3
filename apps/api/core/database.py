"""
Ride storage engine and sessions.

Server databases get a QueuePool sized from settings. SQLite (used by the
test-suite and local experiments) gets a single shared connection instead.
"""
from sqlalchemy import create_engine, text
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
            "echo": settings.DEBUG,
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.DB_POOL_SIZE,  # Number of connections to maintain
        "max_overflow": settings.DB_MAX_OVERFLOW,  # Additional connections beyond pool_size
        "pool_timeout": settings.DB_POOL_TIMEOUT,  # Seconds to wait for connection
        "pool_recycle": settings.DB_POOL_RECYCLE,  # Recycle connections after this many seconds
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.DEBUG,  # Log SQL queries in debug mode
    }


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # routers serialize rides after commit
)

Base = declarative_base()


def get_db() -> Session:
    """
    Request-scoped session: committed if the handler returns, rolled back if
    it raises, closed either way. Nothing is retried.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except HTTPException:
        # Ride errors (404, 422, 503) are already reported by the handler.
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(
            f"Ride transaction rolled back: {e}",
            extra={"extra_fields": {"error_type": type(e).__name__}},
        )
        raise
    finally:
        db.close()


def check_db_connection() -> bool:
    """True when ride storage answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Ride storage unreachable: {e}", extra={"extra_fields": {"database": engine.url.database}})
        return False
    return True


import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from storefront.core.config import settings
from storefront.core.exceptions import AppError, ConflictError, InternalError

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless the pragma is set per connection"""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create database engine - manages connection pool
# SQLite connections are handed across threads by FastAPI's threadpool
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
enable_sqlite_foreign_keys(engine)

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit (prevents accidental commits)
# autoflush=False: Don't auto-flush before queries (better performance)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes (via finally block).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(
    db: Session,
    failure_message: str,
    conflict_message: str = "Duplicate entry",
) -> Iterator[Session]:
    """
    Run a unit of work and commit it, or roll everything back.

    Business errors raised inside the block propagate unchanged after the
    rollback. A unique/foreign key violation at commit time becomes a 409 and
    anything else becomes a 500 whose detail is only exposed in debug mode.
    """
    try:
        yield db
        db.commit()
    except AppError:
        db.rollback()
        raise
    except IntegrityError as e:
        # Two requests racing past the explicit checks end up here
        db.rollback()
        logger.warning(f"Integrity error: {e.orig}")
        raise ConflictError(conflict_message, "The resource conflicts with an existing record.")
    except Exception as e:
        db.rollback()
        logger.exception(f"{failure_message}: {str(e)}")
        raise InternalError(failure_message, detail=str(e))

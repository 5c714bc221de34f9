"""Database configuration and session management."""

from collections.abc import Generator, Iterator
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from familytodo.config import get_settings

logger = logging.getLogger("familytodo.database")

settings = get_settings()


def _ensure_sqlite_dir(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database or parsed.database == ":memory:":
        return
    from pathlib import Path

    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


_ensure_sqlite_dir(settings.database_url)

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
    echo=settings.debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a unit of work: commit on success, roll everything back on error.

    The error is re-raised after the rollback so the caller sees a single failure
    and no partial rows are left behind.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db() -> None:
    """Initialize database tables and seed default categories."""
    logger.info("Initializing database tables...")
    logger.info("Database URL: %s", settings.database_url)
    # Import models so every table is registered on Base.metadata
    from familytodo import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    tables = inspect(engine).get_table_names()
    logger.info("Available tables after init: %s", tables)

    from familytodo.services.category_service import CategoryService

    db = SessionLocal()
    try:
        CategoryService.seed_defaults(db)
    finally:
        db.close()

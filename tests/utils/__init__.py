"""Shared helpers for unit tests."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Callable

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .api import api_path

__all__ = [
    "api_path",
    "clean_tables",
    "create_sqlite_engine",
    "test_client_with_session",
]

# Children first so the order also works with foreign keys on
_TABLES = ("task_comments", "task_attachments", "task_assignments", "tasks", "categories", "people")


def create_sqlite_engine() -> tuple[Engine, sessionmaker]:
    """Create an in-memory SQLite engine and session factory.

    StaticPool reuses one connection, so every session sees the same database.
    """

    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, session_factory


def clean_tables(db: Session) -> None:
    """Delete all rows so each test starts from an empty database."""

    with db.begin():
        for table in _TABLES:
            db.execute(text(f"DELETE FROM {table}"))


@contextmanager
def test_client_with_session(
    app,
    dependency: Callable[..., Generator[Session, None, None]],
    session: Session,
) -> Generator[TestClient, None, None]:
    """Provide a TestClient with the database dependency overridden."""

    def override_dependency() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[dependency] = override_dependency
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


test_client_with_session.__test__ = False  # type: ignore[attr-defined]

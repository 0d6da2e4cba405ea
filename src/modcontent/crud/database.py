"""Engine, schema and session helpers"""

from __future__ import annotations
import os
from collections.abc import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from modcontent.crud import tables  # noqa: F401  (registers table metadata)


DEFAULT_URL = "sqlite:///modcontent.db"


def get_url(explicit: str | None = None) -> str:
    if explicit:
        return explicit
    env = os.getenv("MODCONTENT_DB_URL")
    if env:
        return env
    return DEFAULT_URL


def make_engine(db_url: str) -> Engine:
    """Create an engine; an in-memory SQLite URL shares one connection across sessions."""
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            db_url, echo=False,
            connect_args={"check_same_thread": False}, poolclass=StaticPool,
        )
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session

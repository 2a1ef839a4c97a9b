"""Database engine, session factory and declarative base."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for the given URL.

    In-memory SQLite URLs get a single shared connection so every session
    sees the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def new_id() -> str:
    """Primary key default: UUID4 string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the timestamp columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

"""Celery tasks."""

from typing import Optional

from sqlalchemy.orm import sessionmaker

from fusion_edge.config import get_settings
from fusion_edge.database import create_db_engine, create_session_factory

_session_factory: Optional[sessionmaker] = None


def get_session_factory() -> sessionmaker:
    """Session factory for worker processes, built on first use."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(create_db_engine(get_settings().database_url))
    return _session_factory

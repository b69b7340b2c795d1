from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event, make_url
from sqlalchemy.orm import Session, sessionmaker

from ats_tracking.config import Settings, get_settings
from ats_tracking.db.init import create_schema

logger = logging.getLogger(__name__)


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite's built-in LOWER() only folds ASCII; search lower-cases the query in Python.
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(settings: Settings) -> Engine:
    """Engine for the configured backend.

    Opening the embedded file creates its parent directory and the schema, so a fresh
    install works without a separate ``init`` step.
    """
    url = make_url(settings.resolved_database_url())
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _register_sqlite_functions)
        create_schema(engine)
    else:
        engine = create_engine(url, pool_pre_ping=True)
    logger.debug("Using %s database at %s", engine.dialect.name, url.render_as_string(hide_password=True))
    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine(get_settings())


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)


def SessionLocal() -> Session:
    return _session_factory()()


def reset_engine() -> None:
    """Dispose the cached engine so the next session follows the current settings."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_engine.cache_clear()
    _session_factory.cache_clear()

from __future__ import annotations

from sqlalchemy import Engine

from ats_tracking.db.base import Base
from ats_tracking.db import models  # noqa: F401


def create_schema(engine: Engine) -> None:
    """Create ``job_applications`` if it is missing; safe on an initialised database."""
    Base.metadata.create_all(bind=engine)


def init_database() -> dict[str, str]:
    from ats_tracking.db.session import get_engine

    engine = get_engine()
    create_schema(engine)
    return {"backend": engine.dialect.name, "database": engine.url.render_as_string(hide_password=True)}

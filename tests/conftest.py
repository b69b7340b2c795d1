from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from ats_tracking.config import Settings, get_settings
from ats_tracking.db.base import Base
from ats_tracking.db.init import create_schema
from ats_tracking.db.repositories import JobApplicationRepository, get_repository
from ats_tracking.db.session import create_db_engine, reset_engine
from ats_tracking.types import HumanResponse, JobApplication

MYSQL_URL = os.environ.get("ATS_TEST_MYSQL_URL", "")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("ATS_APP_ENV", "test")
    monkeypatch.setenv("ATS_BACKEND", "sqlite")
    monkeypatch.setenv("ATS_SQLITE_PATH", str(tmp_path / "ats-tracking.db3"))
    monkeypatch.delenv("ATS_DATABASE_URL", raising=False)
    get_settings.cache_clear()
    reset_engine()
    yield
    reset_engine()
    get_settings.cache_clear()


@pytest.fixture(
    params=[
        pytest.param("sqlite", id="sqlite"),
        pytest.param(
            "mysql",
            id="mysql",
            marks=pytest.mark.skipif(not MYSQL_URL, reason="ATS_TEST_MYSQL_URL not set"),
        ),
    ]
)
def db_session(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[Session]:
    if request.param == "mysql":
        settings = Settings(backend="mysql", database_url=MYSQL_URL)
    else:
        settings = Settings(backend="sqlite", sqlite_path=tmp_path / "repository.db3")

    engine = create_db_engine(settings)
    Base.metadata.drop_all(bind=engine)
    create_schema(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture()
def repo(db_session: Session) -> JobApplicationRepository:
    return get_repository(db_session)


def _application(**overrides: object) -> JobApplication:
    values: dict = dict(
        source="Test source",
        company="Test company",
        job_title="Test job title",
        application_date=date(2000, 1, 1),
    )
    values.update(overrides)
    return JobApplication(**values)


def _full_application(**overrides: object) -> JobApplication:
    values: dict = dict(
        time_investment=timedelta(seconds=83),
        human_response=HumanResponse.REJECTION,
        human_response_date=date(2000, 1, 2),
        application_website="http://example.com",
        notes="Test notes\nWith newline",
    )
    values.update(overrides)
    return _application(**values)


@pytest.fixture()
def make_application():
    """Minimal application; every nullable field is unset."""
    return _application


@pytest.fixture()
def make_full_application():
    return _full_application

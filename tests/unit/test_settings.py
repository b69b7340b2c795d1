from pathlib import Path

import pytest
from pydantic import ValidationError
from sqlalchemy.engine import URL

from ats_tracking.config import Settings


def test_sqlite_is_the_default_backend(tmp_path: Path) -> None:
    settings = Settings(sqlite_path=tmp_path / "apps.db3")
    assert settings.backend == "sqlite"
    assert settings.resolved_database_url() == f"sqlite:///{tmp_path / 'apps.db3'}"


def test_default_sqlite_file_lives_in_home_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ATS_SQLITE_PATH", raising=False)
    assert Settings().sqlite_path == Path.home() / "ats-tracking.db3"


def test_mysql_url_is_built_from_db_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ATS_BACKEND", "mysql")
    monkeypatch.setenv("DB_HOST", "db.example")
    monkeypatch.setenv("DB_PORT", "3307")
    monkeypatch.setenv("DB_USER", "tracker")
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    monkeypatch.setenv("DB_DATABASE", "applications")

    url = Settings().resolved_database_url()

    assert isinstance(url, URL)
    assert url.drivername == "mysql+pymysql"
    assert (url.host, url.port, url.username, url.database) == ("db.example", 3307, "tracker", "applications")
    assert url.password == "s3cret"


def test_database_url_overrides_backend_settings() -> None:
    settings = Settings(backend="mysql", database_url="sqlite:///elsewhere.db3")
    assert settings.resolved_database_url() == "sqlite:///elsewhere.db3"


def test_backend_is_validated() -> None:
    with pytest.raises(ValidationError):
        Settings(backend="postgres")


def test_backend_name_is_normalised() -> None:
    assert Settings(backend=" MySQL ").backend == "mysql"

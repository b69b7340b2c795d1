from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

load_dotenv()

BACKENDS = ("sqlite", "mysql")
SQLITE_FILE_NAME = "ats-tracking.db3"


def _default_sqlite_path() -> Path:
    return Path.home() / SQLITE_FILE_NAME


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ATS_",
        extra="ignore",
        populate_by_name=True,
    )

    app_env: str = "development"
    log_level: str = "WARNING"

    backend: str = "sqlite"
    database_url: str = ""
    sqlite_path: Path = Field(default_factory=_default_sqlite_path)

    # The networked backend keeps the plain DB_* names the tool has always read.
    db_host: str = Field(default="localhost", validation_alias=AliasChoices("DB_HOST", "ATS_DB_HOST"))
    db_port: int = Field(default=3306, validation_alias=AliasChoices("DB_PORT", "ATS_DB_PORT"))
    db_user: str = Field(default="", validation_alias=AliasChoices("DB_USER", "ATS_DB_USER"))
    db_password: str = Field(default="", validation_alias=AliasChoices("DB_PASSWORD", "ATS_DB_PASSWORD"))
    db_database: str = Field(default="", validation_alias=AliasChoices("DB_DATABASE", "ATS_DB_DATABASE"))

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in BACKENDS:
            raise ValueError(f"backend must be one of {list(BACKENDS)}")
        return value

    @field_validator("sqlite_path")
    @classmethod
    def expand_sqlite_path(cls, value: Path) -> Path:
        return value.expanduser()

    def resolved_database_url(self) -> str | URL:
        """SQLAlchemy URL for the configured backend; ``database_url`` wins when set."""
        if self.database_url:
            return self.database_url
        if self.backend == "mysql":
            return URL.create(
                "mysql+pymysql",
                username=self.db_user or None,
                password=self.db_password or None,
                host=self.db_host,
                port=self.db_port,
                database=self.db_database or None,
            )
        return f"sqlite:///{self.sqlite_path}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

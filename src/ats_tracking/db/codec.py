from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from typing import Any

from ats_tracking.errors import ValueDecodeError
from ats_tracking.types import JOB_APPLICATION_COLUMNS, HumanResponse, JobApplication

DATE_COLUMNS = frozenset({"application_date", "human_response_date"})
REQUIRED_COLUMNS = ("id", "source", "company", "job_title", "application_date")


class ValueCodec(ABC):
    """Converts record values to and from what a storage engine binds and returns."""

    @abstractmethod
    def encode_date(self, value: date) -> Any: ...

    @abstractmethod
    def decode_date(self, raw: Any) -> date: ...

    @abstractmethod
    def encode_duration(self, value: timedelta) -> Any: ...

    @abstractmethod
    def decode_duration(self, raw: Any) -> timedelta: ...

    def encode(self, column: str, value: Any) -> Any:
        if value is None:
            return None
        if column in DATE_COLUMNS:
            return self.encode_date(value)
        if column == "time_investment":
            return self.encode_duration(value)
        if column == "human_response":
            return value.code
        return value

    def encode_record(self, application: JobApplication) -> dict[str, Any]:
        """Bind parameters for every non-id column."""
        return {
            column: self.encode(column, getattr(application, column))
            for column in JOB_APPLICATION_COLUMNS
        }

    def decode_row(self, row: Mapping[str, Any]) -> JobApplication:
        for column in REQUIRED_COLUMNS:
            if row[column] is None:
                raise ValueDecodeError(f"Column '{column}' of job application is NULL")

        time_investment = row["time_investment"]
        response_date = row["human_response_date"]
        return JobApplication(
            id=int(row["id"]),
            source=_text(row["source"]),
            company=_text(row["company"]),
            job_title=_text(row["job_title"]),
            application_date=self.decode_date(row["application_date"]),
            time_investment=None if time_investment is None else self.decode_duration(time_investment),
            human_response=HumanResponse.from_code(row["human_response"]),
            human_response_date=None if response_date is None else self.decode_date(response_date),
            application_website=_optional_text(row["application_website"]),
            notes=_optional_text(row["notes"]),
        )


class MySQLCodec(ValueCodec):
    """PyMySQL binds ``date`` and ``timedelta`` natively and returns TIME as ``timedelta``."""

    def encode_date(self, value: date) -> date:
        return value

    def decode_date(self, raw: Any) -> date:
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw
        return _parse_iso_date(raw)

    def encode_duration(self, value: timedelta) -> timedelta:
        return value

    def decode_duration(self, raw: Any) -> timedelta:
        if isinstance(raw, timedelta):
            return raw
        if isinstance(raw, time):
            return timedelta(hours=raw.hour, minutes=raw.minute, seconds=raw.second)
        if isinstance(raw, (bytes, str)):
            return _parse_clock(_text(raw))
        raise ValueDecodeError(f"Unable to decode {type(raw).__name__} into a duration")


class SQLiteCodec(ValueCodec):
    """Dates as ISO ``YYYY-MM-DD`` text, durations as whole seconds."""

    def encode_date(self, value: date) -> str:
        return value.isoformat()

    def decode_date(self, raw: Any) -> date:
        return _parse_iso_date(raw)

    def encode_duration(self, value: timedelta) -> int:
        return int(value.total_seconds())

    def decode_duration(self, raw: Any) -> timedelta:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueDecodeError(f"Unable to decode {raw!r} into a duration")
        return timedelta(seconds=int(raw))


def like_pattern(query: str, escape: str = "!") -> str:
    """Lower-cased ``%query%`` with LIKE metacharacters escaped."""
    escaped = (
        query.lower()
        .replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )
    return f"%{escaped}%"


def _text(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return raw.decode("utf-8")
    return str(raw)


def _optional_text(raw: Any) -> str | None:
    return None if raw is None else _text(raw)


def _parse_iso_date(raw: Any) -> date:
    try:
        return date.fromisoformat(_text(raw))
    except ValueError as exc:
        raise ValueDecodeError(f"Unable to decode {raw!r} into a date") from exc


def _parse_clock(value: str) -> timedelta:
    try:
        hours, minutes, seconds = value.split(":")
        return timedelta(hours=int(hours), minutes=int(minutes), seconds=int(float(seconds)))
    except ValueError as exc:
        raise ValueDecodeError(f"Unable to decode {value!r} into a duration") from exc

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy import ColumnElement, Executable, Select, column, delete, func, or_, select, table, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ats_tracking.db.codec import ValueCodec, like_pattern
from ats_tracking.db.models import JobApplicationRow
from ats_tracking.errors import PartialUpdateError, UnknownBackendError
from ats_tracking.types import (
    ALL_COLUMNS,
    JOB_APPLICATION_COLUMNS,
    HumanResponse,
    IdField,
    JobApplication,
    JobApplicationField,
    PartialJobApplication,
)

logger = logging.getLogger(__name__)

# Untyped columns: values pass through the backend codec, never SQLAlchemy's type processors.
JOB_APPLICATIONS = table(JobApplicationRow.__tablename__, *(column(name) for name in ALL_COLUMNS))
SEARCH_COLUMNS = ("source", "company", "job_title")


def plan_partial_update(
    partial: PartialJobApplication,
) -> tuple[int, list[JobApplicationField]]:
    """Split a projection into its id and the ordered entries to assign.

    Raises ``PartialUpdateError`` before anything reaches the database.
    """
    ids: list[int] = []
    assignments: list[JobApplicationField] = []
    for entry in partial.entries:
        if isinstance(entry, IdField):
            ids.append(entry.value)
        else:
            assignments.append(entry)

    if not ids:
        raise PartialUpdateError(PartialUpdateError.NO_ID)
    if len(ids) > 1:
        raise PartialUpdateError(PartialUpdateError.MULTIPLE_IDS)
    if not assignments:
        raise PartialUpdateError(PartialUpdateError.NO_CHANGES)
    return ids[0], assignments


def query_match(query: str) -> ColumnElement[bool]:
    pattern = like_pattern(query)
    return or_(
        *(func.lower(JOB_APPLICATIONS.c[name]).like(pattern, escape="!") for name in SEARCH_COLUMNS)
    )


class JobApplicationRepository(ABC):
    """CRUD over ``job_applications`` for one open session.

    Writes against an id that does not exist change nothing and do not raise. Engine
    errors are re-raised unchanged after the session is rolled back.
    """

    codec: ValueCodec

    def __init__(self, session: Session):
        self.session = session

    # -- reads ------------------------------------------------------------

    def get_job_applications(self) -> list[JobApplication]:
        return self._fetch_all(select(JOB_APPLICATIONS))

    def get_pending_job_applications(self) -> list[JobApplication]:
        return self.search_by_human_response(HumanResponse.NONE)

    def get_job_application_by_id(self, application_id: int) -> JobApplication | None:
        row = self.session.execute(
            select(JOB_APPLICATIONS).where(JOB_APPLICATIONS.c.id == application_id)
        ).mappings().first()
        return None if row is None else self.codec.decode_row(row)

    def search_job_applications(self, query: str) -> list[JobApplication]:
        return self._fetch_all(select(JOB_APPLICATIONS).where(query_match(query)))

    def search_by_human_response(self, human_response: HumanResponse) -> list[JobApplication]:
        return self._fetch_all(select(JOB_APPLICATIONS).where(self._response_is(human_response)))

    def search_by_query_and_human_response(
        self, query: str, human_response: HumanResponse
    ) -> list[JobApplication]:
        return self._fetch_all(
            select(JOB_APPLICATIONS).where(query_match(query), self._response_is(human_response))
        )

    # -- writes -----------------------------------------------------------

    @abstractmethod
    def insert_job_application(self, application: JobApplication) -> JobApplication:
        """Store ``application`` under a new id and return a copy carrying that id."""

    def update_human_response(
        self,
        application_id: int,
        human_response: HumanResponse,
        human_response_date: date | None = None,
    ) -> None:
        """Set the response; a missing date means today by the engine's clock."""
        response_date = self.codec.encode("human_response_date", human_response_date)
        self._execute_write(
            update(JOB_APPLICATIONS)
            .where(JOB_APPLICATIONS.c.id == application_id)
            .values(
                human_response=self.codec.encode("human_response", human_response),
                human_response_date=self.today() if response_date is None else response_date,
            )
        )

    def update_job_application(self, application: JobApplication) -> None:
        assignments = [(name, getattr(application, name)) for name in JOB_APPLICATION_COLUMNS]
        self._update_columns(application.id, assignments)

    def update_job_application_partial(self, partial: PartialJobApplication) -> None:
        application_id, entries = plan_partial_update(partial)
        self._update_columns(application_id, [(entry.name, entry.value) for entry in entries])

    def delete_job_application(self, application_id: int) -> None:
        result = self._execute_write(
            delete(JOB_APPLICATIONS).where(JOB_APPLICATIONS.c.id == application_id)
        )
        logger.info("Deleted job application %s (%s row(s))", application_id, result.rowcount)

    @abstractmethod
    def today(self) -> ColumnElement[Any]:
        """SQL expression for the current date on the engine's clock."""

    # -- helpers ----------------------------------------------------------

    def _response_is(self, human_response: HumanResponse) -> ColumnElement[bool]:
        return JOB_APPLICATIONS.c.human_response == self.codec.encode("human_response", human_response)

    def _fetch_all(self, statement: Select) -> list[JobApplication]:
        rows = self.session.execute(statement).mappings().all()
        return [self.codec.decode_row(row) for row in rows]

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def _execute_write(self, statement: Executable) -> CursorResult:
        with self._transaction() as session:
            return session.execute(statement)

    def _update_columns(self, application_id: int, assignments: Sequence[tuple[str, Any]]) -> None:
        # A column named twice is assigned once, with the last value given.
        values: dict[str, Any] = {}
        for name, value in assignments:
            if name not in JOB_APPLICATION_COLUMNS:
                raise PartialUpdateError(f"Unable to generate SQL statement for column '{name}'")
            values[name] = self.codec.encode(name, value)
        logger.debug("Updating job application %s: %s", application_id, ", ".join(values))
        self._execute_write(
            update(JOB_APPLICATIONS).where(JOB_APPLICATIONS.c.id == application_id).values(**values)
        )


def get_repository(session: Session, backend: str | None = None) -> JobApplicationRepository:
    """Adapter for ``backend``, defaulting to the dialect the session is bound to."""
    from ats_tracking.db.mysql_backend import MySQLJobApplicationRepository
    from ats_tracking.db.sqlite_backend import SQLiteJobApplicationRepository

    name = (backend or session.get_bind().dialect.name).lower()
    if name in {"mysql", "mariadb"}:
        return MySQLJobApplicationRepository(session)
    if name == "sqlite":
        return SQLiteJobApplicationRepository(session)
    raise UnknownBackendError(f"no job application repository for backend '{name}'")

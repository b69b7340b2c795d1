from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import ColumnElement, func, insert

from ats_tracking.db.codec import SQLiteCodec
from ats_tracking.db.repositories import JOB_APPLICATIONS, JobApplicationRepository
from ats_tracking.types import JobApplication

logger = logging.getLogger(__name__)


class SQLiteJobApplicationRepository(JobApplicationRepository):
    """Embedded single-file database."""

    codec = SQLiteCodec()

    def insert_job_application(self, application: JobApplication) -> JobApplication:
        with self._transaction() as session:
            new_id = session.execute(
                insert(JOB_APPLICATIONS)
                .values(**self.codec.encode_record(application))
                .returning(JOB_APPLICATIONS.c.id)
            ).scalar_one()
        logger.info("Inserted job application %s", new_id)
        return application.model_copy(update={"id": int(new_id)})

    def today(self) -> ColumnElement[Any]:
        # Host clock in local time, like MySQL's CURDATE().
        return func.date("now", "localtime")

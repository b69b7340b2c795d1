from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import ColumnElement, func, insert

from ats_tracking.db.codec import MySQLCodec
from ats_tracking.db.repositories import JOB_APPLICATIONS, JobApplicationRepository
from ats_tracking.types import JobApplication

logger = logging.getLogger(__name__)


class MySQLJobApplicationRepository(JobApplicationRepository):
    """Networked MySQL/MariaDB server reached through PyMySQL."""

    codec = MySQLCodec()

    def insert_job_application(self, application: JobApplication) -> JobApplication:
        with self._transaction() as session:
            result = session.execute(
                insert(JOB_APPLICATIONS).values(**self.codec.encode_record(application))
            )
            new_id = int(result.lastrowid)
        logger.info("Inserted job application %s", new_id)
        return application.model_copy(update={"id": new_id})

    def today(self) -> ColumnElement[Any]:
        return func.curdate()

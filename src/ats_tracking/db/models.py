from __future__ import annotations

from datetime import date, time

from sqlalchemy import Date, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from ats_tracking.db.base import Base


class JobApplicationRow(Base):
    """Table definition only; rows are read and written through the backend codecs."""

    __tablename__ = "job_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    job_title: Mapped[str] = mapped_column(String(255), nullable=False)
    application_date: Mapped[date] = mapped_column(Date, nullable=False)
    # MySQL TIME; the embedded file stores whole seconds in the same column.
    time_investment: Mapped[time | None] = mapped_column(Time, nullable=True)
    human_response: Mapped[str] = mapped_column(
        String(2), default="N", server_default="N", nullable=False
    )
    human_response_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    application_website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

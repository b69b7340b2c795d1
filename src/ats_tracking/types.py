from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ats_tracking.errors import ValueDecodeError

# Non-id columns in table order.
JOB_APPLICATION_COLUMNS = (
    "source",
    "company",
    "job_title",
    "application_date",
    "time_investment",
    "human_response",
    "human_response_date",
    "application_website",
    "notes",
)
ALL_COLUMNS = ("id", *JOB_APPLICATION_COLUMNS)
NULLABLE_COLUMNS = frozenset(
    {"time_investment", "human_response_date", "application_website", "notes"}
)


class HumanResponse(Enum):
    """Employer reply to an application, valued by its storage code."""

    NONE = "N"
    REJECTION = "R"
    INTERVIEW_REQUEST = "I"
    INTERVIEWED_THEN_REJECTED = "IR"
    JOB_OFFER = "J"

    @property
    def code(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _LABELS[self]

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, text: str) -> HumanResponse:
        """Strict parse of a code or label, as typed by a user."""
        try:
            return _LOOKUP[text.strip().lower()]
        except KeyError:
            raise ValueError(f"Unable to parse value '{text}' into a human response") from None

    @classmethod
    def from_code(cls, raw: object) -> HumanResponse:
        """Lenient decode of a stored value.

        Unknown codes fall back to ``NONE``; a NULL is an error so that an unset column
        is not mistaken for "no response yet".
        """
        if raw is None:
            raise ValueDecodeError("Unable to decode NULL into a human response")
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if not isinstance(raw, str):
            raise ValueDecodeError(f"Unable to decode {type(raw).__name__} into a human response")
        return _LOOKUP.get(raw.strip().lower(), cls.NONE)


_LABELS = {
    HumanResponse.NONE: "No response yet",
    HumanResponse.REJECTION: "Rejection",
    HumanResponse.INTERVIEW_REQUEST: "Interview request",
    HumanResponse.INTERVIEWED_THEN_REJECTED: "Interviewed, then rejected",
    HumanResponse.JOB_OFFER: "Job offer",
}

_LOOKUP: dict[str, HumanResponse] = {"": HumanResponse.NONE}
for _status, _label in _LABELS.items():
    _LOOKUP[_status.code.lower()] = _status
    _LOOKUP[_label.lower()] = _status
_LOOKUP["interviewed then rejected"] = HumanResponse.INTERVIEWED_THEN_REJECTED


def _whole_seconds(value: timedelta | None) -> timedelta | None:
    if value is None:
        return None
    if value < timedelta(0):
        raise ValueError("time_investment cannot be negative")
    return timedelta(seconds=int(value.total_seconds()))


class JobApplication(BaseModel):
    """One row of the ``job_applications`` table. ``id == 0`` means not yet stored."""

    id: int = 0
    source: str
    company: str
    job_title: str
    application_date: date
    time_investment: timedelta | None = None
    human_response: HumanResponse = HumanResponse.NONE
    human_response_date: date | None = None
    application_website: str | None = None
    notes: str | None = None

    @field_validator("time_investment")
    @classmethod
    def validate_time_investment(cls, value: timedelta | None) -> timedelta | None:
        return _whole_seconds(value)


# -- field projection ---------------------------------------------------------


class _FieldEntry(BaseModel):
    model_config = ConfigDict(frozen=True)


class IdField(_FieldEntry):
    name: Literal["id"] = "id"
    value: int


class SourceField(_FieldEntry):
    name: Literal["source"] = "source"
    value: str


class CompanyField(_FieldEntry):
    name: Literal["company"] = "company"
    value: str


class JobTitleField(_FieldEntry):
    name: Literal["job_title"] = "job_title"
    value: str


class ApplicationDateField(_FieldEntry):
    name: Literal["application_date"] = "application_date"
    value: date


class TimeInvestmentField(_FieldEntry):
    name: Literal["time_investment"] = "time_investment"
    value: timedelta | None = None

    @field_validator("value")
    @classmethod
    def validate_value(cls, value: timedelta | None) -> timedelta | None:
        return _whole_seconds(value)


class HumanResponseField(_FieldEntry):
    name: Literal["human_response"] = "human_response"
    value: HumanResponse


class HumanResponseDateField(_FieldEntry):
    name: Literal["human_response_date"] = "human_response_date"
    value: date | None = None


class ApplicationWebsiteField(_FieldEntry):
    name: Literal["application_website"] = "application_website"
    value: str | None = None


class NotesField(_FieldEntry):
    name: Literal["notes"] = "notes"
    value: str | None = None


JobApplicationField = Annotated[
    Union[
        IdField,
        SourceField,
        CompanyField,
        JobTitleField,
        ApplicationDateField,
        TimeInvestmentField,
        HumanResponseField,
        HumanResponseDateField,
        ApplicationWebsiteField,
        NotesField,
    ],
    Field(discriminator="name"),
]

FIELD_TYPES: dict[str, type[_FieldEntry]] = {
    "id": IdField,
    "source": SourceField,
    "company": CompanyField,
    "job_title": JobTitleField,
    "application_date": ApplicationDateField,
    "time_investment": TimeInvestmentField,
    "human_response": HumanResponseField,
    "human_response_date": HumanResponseDateField,
    "application_website": ApplicationWebsiteField,
    "notes": NotesField,
}


class PartialJobApplication(BaseModel):
    """Ordered set of field entries for a single partial update.

    Clearing a nullable column takes an explicit entry with ``value=None``; columns
    without an entry are left untouched.
    """

    entries: list[JobApplicationField] = Field(default_factory=list)

    @classmethod
    def of(cls, *entries: JobApplicationField) -> PartialJobApplication:
        return cls(entries=list(entries))

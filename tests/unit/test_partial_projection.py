from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from ats_tracking.db.repositories import plan_partial_update
from ats_tracking.errors import PartialUpdateError
from ats_tracking.types import (
    CompanyField,
    HumanResponse,
    HumanResponseField,
    IdField,
    JobApplication,
    NotesField,
    PartialJobApplication,
    SourceField,
    TimeInvestmentField,
)

NO_ID = "Unable to generate SQL statement because there is no id field"
MULTIPLE_IDS = "Unable to generate SQL statement because there are multiple id fields"
NO_CHANGES = "Unable to generate SQL statement because there are no changes"


@pytest.mark.parametrize(
    "entries",
    [
        [CompanyField(value="Acme")],
        [CompanyField(value="Acme"), SourceField(value="Indeed"), NotesField(value=None)],
        [],
    ],
)
def test_missing_id_is_rejected(entries: list) -> None:
    with pytest.raises(PartialUpdateError) as excinfo:
        plan_partial_update(PartialJobApplication(entries=entries))
    assert str(excinfo.value) == NO_ID


@pytest.mark.parametrize(
    "entries",
    [
        [IdField(value=1), CompanyField(value="Acme"), IdField(value=2)],
        [IdField(value=1), IdField(value=1)],
        [IdField(value=3), IdField(value=4), IdField(value=5), NotesField(value="x")],
    ],
)
def test_multiple_ids_are_rejected(entries: list) -> None:
    with pytest.raises(PartialUpdateError) as excinfo:
        plan_partial_update(PartialJobApplication(entries=entries))
    assert str(excinfo.value) == MULTIPLE_IDS


def test_id_only_is_rejected() -> None:
    with pytest.raises(PartialUpdateError) as excinfo:
        plan_partial_update(PartialJobApplication.of(IdField(value=7)))
    assert str(excinfo.value) == NO_CHANGES


def test_plan_keeps_entry_order_and_drops_id() -> None:
    application_id, entries = plan_partial_update(
        PartialJobApplication.of(
            NotesField(value="later"),
            IdField(value=9),
            CompanyField(value="Acme"),
        )
    )
    assert application_id == 9
    assert [entry.name for entry in entries] == ["notes", "company"]


def test_projection_parses_from_plain_data() -> None:
    partial = PartialJobApplication.model_validate(
        {
            "entries": [
                {"name": "id", "value": 2},
                {"name": "human_response", "value": "IR"},
                {"name": "application_website", "value": None},
            ]
        }
    )
    assert isinstance(partial.entries[0], IdField)
    assert partial.entries[1] == HumanResponseField(value=HumanResponse.INTERVIEWED_THEN_REJECTED)
    assert partial.entries[2].value is None


def test_projection_rejects_unknown_column() -> None:
    with pytest.raises(ValidationError):
        PartialJobApplication.model_validate({"entries": [{"name": "id; DROP TABLE x", "value": 1}]})


def test_time_investment_is_truncated_to_seconds() -> None:
    entry = TimeInvestmentField(value=timedelta(seconds=90, microseconds=999_999))
    assert entry.value == timedelta(seconds=90)


def test_negative_time_investment_is_rejected() -> None:
    with pytest.raises(ValidationError):
        JobApplication(
            source="s",
            company="c",
            job_title="t",
            application_date=date(2020, 1, 1),
            time_investment=timedelta(seconds=-1),
        )


def test_new_application_defaults() -> None:
    application = JobApplication(source="s", company="c", job_title="t", application_date=date(2020, 1, 1))
    assert application.id == 0
    assert application.human_response is HumanResponse.NONE
    assert application.notes is None

from __future__ import annotations

import json
from datetime import date, timedelta
from typing import Any

import typer

from ats_tracking.db.init import init_database
from ats_tracking.db.repositories import JobApplicationRepository, get_repository
from ats_tracking.db.session import SessionLocal
from ats_tracking.logging_config import configure_logging
from ats_tracking.types import (
    FIELD_TYPES,
    NULLABLE_COLUMNS,
    HumanResponse,
    IdField,
    JobApplication,
    PartialJobApplication,
)

app = typer.Typer(help="Track job applications")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def serialize_application(application: JobApplication) -> dict[str, Any]:
    payload = application.model_dump(mode="json")
    payload["time_investment"] = (
        int(application.time_investment.total_seconds())
        if application.time_investment is not None
        else None
    )
    payload["human_response"] = application.human_response.label
    return payload


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _parse_date(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"{option} must be YYYY-MM-DD, got '{value}'") from None


def _parse_response(value: str) -> HumanResponse:
    try:
        return HumanResponse.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from None


def _require(repo: JobApplicationRepository, application_id: int) -> JobApplication:
    application = repo.get_job_application_by_id(application_id)
    if application is None:
        raise typer.BadParameter(f"job application {application_id} not found")
    return application


@app.command("init")
def init_cmd() -> None:
    """Create the job_applications table if it does not exist."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@app.command("list")
def list_cmd(pending: bool = typer.Option(False, "--pending", help="Only applications without a response")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = get_repository(db)
        applications = repo.get_pending_job_applications() if pending else repo.get_job_applications()
        _echo([serialize_application(item) for item in sorted(applications, key=lambda a: a.id)])


@app.command("search")
def search_cmd(
    query: str = typer.Option(..., "--query"),
    response: str | None = typer.Option(None, "--response"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = get_repository(db)
        if response is None:
            applications = repo.search_job_applications(query)
        else:
            applications = repo.search_by_query_and_human_response(query, _parse_response(response))
        _echo([serialize_application(item) for item in sorted(applications, key=lambda a: a.id)])


@app.command("show")
def show_cmd(application_id: int = typer.Option(..., "--id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        _echo(serialize_application(_require(get_repository(db), application_id)))


@app.command("create")
def create_cmd(
    source: str = typer.Option(..., "--source"),
    company: str = typer.Option(..., "--company"),
    job_title: str = typer.Option(..., "--job-title"),
    application_date: str | None = typer.Option(None, "--date", help="Defaults to today"),
    time_investment: int | None = typer.Option(None, "--time-investment", min=0, help="Seconds spent applying"),
    website: str | None = typer.Option(None, "--website"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    configure_logging()
    ensure_initialized()
    application = JobApplication(
        source=source,
        company=company,
        job_title=job_title,
        application_date=_parse_date(application_date, "--date") or date.today(),
        time_investment=None if time_investment is None else timedelta(seconds=time_investment),
        application_website=website,
        notes=notes,
    )
    with SessionLocal() as db:
        created = get_repository(db).insert_job_application(application)
        _echo(serialize_application(created))


@app.command("respond")
def respond_cmd(
    application_id: int = typer.Option(..., "--id"),
    response: str = typer.Option(..., "--response"),
    response_date: str | None = typer.Option(None, "--date", help="Defaults to today"),
) -> None:
    """Record the employer's reply."""
    configure_logging()
    ensure_initialized()
    status = _parse_response(response)
    with SessionLocal() as db:
        repo = get_repository(db)
        _require(repo, application_id)
        repo.update_human_response(application_id, status, _parse_date(response_date, "--date"))
        _echo(serialize_application(_require(repo, application_id)))


@app.command("edit")
def edit_cmd(
    application_id: int = typer.Option(..., "--id"),
    source: str | None = typer.Option(None, "--source"),
    company: str | None = typer.Option(None, "--company"),
    job_title: str | None = typer.Option(None, "--job-title"),
    application_date: str | None = typer.Option(None, "--date"),
    time_investment: int | None = typer.Option(None, "--time-investment", min=0),
    response: str | None = typer.Option(None, "--response"),
    response_date: str | None = typer.Option(None, "--response-date"),
    website: str | None = typer.Option(None, "--website"),
    notes: str | None = typer.Option(None, "--notes"),
    clear: list[str] | None = typer.Option(None, "--clear", help="Nullable column to set to NULL"),
) -> None:
    """Change only the given fields of one application."""
    configure_logging()
    ensure_initialized()

    changes: dict[str, Any] = {
        "source": source,
        "company": company,
        "job_title": job_title,
        "application_date": _parse_date(application_date, "--date"),
        "time_investment": None if time_investment is None else timedelta(seconds=time_investment),
        "human_response": None if response is None else _parse_response(response),
        "human_response_date": _parse_date(response_date, "--response-date"),
        "application_website": website,
        "notes": notes,
    }
    entries: list[Any] = [IdField(value=application_id)]
    entries.extend(FIELD_TYPES[name](value=value) for name, value in changes.items() if value is not None)
    for name in clear or []:
        if name not in NULLABLE_COLUMNS:
            raise typer.BadParameter(f"--clear accepts one of {sorted(NULLABLE_COLUMNS)}, got '{name}'")
        entries.append(FIELD_TYPES[name](value=None))

    with SessionLocal() as db:
        repo = get_repository(db)
        _require(repo, application_id)
        try:
            repo.update_job_application_partial(PartialJobApplication(entries=entries))
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from None
        _echo(serialize_application(_require(repo, application_id)))


@app.command("delete")
def delete_cmd(application_id: int = typer.Option(..., "--id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = get_repository(db)
        _require(repo, application_id)
        repo.delete_job_application(application_id)
        _echo({"deleted": application_id})

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, request

from ..common import responses as resp
from ..common.datetime_utils import format_time, normalize_time_separator, parse_date, parse_time
from ..common.responses import ErrorDetail, validation_detail
from ..container import Container
from ..core.constants import DATE_FORMAT
from ..core.exceptions import DomainError, DuplicateError, InvalidInputError, NotFoundError
from .model import Timesheet, TimesheetEntry, TimesheetFilter, TimesheetStats
from .pdf_export import export_filename, render_timesheet_pdf

logger = logging.getLogger(__name__)


class PayloadError(Exception):
    """Request body has the wrong shape (missing fields, wrong JSON types)."""

    def __init__(self, details: list[ErrorDetail]):
        super().__init__("invalid payload")
        self.details = details


class FieldFormatError(Exception):
    """A field is present but its text cannot be parsed (dates, times)."""

    def __init__(self, field: str, message: str, summary: str):
        super().__init__(summary)
        self.detail = validation_detail(field, message)
        self.summary = summary


# -------- Request parsing --------
def _json_object() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise PayloadError([validation_detail("body", "request body must be a JSON object")])
    return body


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_str(body: dict, field: str, errors: list[ErrorDetail]) -> str:
    value = body.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        errors.append(validation_detail(field, "must be a string"))
        return ""
    return value


def _optional_number(body: dict, field: str, errors: list[ErrorDetail]) -> Optional[float]:
    value = body.get(field)
    if value is None:
        return None
    if not _is_number(value):
        errors.append(validation_detail(field, "must be a number"))
        return None
    return float(value)


def _timesheet_from_body(body: dict, *, timesheet_id: int = 0) -> Timesheet:
    errors: list[ErrorDetail] = []

    name = body.get("employee_name")
    if not isinstance(name, str) or name == "":
        errors.append(validation_detail("employee_name", "required string"))

    for field in ("month", "year"):
        value = body.get(field)
        if not _is_int(value) or value == 0:
            errors.append(validation_detail(field, "required integer"))

    department = _optional_str(body, "department", errors)

    twd = body.get("total_working_days")
    if twd is not None and not _is_int(twd):
        errors.append(validation_detail("total_working_days", "must be an integer"))

    if errors:
        raise PayloadError(errors)

    return Timesheet(
        id=timesheet_id,
        employee_name=name,
        department=department,
        month=body["month"],
        year=body["year"],
        total_working_days=twd,
    )


def _parse_time_field(raw: str, field: str):
    value = normalize_time_separator(raw)
    try:
        return parse_time(value)
    except InvalidInputError:
        raise FieldFormatError(field, "format HH:MM or HH:MM:SS", f"Invalid {field}") from None


def _entry_from_body(body: dict, *, entry_id: int = 0, timesheet_id: int = 0, date_required: bool) -> TimesheetEntry:
    errors: list[ErrorDetail] = []

    raw_date = body.get("date")
    if raw_date is not None and not isinstance(raw_date, str):
        errors.append(validation_detail("date", "must be a string"))
    elif date_required and not raw_date:
        errors.append(validation_detail("date", "required string"))

    start = _optional_str(body, "start_time", errors)
    end = _optional_str(body, "end_time", errors)
    total_hours = _optional_number(body, "total_hours", errors)
    overtime_hours = _optional_number(body, "overtime_hours", errors)
    remarks = _optional_str(body, "remarks", errors)

    if errors:
        raise PayloadError(errors)

    work_date = None
    if raw_date:
        try:
            work_date = parse_date(raw_date)
        except ValueError:
            raise FieldFormatError("date", "format YYYY-MM-DD", "Invalid date") from None

    return TimesheetEntry(
        id=entry_id,
        timesheet_id=timesheet_id,
        work_date=work_date,
        start_time=_parse_time_field(start, "start_time"),
        end_time=_parse_time_field(end, "end_time"),
        total_hours=total_hours,
        overtime_hours=overtime_hours,
        remarks=remarks,
    )


def _optional_int_arg(name: str) -> Optional[int]:
    # Non-numeric query values are ignored rather than rejected.
    value = request.args.get(name, "")
    try:
        return int(value) if value else None
    except ValueError:
        return None


# -------- Response shaping --------
def timesheet_header_json(ts: Timesheet) -> dict:
    return {
        "id": ts.id,
        "employee_name": ts.employee_name,
        "department": ts.department,
        "month": ts.month,
        "year": ts.year,
        "total_working_days": ts.total_working_days,
        "created_at": ts.created_at.isoformat() if ts.created_at else None,
    }


def entry_json(e: TimesheetEntry) -> dict:
    return {
        "id": e.id,
        "date": e.work_date.strftime(DATE_FORMAT) if e.work_date else None,
        "day_name": e.work_date.strftime("%A") if e.work_date else None,
        "start_time": format_time(e.start_time),
        "end_time": format_time(e.end_time),
        "total_hours": e.total_hours,
        "overtime_hours": e.overtime_hours,
        "remarks": e.remarks,
    }


def timesheet_detail_json(ts: Timesheet, stats: TimesheetStats) -> dict:
    out = timesheet_header_json(ts)
    out["summary"] = {
        "days_filled": stats.days_filled,
        "total_hours": stats.total_hours,
        "overtime_hours": stats.overtime_hours,
    }
    out["entries"] = [entry_json(e) for e in ts.entries]
    return out


def register(app: Flask, container: Container) -> None:
    service = container.timesheet_service

    def api_errors(view):
        """Map payload and domain errors to envelope responses."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except PayloadError as e:
                return resp.unprocessable(e.details)
            except FieldFormatError as e:
                return resp.bad_request([e.detail], e.summary)
            except InvalidInputError as e:
                return resp.bad_request(str(e), "Invalid input")
            except NotFoundError:
                return resp.not_found("Not found")
            except DuplicateError:
                return resp.conflict("Duplicate")
            except DomainError:
                logger.exception("unmapped domain error in %s", request.path)
                return resp.internal()

        return wrapper

    # -------- Timesheets --------
    @app.route("/timesheets", methods=["POST"], endpoint="create_timesheet")
    @api_errors
    def create_timesheet():
        ts = _timesheet_from_body(_json_object())
        new_id = service.create_timesheet(ts)
        return resp.created({"id": new_id}, "Timesheet created")

    @app.route("/timesheets", methods=["GET"], endpoint="list_timesheets")
    @api_errors
    def list_timesheets():
        f = TimesheetFilter(
            employee_name=request.args.get("employee_name") or None,
            month=_optional_int_arg("month"),
            year=_optional_int_arg("year"),
        )
        items = service.list_timesheets(f)
        return resp.ok([timesheet_header_json(ts) for ts in items])

    @app.route("/timesheets/<int:timesheet_id>", methods=["GET"], endpoint="get_timesheet")
    @api_errors
    def get_timesheet(timesheet_id: int):
        ts = service.get_timesheet(timesheet_id)
        stats = service.stats(timesheet_id)
        return resp.ok(timesheet_detail_json(ts, stats))

    @app.route("/timesheets/<int:timesheet_id>", methods=["PUT"], endpoint="update_timesheet")
    @api_errors
    def update_timesheet(timesheet_id: int):
        ts = _timesheet_from_body(_json_object(), timesheet_id=timesheet_id)
        service.update_timesheet(ts)
        return resp.ok({"id": timesheet_id}, "Timesheet updated")

    @app.route("/timesheets/<int:timesheet_id>", methods=["DELETE"], endpoint="delete_timesheet")
    @api_errors
    def delete_timesheet(timesheet_id: int):
        service.delete_timesheet(timesheet_id)
        return resp.no_content()

    @app.route("/timesheets/<int:timesheet_id>/export", methods=["GET"], endpoint="export_timesheet")
    @api_errors
    def export_timesheet(timesheet_id: int):
        ts = service.get_timesheet(timesheet_id)
        pdf_bytes = render_timesheet_pdf(ts)
        return app.response_class(
            pdf_bytes,
            mimetype="application/pdf",
            headers={"Content-Disposition": f"inline; filename={export_filename(ts)}"},
        )

    # -------- Entries --------
    @app.route("/timesheets/<int:timesheet_id>/entries", methods=["POST"], endpoint="add_entry")
    @api_errors
    def add_entry(timesheet_id: int):
        e = _entry_from_body(_json_object(), timesheet_id=timesheet_id, date_required=True)
        new_id = service.add_entry(e)
        return resp.created({"id": new_id}, "Entry created")

    @app.route("/entries/<int:entry_id>", methods=["PUT"], endpoint="update_entry")
    @api_errors
    def update_entry(entry_id: int):
        e = _entry_from_body(_json_object(), entry_id=entry_id, date_required=False)
        service.update_entry(e)
        return resp.ok({"id": entry_id}, "Entry updated")

    @app.route("/entries/<int:entry_id>", methods=["DELETE"], endpoint="delete_entry")
    @api_errors
    def delete_entry(entry_id: int):
        service.delete_entry(entry_id)
        return resp.no_content()

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional


@dataclass
class TimesheetEntry:
    """One calendar day of attendance inside a timesheet."""

    id: int = 0
    timesheet_id: int = 0
    work_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    remarks: str = ""
    created_at: Optional[datetime] = None


@dataclass
class Timesheet:
    """Monthly timesheet header for one employee.

    ``entries`` is only populated when the timesheet is loaded by id; list
    queries return headers only.
    """

    id: int = 0
    employee_name: str = ""
    department: str = ""
    month: int = 0
    year: int = 0
    total_working_days: Optional[int] = None
    created_at: Optional[datetime] = None
    entries: list[TimesheetEntry] = field(default_factory=list)


@dataclass(frozen=True)
class TimesheetFilter:
    employee_name: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None


@dataclass(frozen=True)
class TimesheetStats:
    days_filled: int = 0
    total_hours: float = 0.0
    overtime_hours: float = 0.0

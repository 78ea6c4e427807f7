from __future__ import annotations

import logging
from typing import Sequence

from ..common.datetime_utils import hours_between
from ..common.validators import require_in_range, require_non_empty, require_positive_id
from ..core.constants import MAX_MONTH, MAX_YEAR, MIN_MONTH, MIN_YEAR
from ..core.exceptions import InvalidInputError
from .model import Timesheet, TimesheetEntry, TimesheetFilter, TimesheetStats
from .repository import TimesheetRepository

logger = logging.getLogger(__name__)


class TimesheetService:
    """Use cases for timesheets and their entries.

    Validates input before it reaches storage and fills in derived hours.
    Storage errors (NotFoundError, DuplicateError) pass through unchanged.
    """

    def __init__(self, timesheets: TimesheetRepository):
        self._timesheets = timesheets

    # -------- Timesheet headers --------
    def create_timesheet(self, ts: Timesheet) -> int:
        self._validate_header(ts)
        new_id = self._timesheets.create(ts)
        logger.info("timesheet %d created for %s %02d/%d", new_id, ts.employee_name, ts.month, ts.year)
        return new_id

    def get_timesheet(self, timesheet_id: int) -> Timesheet:
        return self._timesheets.find_by_id(int(timesheet_id))

    def list_timesheets(self, f: TimesheetFilter) -> Sequence[Timesheet]:
        return self._timesheets.list_headers(f)

    def update_timesheet(self, ts: Timesheet) -> None:
        require_positive_id(ts.id, "id")
        self._validate_header(ts)
        self._timesheets.update(ts)

    def delete_timesheet(self, timesheet_id: int) -> None:
        self._timesheets.delete(int(timesheet_id))
        logger.info("timesheet %d deleted", timesheet_id)

    # -------- Entries --------
    def add_entry(self, e: TimesheetEntry) -> int:
        require_positive_id(e.timesheet_id, "timesheet_id")
        if e.work_date is None:
            raise InvalidInputError("date is required")

        self._derive_total_hours(e)
        return self._timesheets.add_entry(e)

    def update_entry(self, e: TimesheetEntry) -> None:
        require_positive_id(e.id, "id")

        self._derive_total_hours(e)
        self._timesheets.update_entry(e)

    def delete_entry(self, entry_id: int) -> None:
        self._timesheets.delete_entry(int(entry_id))

    # -------- Summary --------
    def stats(self, timesheet_id: int) -> TimesheetStats:
        return self._timesheets.stats(int(timesheet_id))

    @staticmethod
    def _validate_header(ts: Timesheet) -> None:
        ts.employee_name = require_non_empty(ts.employee_name, "employee_name")
        require_in_range(ts.month, "month", MIN_MONTH, MAX_MONTH)
        require_in_range(ts.year, "year", MIN_YEAR, MAX_YEAR)
        if ts.total_working_days is not None and ts.total_working_days <= 0:
            raise InvalidInputError("total_working_days must be positive")

    @staticmethod
    def _derive_total_hours(e: TimesheetEntry) -> None:
        # Computed once at write time; reads return what was stored.
        if e.total_hours is None and e.start_time is not None and e.end_time is not None:
            e.total_hours = hours_between(e.start_time, e.end_time)

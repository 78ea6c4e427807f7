from __future__ import annotations

from typing import Protocol, Sequence

from .model import Timesheet, TimesheetEntry, TimesheetFilter, TimesheetStats


class TimesheetRepository(Protocol):
    """Storage interface for timesheets and their entries.

    Implementations raise NotFoundError when an id matches no row and
    DuplicateError when a uniqueness constraint is violated.
    """

    def create(self, ts: Timesheet) -> int:
        """Insert a header; writes the new id and created_at back into ``ts``."""

        raise NotImplementedError

    def find_by_id(self, timesheet_id: int) -> Timesheet:
        """Header plus entries ordered by work date ascending."""

        raise NotImplementedError

    def list_headers(self, f: TimesheetFilter) -> Sequence[Timesheet]:
        """Headers matching every present filter field; entries are not loaded."""

        raise NotImplementedError

    def update(self, ts: Timesheet) -> None:
        raise NotImplementedError

    def delete(self, timesheet_id: int) -> None:
        raise NotImplementedError

    def add_entry(self, e: TimesheetEntry) -> int:
        raise NotImplementedError

    def update_entry(self, e: TimesheetEntry) -> None:
        raise NotImplementedError

    def delete_entry(self, entry_id: int) -> None:
        raise NotImplementedError

    def stats(self, timesheet_id: int) -> TimesheetStats:
        raise NotImplementedError

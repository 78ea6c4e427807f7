from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.timesheet_api.timesheet_api.core.exceptions import DuplicateError, NotFoundError
from src.timesheet_api.timesheet_api.timesheets.model import (
    Timesheet,
    TimesheetEntry,
    TimesheetFilter,
    TimesheetStats,
)


class InMemoryTimesheets:
    """Dict-backed stand-in for MySQLTimesheetRepository (same error contract)."""

    def __init__(self):
        self.timesheets: dict[int, Timesheet] = {}
        self.entries: dict[int, TimesheetEntry] = {}
        self._next_ts_id = 1
        self._next_entry_id = 1
        self.created_at = datetime(2025, 1, 1, 9, 0, 0)

    def create(self, ts: Timesheet) -> int:
        for other in self.timesheets.values():
            if (other.employee_name, other.month, other.year) == (ts.employee_name, ts.month, ts.year):
                raise DuplicateError("duplicate")
        ts.id = self._next_ts_id
        ts.created_at = self.created_at
        self._next_ts_id += 1
        self.timesheets[ts.id] = replace(ts, entries=[])
        return ts.id

    def find_by_id(self, timesheet_id: int) -> Timesheet:
        ts = self.timesheets.get(timesheet_id)
        if not ts:
            raise NotFoundError("not found")
        entries = sorted(
            (replace(e) for e in self.entries.values() if e.timesheet_id == timesheet_id),
            key=lambda e: e.work_date,
        )
        return replace(ts, entries=entries)

    def list_headers(self, f: TimesheetFilter):
        items = [
            replace(ts, entries=[])
            for ts in self.timesheets.values()
            if (not f.employee_name or ts.employee_name == f.employee_name)
            and (f.month is None or ts.month == f.month)
            and (f.year is None or ts.year == f.year)
        ]
        items.sort(key=lambda t: (t.year, t.month, t.id), reverse=True)
        return items

    def update(self, ts: Timesheet) -> None:
        if ts.id not in self.timesheets:
            raise NotFoundError("not found")
        self.timesheets[ts.id] = replace(ts, entries=[], created_at=self.timesheets[ts.id].created_at)

    def delete(self, timesheet_id: int) -> None:
        if self.timesheets.pop(timesheet_id, None) is None:
            raise NotFoundError("not found")
        self.entries = {k: e for k, e in self.entries.items() if e.timesheet_id != timesheet_id}

    def add_entry(self, e: TimesheetEntry) -> int:
        if e.timesheet_id not in self.timesheets:
            raise NotFoundError("not found")
        e.id = self._next_entry_id
        e.created_at = self.created_at
        self._next_entry_id += 1
        self.entries[e.id] = replace(e)
        return e.id

    def update_entry(self, e: TimesheetEntry) -> None:
        current = self.entries.get(e.id)
        if not current:
            raise NotFoundError("not found")
        self.entries[e.id] = replace(
            e,
            timesheet_id=current.timesheet_id,
            work_date=e.work_date or current.work_date,
            created_at=current.created_at,
        )

    def delete_entry(self, entry_id: int) -> None:
        if self.entries.pop(entry_id, None) is None:
            raise NotFoundError("not found")

    def stats(self, timesheet_id: int) -> TimesheetStats:
        rows = [e for e in self.entries.values() if e.timesheet_id == timesheet_id]
        return TimesheetStats(
            days_filled=sum(1 for e in rows if e.total_hours is not None),
            total_hours=sum(e.total_hours or 0 for e in rows),
            overtime_hours=sum(e.overtime_hours or 0 for e in rows),
        )


class FakeCursor:
    """Replays scripted results for each execute() call and records the SQL.

    Each step is a dict with optional keys: rows, rowcount, lastrowid, raise.
    """

    def __init__(self, steps: list[dict]):
        self._steps = list(steps)
        self._current: dict = {}
        self.executed: list[tuple[str, tuple]] = []
        self.rowcount = -1
        self.lastrowid: Optional[int] = None
        self.closed = False

    def execute(self, sql: str, params: tuple = ()) -> None:
        self.executed.append((" ".join(sql.split()), tuple(params)))
        self._current = self._steps.pop(0) if self._steps else {}
        if "raise" in self._current:
            raise self._current["raise"]
        self.rowcount = self._current.get("rowcount", len(self._current.get("rows", [])))
        self.lastrowid = self._current.get("lastrowid")

    def fetchone(self):
        rows = self._current.get("rows", [])
        return rows[0] if rows else None

    def fetchall(self):
        return list(self._current.get("rows", []))

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary: bool = False):
        return self._cursor

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def close(self) -> None:
        self.closed = True


class FakeConnFactory:
    def __init__(self, *steps: dict):
        self.cursor = FakeCursor(list(steps))
        self.connections: list[FakeConnection] = []
        self.healthy = True

    def connect(self) -> FakeConnection:
        conn = FakeConnection(self.cursor)
        self.connections.append(conn)
        return conn

    def ping(self) -> bool:
        return self.healthy


@pytest.fixture
def timesheets_repo() -> InMemoryTimesheets:
    return InMemoryTimesheets()


@pytest.fixture
def fake_db():
    """Factory for FakeConnFactory: ``fake_db({"rows": [...]}, {"rowcount": 1})``."""
    return FakeConnFactory

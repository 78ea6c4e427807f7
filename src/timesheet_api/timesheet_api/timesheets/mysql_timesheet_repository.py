from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, TypeVar

import mysql.connector

from ..core.exceptions import DuplicateError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    is_missing_parent,
    normalize_mysql_time,
    to_float,
)
from .model import Timesheet, TimesheetEntry, TimesheetFilter, TimesheetStats
from .repository import TimesheetRepository

T = TypeVar("T")

_HEADER_COLUMNS = "id, employee_name, department, month, year, total_working_days, created_at"
_ENTRY_COLUMNS = "id, timesheet_id, work_date, start_time, end_time, total_hours, overtime_hours, remarks, created_at"


def _to_timesheet(r: dict) -> Timesheet:
    twd = r.get("total_working_days")
    return Timesheet(
        id=int(r["id"]),
        employee_name=r["employee_name"],
        department=r.get("department") or "",
        month=int(r["month"]),
        year=int(r["year"]),
        total_working_days=int(twd) if twd is not None else None,
        created_at=r.get("created_at"),
    )


def _to_entry(r: dict) -> TimesheetEntry:
    return TimesheetEntry(
        id=int(r["id"]),
        timesheet_id=int(r["timesheet_id"]),
        work_date=r["work_date"],
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        total_hours=to_float(r.get("total_hours")),
        overtime_hours=to_float(r.get("overtime_hours")),
        remarks=r.get("remarks") or "",
        created_at=r.get("created_at"),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _with_transaction(self, fn: Callable[[Any], T]) -> T:
        """Run ``fn(cursor)`` inside one transaction.

        Every current operation is a single statement; this is for
        multi-statement writes that must commit or roll back together.
        """
        with db_cursor(self._conn_factory) as (_, cur):
            return fn(cur)

    # -------- Timesheet headers --------
    def create(self, ts: Timesheet) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO timesheets(employee_name, department, month, year, total_working_days)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (ts.employee_name, ts.department, int(ts.month), int(ts.year), ts.total_working_days),
                )
                new_id = int(cur.lastrowid)
                cur.execute("SELECT created_at FROM timesheets WHERE id=%s", (new_id,))
                r = fetchone(cur)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateError("timesheet already exists for this employee and period") from e
            raise

        ts.id = new_id
        ts.created_at = r["created_at"] if r else None
        return new_id

    def find_by_id(self, timesheet_id: int) -> Timesheet:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_HEADER_COLUMNS} FROM timesheets WHERE id=%s",
                (int(timesheet_id),),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError(f"timesheet {timesheet_id} not found")
            ts = _to_timesheet(r)

            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM timesheet_entries
                WHERE timesheet_id=%s
                ORDER BY work_date ASC
                """,
                (int(timesheet_id),),
            )
            ts.entries = [_to_entry(row) for row in fetchall(cur)]
            return ts

    def list_headers(self, f: TimesheetFilter) -> Sequence[Timesheet]:
        clauses = ["1=1"]
        params: list[object] = []

        if f.employee_name:
            clauses.append("employee_name=%s")
            params.append(f.employee_name)
        if f.month is not None:
            clauses.append("month=%s")
            params.append(int(f.month))
        if f.year is not None:
            clauses.append("year=%s")
            params.append(int(f.year))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_HEADER_COLUMNS}
                FROM timesheets
                WHERE {where}
                ORDER BY year DESC, month DESC, id DESC
                """,
                tuple(params),
            )
            return [_to_timesheet(r) for r in fetchall(cur)]

    def update(self, ts: Timesheet) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE timesheets
                    SET employee_name=%s, department=%s, month=%s, year=%s, total_working_days=%s
                    WHERE id=%s
                    """,
                    (ts.employee_name, ts.department, int(ts.month), int(ts.year), ts.total_working_days, int(ts.id)),
                )
                affected = cur.rowcount
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateError("timesheet already exists for this employee and period") from e
            raise

        if affected == 0:
            raise NotFoundError(f"timesheet {ts.id} not found")

    def delete(self, timesheet_id: int) -> None:
        # Entries go with it through ON DELETE CASCADE.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timesheets WHERE id=%s", (int(timesheet_id),))
            affected = cur.rowcount
        if affected == 0:
            raise NotFoundError(f"timesheet {timesheet_id} not found")

    # -------- Entries --------
    def add_entry(self, e: TimesheetEntry) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO timesheet_entries(
                        timesheet_id, work_date, start_time, end_time, total_hours, overtime_hours, remarks
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(e.timesheet_id),
                        e.work_date,
                        e.start_time,
                        e.end_time,
                        e.total_hours,
                        e.overtime_hours,
                        e.remarks,
                    ),
                )
                new_id = int(cur.lastrowid)
                cur.execute("SELECT created_at FROM timesheet_entries WHERE id=%s", (new_id,))
                r = fetchone(cur)
        except mysql.connector.IntegrityError as exc:
            self._raise_entry_integrity(exc, e)
            raise

        e.id = new_id
        e.created_at = r["created_at"] if r else None
        return new_id

    def update_entry(self, e: TimesheetEntry) -> None:
        # A missing work_date keeps the stored one; every other field is replaced.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE timesheet_entries
                    SET work_date=COALESCE(%s, work_date), start_time=%s, end_time=%s,
                        total_hours=%s, overtime_hours=%s, remarks=%s
                    WHERE id=%s
                    """,
                    (
                        e.work_date,
                        e.start_time,
                        e.end_time,
                        e.total_hours,
                        e.overtime_hours,
                        e.remarks,
                        int(e.id),
                    ),
                )
                affected = cur.rowcount
        except mysql.connector.IntegrityError as exc:
            self._raise_entry_integrity(exc, e)
            raise

        if affected == 0:
            raise NotFoundError(f"entry {e.id} not found")

    def delete_entry(self, entry_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timesheet_entries WHERE id=%s", (int(entry_id),))
            affected = cur.rowcount
        if affected == 0:
            raise NotFoundError(f"entry {entry_id} not found")

    def stats(self, timesheet_id: int) -> TimesheetStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    COUNT(total_hours) AS days_filled,
                    COALESCE(SUM(total_hours), 0) AS total_hours,
                    COALESCE(SUM(overtime_hours), 0) AS overtime_hours
                FROM timesheet_entries
                WHERE timesheet_id=%s
                """,
                (int(timesheet_id),),
            )
            r: Optional[dict] = fetchone(cur)

        if not r:
            return TimesheetStats()
        return TimesheetStats(
            days_filled=int(r["days_filled"] or 0),
            total_hours=to_float(r["total_hours"]) or 0.0,
            overtime_hours=to_float(r["overtime_hours"]) or 0.0,
        )

    @staticmethod
    def _raise_entry_integrity(exc: mysql.connector.Error, e: TimesheetEntry) -> None:
        if is_missing_parent(exc):
            raise NotFoundError(f"timesheet {e.timesheet_id} not found") from exc
        if is_duplicate_key(exc):
            raise DuplicateError(f"an entry for {e.work_date} already exists in this timesheet") from exc

from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    timesheets_repo: TimesheetRepository

    timesheet_service: TimesheetService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    timesheets_repo = MySQLTimesheetRepository(conn)
    timesheet_service = TimesheetService(timesheets_repo)

    return Container(
        conn=conn,
        timesheets_repo=timesheets_repo,
        timesheet_service=timesheet_service,
    )

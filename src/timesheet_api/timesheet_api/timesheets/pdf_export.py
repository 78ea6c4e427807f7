"""
Render a timesheet with its entries as a one-table PDF using reportlab.

Layout:
  - Title
  - Header rows (employee, department, period, working days)
  - Entries table with a TOTAL row for hours and overtime
"""
from __future__ import annotations

import calendar
import io
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..core.constants import DATE_FORMAT, SHORT_TIME_FORMAT
from .model import Timesheet

_COLUMNS = [
    ("Date", 25),
    ("Day", 22),
    ("Start", 22),
    ("End", 22),
    ("Hrs", 20),
    ("OT", 22),
    ("Remarks", 57),
]


def _fmt_hours(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "-"


def period_label(month: int, year: int) -> str:
    if 1 <= month <= 12:
        return f"{calendar.month_name[month]} {year}"
    return f"Month-{month} {year}"


def export_filename(ts: Timesheet) -> str:
    return f"timesheet_{ts.year}_{ts.month:02d}_{ts.id}.pdf"


def render_timesheet_pdf(ts: Timesheet) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        topMargin=12 * mm,
        bottomMargin=10 * mm,
        title=f"Timesheet {ts.employee_name} {period_label(ts.month, ts.year)}",
    )
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]

    story = [Paragraph("TIME SHEET", styles["Title"]), Spacer(1, 4 * mm)]

    header = [
        ["Employee Name", ":", ts.employee_name],
        ["Department", ":", ts.department or "-"],
        ["Period", ":", period_label(ts.month, ts.year)],
    ]
    if ts.total_working_days is not None:
        header.append(["Total Working Days", ":", f"{ts.total_working_days} days"])
    header_table = Table(header, colWidths=[55 * mm, 5 * mm, None], hAlign="LEFT")
    header_table.setStyle(TableStyle([("FONTSIZE", (0, 0), (-1, -1), 11)]))
    story += [header_table, Spacer(1, 4 * mm)]

    rows: list[list] = [[title for title, _ in _COLUMNS]]
    total_hours = 0.0
    total_ot = 0.0
    for e in ts.entries:
        if e.total_hours is not None:
            total_hours += e.total_hours
        if e.overtime_hours is not None:
            total_ot += e.overtime_hours
        rows.append(
            [
                e.work_date.strftime(DATE_FORMAT) if e.work_date else "-",
                e.work_date.strftime("%A") if e.work_date else "-",
                e.start_time.strftime(SHORT_TIME_FORMAT) if e.start_time else "-",
                e.end_time.strftime(SHORT_TIME_FORMAT) if e.end_time else "-",
                _fmt_hours(e.total_hours),
                _fmt_hours(e.overtime_hours),
                Paragraph(escape(e.remarks), cell) if e.remarks else "",
            ]
        )
    rows.append(["TOTAL", "", "", "", f"{total_hours:.2f}", f"{total_ot:.2f}", ""])

    table = Table(rows, colWidths=[w * mm for _, w in _COLUMNS], repeatRows=1)
    last = len(rows) - 1
    table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTNAME", (0, last), (-1, last), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("ALIGN", (0, 0), (5, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("SPAN", (0, last), (3, last)),
                ("ALIGN", (0, last), (3, last), "RIGHT"),
            ]
        )
    )
    story.append(table)

    doc.build(story)
    return buf.getvalue()

"""Table exports for the visit reports (CSV, Excel, PDF).

Rows are plain dicts keyed by the column headers so the same rows feed every
format.
"""
from __future__ import annotations

import csv
import io
from xml.sax.saxutils import escape
from typing import Iterable, Mapping, Sequence

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.datetime_utils import format_manila_datetime
from ..visits.model import DepartmentVisitRow, GroupedVisit

GROUPED_COLUMNS = ("Visitor ID", "Name", "Date", "Office", "Professor", "Purpose", "Time")
DEPARTMENT_COLUMNS = ("Visitor ID", "Visitor Name", "Professor", "Purpose", "Date/Time", "Status")
FACULTY_COLUMNS = ("Visitor ID", "Visitor Name", "Purpose", "Date/Time", "Status")

CSV_MIMETYPE = "text/csv"
EXCEL_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIMETYPE = "application/pdf"


def rows_for_grouped(groups: Iterable[GroupedVisit]) -> list[dict]:
    """One row per office visit of every group."""
    rows = []
    for group in groups:
        for office in group.offices:
            rows.append(
                {
                    "Visitor ID": group.visitors_id,
                    "Name": group.visitor,
                    "Date": group.date,
                    "Office": office.office,
                    "Professor": office.professor,
                    "Purpose": office.purpose or "",
                    "Time": format_manila_datetime(office.created_at),
                }
            )
    return rows


def rows_for_department(rows: Iterable[DepartmentVisitRow]) -> list[dict]:
    return [
        {
            "Visitor ID": r.visitors_id,
            "Visitor Name": r.visitor_name,
            "Professor": r.professor,
            "Purpose": r.purpose,
            "Date/Time": r.date_time,
            "Status": r.status,
        }
        for r in rows
    ]


def rows_for_faculty(rows: Iterable[DepartmentVisitRow]) -> list[dict]:
    return [
        {
            "Visitor ID": r.visitors_id,
            "Visitor Name": r.visitor_name,
            "Purpose": r.purpose,
            "Date/Time": r.date_time,
            "Status": r.status,
        }
        for r in rows
    ]


def to_csv(rows: Iterable[Mapping], columns: Sequence[str]) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(columns), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    # utf-8-sig so Excel opens accented names correctly
    return out.getvalue().encode("utf-8-sig")


def to_excel(rows: Iterable[Mapping], columns: Sequence[str], sheet: str = "Visits") -> bytes:
    df = pd.DataFrame(list(rows), columns=list(columns))
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet[:31])
    return output.getvalue()


def to_pdf(rows: Iterable[Mapping], columns: Sequence[str], title: str) -> bytes:
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]
    cell.fontSize = 8
    cell.leading = 10

    data = [list(columns)]
    for row in rows:
        data.append([Paragraph(escape(str(row.get(c, "") or "")), cell) for c in columns])

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(A4),
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#22577A")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 9),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F7FA")]),
            ]
        )
    )
    doc.build([Paragraph(title, styles["Title"]), Spacer(1, 4 * mm), table])
    return buf.getvalue()

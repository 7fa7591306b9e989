"""
TutorLedger Backend: Report Aggregator
=======================================

What:  Groups hydrated class records into payroll report tables.
How:   Single in-memory pass per report over records whose `tutor` and
       `student` relationships were loaded by the store.
Who:   ExportService (CSV exports).

Reports:
    by tutor            one row per tutor: hours + total payment
    by student          one row per student: hours + class level
    by tutor by month   one row per (tutor, month, year) of the lesson date
                        in the reference timezone, with a record count

Hours only count positive intervals; malformed or non-positive intervals
contribute zero. Totals are rounded half-up to 2 decimal places once, after
summing. Records whose tutor (or student, for the student report) cannot be
resolved are skipped.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Tuple

from tutorledger.services.rates import format_currency

TUTOR_COLUMNS = (
    "TutorID",
    "Tutor",
    "TutorBank",
    "TutorAccountNumber",
    "Hours",
    "TotalPaymentAmount",
)
STUDENT_COLUMNS = ("StudentID", "Student", "Class", "Hours")
MONTHLY_COLUMNS = (
    "Year",
    "Month",
    "TutorID",
    "Tutor",
    "Records",
    "Hours",
    "TotalPaymentAmount",
    "TotalPaymentDisplay",
)


@dataclass
class ReportTable:
    """Column order plus one dict per row, keyed by column name."""

    columns: Tuple[str, ...]
    rows: List[Dict[str, Any]] = field(default_factory=list)


def record_hours(record: Any) -> float:
    """Session length in hours, or 0.0 when the interval is unusable."""
    start = getattr(record, "start_time", None)
    end = getattr(record, "end_time", None)
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return 0.0
    try:
        seconds = (end - start).total_seconds()
    except TypeError:
        return 0.0
    return seconds / 3600 if seconds > 0 else 0.0


def round_hours(hours: float) -> float:
    return float(Decimal(repr(hours)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def aggregate_by_tutor(records: Iterable[Any]) -> ReportTable:
    by_tutor: Dict[str, Dict[str, Any]] = {}
    for record in records:
        tutor = getattr(record, "tutor", None)
        if tutor is None:
            continue
        key = str(tutor.id)
        row = by_tutor.setdefault(
            key,
            {
                "TutorID": key,
                "Tutor": tutor.name or "",
                "TutorBank": tutor.bank or "",
                "TutorAccountNumber": tutor.account_number or "",
                "Hours": 0.0,
                "TotalPaymentAmount": 0,
            },
        )
        row["TotalPaymentAmount"] += int(record.payment_amount or 0)
        row["Hours"] += record_hours(record)

    table = ReportTable(columns=TUTOR_COLUMNS)
    for row in by_tutor.values():
        row["Hours"] = round_hours(row["Hours"])
        table.rows.append(row)
    return table


def aggregate_by_student(records: Iterable[Any]) -> ReportTable:
    by_student: Dict[str, Dict[str, Any]] = {}
    for record in records:
        student = getattr(record, "student", None)
        if student is None:
            continue
        key = str(student.id)
        row = by_student.setdefault(
            key,
            {
                "StudentID": key,
                "Student": student.name or "",
                # Level recorded on the session, which can lag a promotion
                "Class": record.class_level or "",
                "Hours": 0.0,
            },
        )
        row["Hours"] += record_hours(record)

    table = ReportTable(columns=STUDENT_COLUMNS)
    for row in by_student.values():
        row["Hours"] = round_hours(row["Hours"])
        table.rows.append(row)
    return table


def aggregate_by_tutor_by_month(records: Iterable[Any], tz: tzinfo) -> ReportTable:
    buckets: Dict[Tuple[str, int, int], Dict[str, Any]] = {}
    for record in records:
        tutor = getattr(record, "tutor", None)
        start = getattr(record, "start_time", None)
        if tutor is None or not isinstance(start, datetime):
            continue
        local_start = start.astimezone(tz)
        key = (str(tutor.id), local_start.year, local_start.month)
        bucket = buckets.setdefault(
            key,
            {
                "Year": local_start.year,
                "Month": local_start.month,
                "TutorID": key[0],
                "Tutor": tutor.name or "",
                "Records": 0,
                "Hours": 0.0,
                "TotalPaymentAmount": 0,
            },
        )
        bucket["Records"] += 1
        bucket["Hours"] += record_hours(record)
        bucket["TotalPaymentAmount"] += int(record.payment_amount or 0)

    rows = sorted(buckets.values(), key=lambda r: (r["Year"], r["Month"], r["Tutor"]))
    for row in rows:
        row["Hours"] = round_hours(row["Hours"])
        row["TotalPaymentDisplay"] = format_currency(row["TotalPaymentAmount"])
    return ReportTable(columns=MONTHLY_COLUMNS, rows=rows)

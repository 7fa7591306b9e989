"""
TutorLedger Backend: CSV Renderer
==================================

What:  Serializes a ReportTable to CSV text.
How:   csv.writer with QUOTE_ALL: every field is wrapped in double quotes and
       embedded quotes are doubled. Rows are joined by "\n" with no trailing
       newline after the last row.

Value formatting (locale-free):
    float / Decimal → fixed 2 decimals ("2.33")
    int             → plain digits ("6450")
    None            → empty string
    anything else   → str(value)
"""

import csv
import io
from decimal import Decimal
from typing import Any

from tutorledger.services.reports import ReportTable


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (float, Decimal)):
        return f"{value:.2f}"
    return str(value)


def render_csv(table: ReportTable) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(table.columns)
    for row in table.rows:
        writer.writerow([format_value(row.get(column)) for column in table.columns])
    return output.getvalue().rstrip("\n")

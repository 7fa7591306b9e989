"""
TutorLedger Backend: Payroll Export Service
============================================

What:  Builds the admin CSV exports.
How:   store query (hydrated, filtered) → aggregator → CSV renderer.

Exports:
    tutor_payroll     by tutor, filtered on date_submitted  → class_records.csv
    student_summary   by student, filtered on date_submitted → student_summary.csv
    monthly_payroll   by tutor and lesson month, filtered on start_time
                                                           → monthly_payroll.csv
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.config import settings
from tutorledger.models import ClassRecord
from tutorledger.services import reports
from tutorledger.services.csv_renderer import render_csv
from tutorledger.services.record_service import parse_id
from tutorledger.services.validation import parse_day_bounds
from tutorledger.store import RecordStore, record_store

logger = logging.getLogger(__name__)


@dataclass
class CsvExport:
    filename: str
    content: str
    row_count: int


class ExportService:
    def __init__(self, store: RecordStore = record_store):
        self.store = store

    async def _records(
        self,
        db: AsyncSession,
        tutor_id: Optional[str],
        date_from: Optional[str],
        date_to: Optional[str],
        date_field: str,
    ) -> List[ClassRecord]:
        start, end = parse_day_bounds(date_from, date_to, settings.tz)
        return await self.store.find_records(
            db,
            tutor_id=parse_id(tutor_id, "tutor") if tutor_id else None,
            date_field=date_field,
            date_from=start,
            date_to=end,
            hydrate=True,
            newest_first=False,
        )

    async def _export(
        self,
        db: AsyncSession,
        filename: str,
        aggregate: Callable[[List[ClassRecord]], reports.ReportTable],
        tutor_id: Optional[str],
        date_from: Optional[str],
        date_to: Optional[str],
        date_field: str = "date_submitted",
    ) -> CsvExport:
        records = await self._records(db, tutor_id, date_from, date_to, date_field)
        table = aggregate(records)
        logger.info(
            "Export %s: %d records → %d rows (tutor=%s, from=%s, to=%s)",
            filename,
            len(records),
            len(table.rows),
            tutor_id or "*",
            date_from or "-",
            date_to or "-",
        )
        return CsvExport(filename=filename, content=render_csv(table), row_count=len(table.rows))

    async def tutor_payroll(self, db, tutor_id=None, date_from=None, date_to=None) -> CsvExport:
        return await self._export(
            db, "class_records.csv", reports.aggregate_by_tutor, tutor_id, date_from, date_to
        )

    async def student_summary(self, db, tutor_id=None, date_from=None, date_to=None) -> CsvExport:
        return await self._export(
            db, "student_summary.csv", reports.aggregate_by_student, tutor_id, date_from, date_to
        )

    async def monthly_payroll(self, db, tutor_id=None, date_from=None, date_to=None) -> CsvExport:
        return await self._export(
            db,
            "monthly_payroll.csv",
            lambda records: reports.aggregate_by_tutor_by_month(records, settings.tz),
            tutor_id,
            date_from,
            date_to,
            date_field="start_time",
        )


export_service = ExportService()

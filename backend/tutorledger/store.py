"""
TutorLedger Backend: Record Store
==================================

What:  Repository over the four collections (tutors, students, class records,
       admin action logs).
How:   Thin async methods over an AsyncSession. Each method runs inside
       `_store_errors`, which turns SQLAlchemy failures into DatabaseError so
       services and routes only ever see application exceptions.
Who:   RegistryService, ClassRecordService, ExportService.

Hydration:
    ClassRecord.tutor / .student are lazy="raise". Callers that need them
    ask for `hydrate=True`, which eager-loads both with selectinload and
    returns plain ORM objects ready for the aggregator.

Transactions:
    The store flushes but never commits; get_db_session commits at the end
    of the request. ClassRecordService is the exception: it commits while it
    holds the overlap lock.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Iterable, List, Optional, Sequence

from sqlalchemy import asc, delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tutorledger.exceptions import DatabaseError
from tutorledger.models import AdminActionLog, ClassRecord, Student, Tutor

logger = logging.getLogger(__name__)

DATE_FIELDS = {
    "date_submitted": ClassRecord.date_submitted,
    "start_time": ClassRecord.start_time,
}


@asynccontextmanager
async def _store_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(context={"operation": operation, "error_type": type(e).__name__})


class RecordStore:
    """Stateless repository; every method takes the request's session."""

    # ── Writes ────────────────────────────────────────────────────────────

    async def add(self, db: AsyncSession, *entities) -> None:
        async with _store_errors("add"):
            db.add_all(entities)
            await db.flush()

    async def save(self, db: AsyncSession) -> None:
        async with _store_errors("save"):
            await db.flush()

    async def commit(self, db: AsyncSession) -> None:
        async with _store_errors("commit"):
            await db.commit()

    async def delete_record(self, db: AsyncSession, record: ClassRecord) -> None:
        async with _store_errors("delete_record"):
            await db.delete(record)
            await db.flush()

    async def delete_records(self, db: AsyncSession, ids: Sequence[uuid.UUID]) -> int:
        """Single DELETE ... WHERE id IN (...); returns the deleted row count."""
        async with _store_errors("delete_records"):
            result = await db.execute(delete(ClassRecord).where(ClassRecord.id.in_(list(ids))))
            return result.rowcount or 0

    # ── Tutors & Students ─────────────────────────────────────────────────

    async def get_tutor(self, db: AsyncSession, tutor_id: uuid.UUID) -> Optional[Tutor]:
        async with _store_errors("get_tutor"):
            return await db.get(Tutor, tutor_id)

    async def get_student(self, db: AsyncSession, student_id: uuid.UUID) -> Optional[Student]:
        async with _store_errors("get_student"):
            return await db.get(Student, student_id)

    async def list_tutors(self, db: AsyncSession) -> List[Tutor]:
        async with _store_errors("list_tutors"):
            result = await db.execute(select(Tutor).order_by(asc(Tutor.name)))
            return list(result.scalars().all())

    async def find_tutors_teaching(self, db: AsyncSession, subjects: Iterable[str]) -> List[Tutor]:
        """Tutors teaching at least one of `subjects`, by name."""
        wanted = set(subjects)
        # JSON containment is dialect-specific; filtered in Python
        return [t for t in await self.list_tutors(db) if wanted.intersection(t.subjects or [])]

    async def list_students(self, db: AsyncSession) -> List[Student]:
        async with _store_errors("list_students"):
            result = await db.execute(select(Student).order_by(asc(Student.name)))
            return list(result.scalars().all())

    # ── Class Records ─────────────────────────────────────────────────────

    async def get_record(
        self, db: AsyncSession, record_id: uuid.UUID, hydrate: bool = False
    ) -> Optional[ClassRecord]:
        async with _store_errors("get_record"):
            query = select(ClassRecord).where(ClassRecord.id == record_id)
            if hydrate:
                query = query.options(
                    selectinload(ClassRecord.tutor), selectinload(ClassRecord.student)
                )
            result = await db.execute(query)
            return result.scalar_one_or_none()

    async def find_records(
        self,
        db: AsyncSession,
        tutor_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        date_field: str = "date_submitted",
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        hydrate: bool = True,
        newest_first: bool = True,
    ) -> List[ClassRecord]:
        """
        Filtered class records.

        Args:
            tutor_id:   equality filter on the tutor reference
            status:     equality filter on status
            date_field: "date_submitted" or "start_time"; the field the
                        inclusive [date_from, date_to] range applies to
            hydrate:    eager-load tutor and student
        """
        column = DATE_FIELDS[date_field]
        query = select(ClassRecord)
        if tutor_id is not None:
            query = query.where(ClassRecord.tutor_id == tutor_id)
        if status is not None:
            query = query.where(ClassRecord.status == status)
        if date_from is not None:
            query = query.where(column >= date_from)
        if date_to is not None:
            query = query.where(column <= date_to)
        if hydrate:
            query = query.options(
                selectinload(ClassRecord.tutor), selectinload(ClassRecord.student)
            )
        query = query.order_by(desc(column) if newest_first else asc(column))

        async with _store_errors("find_records"):
            result = await db.execute(query)
            return list(result.scalars().all())

    async def find_overlapping(
        self,
        db: AsyncSession,
        tutor_id: uuid.UUID,
        student_id: uuid.UUID,
        subject: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> List[ClassRecord]:
        """Records for the same triple whose [start, end) intersects the given one."""
        query = select(ClassRecord).where(
            ClassRecord.tutor_id == tutor_id,
            ClassRecord.student_id == student_id,
            ClassRecord.subject == subject,
            ClassRecord.start_time < end,
            ClassRecord.end_time > start,
        )
        if exclude_id is not None:
            query = query.where(ClassRecord.id != exclude_id)

        async with _store_errors("find_overlapping"):
            result = await db.execute(query)
            return list(result.scalars().all())

    # ── Admin Action Log ──────────────────────────────────────────────────

    async def list_action_logs(
        self, db: AsyncSession, record_id: Optional[uuid.UUID] = None, limit: int = 100
    ) -> List[AdminActionLog]:
        query = select(AdminActionLog)
        if record_id is not None:
            query = query.where(AdminActionLog.record_id == record_id)
        query = query.order_by(desc(AdminActionLog.created_at)).limit(limit)

        async with _store_errors("list_action_logs"):
            result = await db.execute(query)
            return list(result.scalars().all())


record_store = RecordStore()

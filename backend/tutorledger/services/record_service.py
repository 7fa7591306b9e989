"""
TutorLedger Backend: Class Record Service (Business Logic Orchestrator)
========================================================================

What:  Submission, listing, update, deletion and approval of class records.
How:   Runs the validation rules (services/validation.py), computes the
       payment (services/rates.py), applies workflow transitions
       (services/workflow.py) and persists through the RecordStore.
Who:   Called by the class-records and admin routers.

Submission Flow:
    ┌──────────┐   ┌────────────┐   ┌──────────────┐   ┌────────────┐
    │ Required │──▶│ Tutor /    │──▶│ Interval &   │──▶│ Overlap +  │──▶ Valid |
    │ fields   │   │ Student /  │   │ duration     │   │ same-day   │    Pending Approval
    └──────────┘   │ subject    │   └──────────────┘   │ (locked)   │
                   └────────────┘                      └────────────┘

Overlap Lock:
    The overlap query and the insert for one (tutor, student, subject)
    triple run under an asyncio.Lock keyed by that triple, and the session
    is committed before the lock is released. Two concurrent submissions
    for the same triple in one process therefore see each other. Locks are
    held in a WeakValueDictionary so idle triples do not accumulate.
"""

import asyncio
import logging
import uuid
import weakref
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.config import settings
from tutorledger.exceptions import NotFoundError, ValidationError
from tutorledger.models import AdminActionLog, ClassRecord, Student, Tutor
from tutorledger.models.class_record import RecordStatus
from tutorledger.database import utcnow
from tutorledger.schemas.class_record import (
    ApprovalDecision,
    ClassRecordCreate,
    LateSubmissionCreate,
)
from tutorledger.services import validation, workflow
from tutorledger.services.rates import compute_payment
from tutorledger.store import RecordStore, record_store

logger = logging.getLogger(__name__)

_triple_locks: "weakref.WeakValueDictionary[Tuple[str, str, str], asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


def _lock_for(tutor_id: uuid.UUID, student_id: uuid.UUID, subject: str) -> asyncio.Lock:
    key = (str(tutor_id), str(student_id), subject)
    lock = _triple_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _triple_locks[key] = lock
    return lock


def parse_id(value, resource: str) -> uuid.UUID:
    """A malformed identifier cannot reference anything: NotFoundError."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError):
        raise NotFoundError(resource=resource, resource_id=str(value))


class ClassRecordService:
    """
    Stateless apart from the injected store and clock.

    `clock` returns the current aware UTC time; tests pass a fixed clock to
    exercise the same-day rule.
    """

    def __init__(
        self,
        store: RecordStore = record_store,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.clock = clock

    # ── Submission ────────────────────────────────────────────────────────

    async def _load_parties(
        self, db: AsyncSession, tutor_id_raw, student_id_raw
    ) -> Tuple[Tutor, Student]:
        tutor_id = parse_id(tutor_id_raw, "tutor")
        student_id = parse_id(student_id_raw, "student")
        tutor = await self.store.get_tutor(db, tutor_id)
        if tutor is None:
            raise NotFoundError(resource="tutor", resource_id=str(tutor_id))
        student = await self.store.get_student(db, student_id)
        if student is None:
            raise NotFoundError(resource="student", resource_id=str(student_id))
        return tutor, student

    async def _validated(
        self, db: AsyncSession, payload: ClassRecordCreate, reason_required: bool
    ) -> Tuple[Tutor, Student, datetime, datetime, Optional[str]]:
        """Rules 1 to 6; returns the resolved parties, interval and reason."""
        validation.require_fields(payload.model_dump())
        reason = None
        if reason_required:
            reason = validation.require_reason(getattr(payload, "reason", None))

        tutor, student = await self._load_parties(db, payload.tutor_id, payload.student_id)
        subject = payload.subject.strip()
        validation.require_subject_taught(subject, tutor.subjects)

        start, end = validation.parse_interval(payload.start_time, payload.end_time, settings.tz)
        validation.require_allowed_duration(start, end)
        return tutor, student, start, end, reason

    async def _insert_locked(
        self,
        db: AsyncSession,
        record: ClassRecord,
        submitted_at: datetime,
        same_day: bool,
    ) -> ClassRecord:
        """Rules 7 and 8, then insert and commit while holding the triple lock."""
        async with _lock_for(record.tutor_id, record.student_id, record.subject):
            existing = await self.store.find_overlapping(
                db,
                record.tutor_id,
                record.student_id,
                record.subject,
                record.start_time,
                record.end_time,
            )
            validation.require_no_overlap(record.start_time, record.end_time, existing)
            if same_day:
                validation.require_same_day(record.start_time, submitted_at, settings.tz)

            await self.store.add(db, record)
            await self.store.commit(db)
        return record

    def _build_record(
        self,
        payload: ClassRecordCreate,
        tutor: Tutor,
        student: Student,
        start: datetime,
        end: datetime,
        submitted_at: datetime,
    ) -> ClassRecord:
        class_level = payload.class_level.strip()
        return ClassRecord(
            tutor_id=tutor.id,
            student_id=student.id,
            tutor=tutor,
            student=student,
            class_level=class_level,
            subject=payload.subject.strip(),
            topic=payload.topic.strip(),
            comment=payload.comment,
            start_time=start,
            end_time=end,
            date_submitted=submitted_at,
            payment_amount=compute_payment(class_level, start, end),
        )

    async def submit_same_day(self, db: AsyncSession, payload: ClassRecordCreate) -> ClassRecord:
        """Normal path: the lesson must be on today's date → Valid."""
        tutor, student, start, end, _ = await self._validated(db, payload, reason_required=False)
        now = self.clock()
        record = self._build_record(payload, tutor, student, start, end, now)
        workflow.mark_valid(record)

        await self._insert_locked(db, record, now, same_day=True)
        logger.info(
            "Class record %s created for tutor %s (%s, %d)",
            record.id,
            tutor.id,
            record.subject,
            record.payment_amount,
        )
        return record

    async def submit_late(self, db: AsyncSession, payload: LateSubmissionCreate) -> ClassRecord:
        """Late path: reason required, no same-day rule → Pending Approval."""
        tutor, student, start, end, reason = await self._validated(
            db, payload, reason_required=True
        )
        now = self.clock()
        record = self._build_record(payload, tutor, student, start, end, now)
        workflow.mark_pending(record, reason, now)

        await self._insert_locked(db, record, now, same_day=False)
        logger.info("Late class record %s submitted for tutor %s", record.id, tutor.id)
        return record

    # ── Queries ───────────────────────────────────────────────────────────

    async def get_record(self, db: AsyncSession, record_id) -> ClassRecord:
        record_id = parse_id(record_id, "class record")
        record = await self.store.get_record(db, record_id, hydrate=True)
        if record is None:
            raise NotFoundError(resource="class record", resource_id=str(record_id))
        return record

    async def list_records(
        self,
        db: AsyncSession,
        tutor_id: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> List[ClassRecord]:
        """Hydrated records, newest submission first, optionally filtered."""
        start, end = validation.parse_day_bounds(date_from, date_to, settings.tz)
        return await self.store.find_records(
            db,
            tutor_id=parse_id(tutor_id, "tutor") if tutor_id else None,
            date_field="date_submitted",
            date_from=start,
            date_to=end,
        )

    async def list_pending(self, db: AsyncSession) -> List[ClassRecord]:
        return await self.store.find_records(db, status=RecordStatus.PENDING_APPROVAL.value)

    # ── Workflow ──────────────────────────────────────────────────────────

    async def decide(
        self, db: AsyncSession, record_id, decision: ApprovalDecision
    ) -> ClassRecord:
        """Pending Approval → Approved | Rejected."""
        record = await self.get_record(db, record_id)
        entry = workflow.decide(record, decision.approved, decision.admin_id, self.clock())
        await self.store.add(db, entry)
        return record

    async def late_approve(
        self,
        db: AsyncSession,
        record_id,
        admin_name: Optional[str],
        notes: Optional[str] = None,
    ) -> ClassRecord:
        """Administrative override → Late Approved, with an audit log entry."""
        record = await self.get_record(db, record_id)
        entry = workflow.late_approve(record, admin_name, self.clock(), notes)
        await self.store.add(db, entry)
        return record

    async def list_action_logs(
        self, db: AsyncSession, record_id: Optional[uuid.UUID] = None, limit: int = 100
    ) -> List[AdminActionLog]:
        return await self.store.list_action_logs(db, record_id=record_id, limit=limit)

    # ── Update & Delete ───────────────────────────────────────────────────

    async def update(
        self, db: AsyncSession, record_id, payload: ClassRecordCreate
    ) -> ClassRecord:
        """
        Replaces the editable fields and re-runs rules 1 to 7.

        The same-day rule is not re-applied (editing yesterday's record is
        a correction, not a submission). The payment amount is recomputed;
        status and approval metadata are left as they are.
        """
        record = await self.get_record(db, record_id)
        tutor, student, start, end, _ = await self._validated(db, payload, reason_required=False)

        subject = payload.subject.strip()
        async with _lock_for(tutor.id, student.id, subject):
            existing = await self.store.find_overlapping(
                db, tutor.id, student.id, subject, start, end, exclude_id=record.id
            )
            validation.require_no_overlap(start, end, existing)

            class_level = payload.class_level.strip()
            record.tutor_id = tutor.id
            record.student_id = student.id
            record.tutor = tutor
            record.student = student
            record.class_level = class_level
            record.subject = subject
            record.topic = payload.topic.strip()
            record.comment = payload.comment
            record.start_time = start
            record.end_time = end
            record.payment_amount = compute_payment(class_level, start, end)

            await self.store.save(db)
            await self.store.commit(db)
        logger.info("Class record %s updated", record.id)
        return record

    async def delete(self, db: AsyncSession, record_id) -> None:
        record_id = parse_id(record_id, "class record")
        record = await self.store.get_record(db, record_id, hydrate=True)
        if record is None:
            raise NotFoundError(resource="class record", resource_id=str(record_id))
        await self.store.delete_record(db, record)
        logger.info("Class record %s deleted", record_id)

    async def bulk_delete(self, db: AsyncSession, ids: Optional[Sequence[str]]) -> int:
        if not ids:
            raise ValidationError(message="No records specified for deletion", field="ids")
        parsed = []
        for raw in ids:
            try:
                parsed.append(uuid.UUID(str(raw)))
            except ValueError:
                raise ValidationError(message=f"Invalid record id '{raw}'", field="ids")
        deleted = await self.store.delete_records(db, parsed)
        logger.info("Bulk delete removed %d of %d class records", deleted, len(parsed))
        return deleted


record_service = ClassRecordService()

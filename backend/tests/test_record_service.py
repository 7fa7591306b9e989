"""
TutorLedger Backend: Class Record Service Tests
================================================

What:  Submission, workflow, update and deletion against a real (in-memory
       SQLite) database.
How:   ClassRecordService is built with a fixed clock so the same-day rule
       is deterministic. Lessons run on 10 March 2026 in Lagos (UTC+1).

What we test:
    ✅ Same-day submission stores a Valid record with the computed payment
    ✅ Rule order: first failing rule decides the error
    ✅ Overlap conflicts (and touching / other-subject sessions that don't)
    ✅ Same-day rule; nothing stored when it fails
    ✅ Concurrent identical submissions: one stored, the rest conflict
    ✅ Late submission → Pending Approval with the request recorded
    ✅ Approve / reject, refusals, audit log entries
    ✅ Late-approve override, repeated
    ✅ Update recomputes payment and ignores its own interval
    ✅ Delete and bulk delete
    ✅ Listing filters
"""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from conftest import lagos, utc
from tutorledger.database import Base
from tutorledger.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tutorledger.models import ClassRecord, Student, Tutor
from tutorledger.models.admin_action import LATE_RECORD_OVERRIDE, LATE_SUBMISSION_APPROVED
from tutorledger.schemas.class_record import (
    ApprovalDecision,
    ClassRecordCreate,
    LateSubmissionCreate,
)
from tutorledger.services.record_service import ClassRecordService

LESSON_DAY_NOON = utc(2026, 3, 10, 12, 0)
NEXT_DAY = utc(2026, 3, 11, 9, 0)


def _payload(tutor, student, start="2026-03-10T09:00:00+01:00", end="2026-03-10T10:30:00+01:00", **extra):
    fields = dict(
        tutor_id=str(tutor.id),
        student_id=str(student.id),
        class_level="Year 9",
        subject="Mathematics",
        topic="Simultaneous equations",
        start_time=start,
        end_time=end,
    )
    fields.update(extra)
    return fields


class TestSubmitSameDay:
    def setup_method(self):
        self.service = ClassRecordService(clock=lambda: LESSON_DAY_NOON)

    @pytest.mark.asyncio
    async def test_creates_valid_record(self, db_session, tutor, student):
        record = await self.service.submit_same_day(
            db_session, ClassRecordCreate(**_payload(tutor, student, comment="Good progress"))
        )

        assert record.status == "Valid"
        assert record.payment_amount == 6450
        assert record.date_submitted == LESSON_DAY_NOON
        assert record.start_time == lagos(2026, 3, 10, 9, 0)
        assert record.approval_request is None

        stored = await self.service.get_record(db_session, record.id)
        assert stored.tutor.name == "Ada Obi"
        assert stored.student.name == "Tunde Bello"
        assert stored.comment == "Good progress"

    @pytest.mark.asyncio
    async def test_naive_times_read_in_reference_timezone(self, db_session, tutor, student):
        record = await self.service.submit_same_day(
            db_session,
            ClassRecordCreate(**_payload(tutor, student, start="2026-03-10T09:00", end="2026-03-10T10:00")),
        )
        assert record.start_time == utc(2026, 3, 10, 8, 0)
        assert record.payment_amount == 4300

    @pytest.mark.asyncio
    async def test_missing_fields_reported_first(self, db_session, tutor, student):
        payload = _payload(tutor, student, topic="", end="2026-03-10T09:10:00+01:00")
        with pytest.raises(ValidationError, match="Missing required fields: topic"):
            await self.service.submit_same_day(db_session, ClassRecordCreate(**payload))

    @pytest.mark.asyncio
    async def test_unknown_tutor(self, db_session, student, tutor):
        payload = _payload(tutor, student, tutor_id=str(uuid.uuid4()))
        with pytest.raises(NotFoundError):
            await self.service.submit_same_day(db_session, ClassRecordCreate(**payload))

    @pytest.mark.asyncio
    async def test_malformed_student_id(self, db_session, tutor, student):
        payload = _payload(tutor, student, student_id="not-an-id")
        with pytest.raises(NotFoundError):
            await self.service.submit_same_day(db_session, ClassRecordCreate(**payload))

    @pytest.mark.asyncio
    async def test_subject_not_taught(self, db_session, tutor, student):
        payload = _payload(tutor, student, subject="Chemistry", end="garbage")
        with pytest.raises(ValidationError, match="not in tutor's subjects"):
            await self.service.submit_same_day(db_session, ClassRecordCreate(**payload))

    @pytest.mark.asyncio
    async def test_bad_duration(self, db_session, tutor, student):
        payload = _payload(tutor, student, end="2026-03-10T09:45:00+01:00")
        with pytest.raises(ValidationError, match="Class duration must be"):
            await self.service.submit_same_day(db_session, ClassRecordCreate(**payload))

    @pytest.mark.asyncio
    async def test_overlap_conflicts(self, db_session, tutor, student):
        first = await self.service.submit_same_day(
            db_session, ClassRecordCreate(**_payload(tutor, student))
        )
        clash = _payload(
            tutor, student, start="2026-03-10T10:00:00+01:00", end="2026-03-10T11:00:00+01:00"
        )
        with pytest.raises(ConflictError) as exc:
            await self.service.submit_same_day(db_session, ClassRecordCreate(**clash))
        assert exc.value.context["conflicting_record_id"] == str(first.id)

    @pytest.mark.asyncio
    async def test_touching_and_other_subject_allowed(self, db_session, tutor, student):
        await self.service.submit_same_day(db_session, ClassRecordCreate(**_payload(tutor, student)))
        touching = _payload(
            tutor, student, start="2026-03-10T10:30:00+01:00", end="2026-03-10T11:00:00+01:00"
        )
        other_subject = _payload(tutor, student, subject="Physics")

        a = await self.service.submit_same_day(db_session, ClassRecordCreate(**touching))
        b = await self.service.submit_same_day(db_session, ClassRecordCreate(**other_subject))
        assert a.status == b.status == "Valid"

    @pytest.mark.asyncio
    async def test_overlap_checked_before_same_day(self, db_session, tutor, student):
        await self.service.submit_same_day(db_session, ClassRecordCreate(**_payload(tutor, student)))
        late_service = ClassRecordService(clock=lambda: NEXT_DAY)
        with pytest.raises(ConflictError):
            await late_service.submit_same_day(db_session, ClassRecordCreate(**_payload(tutor, student)))

    @pytest.mark.asyncio
    async def test_same_day_rule(self, db_session, tutor, student):
        late_service = ClassRecordService(clock=lambda: NEXT_DAY)
        with pytest.raises(ValidationError) as exc:
            await late_service.submit_same_day(db_session, ClassRecordCreate(**_payload(tutor, student)))
        assert "late-submission" in exc.value.message
        assert await late_service.list_records(db_session) == []

    @pytest.mark.asyncio
    async def test_concurrent_identical_submissions(self, tmp_path):
        # One connection per session; the in-memory StaticPool would share one
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async with factory() as seed:
            tutor = Tutor(name="Ada Obi", account_number="0123456789", bank="First Bank", subjects=["Mathematics"])
            student = Student(name="Tunde Bello", class_level="Year 9", enrolled_subjects=["Mathematics"])
            seed.add_all([tutor, student])
            await seed.commit()

        async def submit():
            async with factory() as session:
                return await self.service.submit_same_day(
                    session, ClassRecordCreate(**_payload(tutor, student))
                )

        try:
            results = await asyncio.gather(*(submit() for _ in range(5)), return_exceptions=True)

            stored = [r for r in results if isinstance(r, ClassRecord)]
            conflicts = [r for r in results if isinstance(r, ConflictError)]
            assert len(stored) == 1
            assert len(conflicts) == 4

            async with factory() as session:
                count = await session.scalar(select(func.count()).select_from(ClassRecord))
            assert count == 1
        finally:
            await engine.dispose()


class TestSubmitLate:
    def setup_method(self):
        self.service = ClassRecordService(clock=lambda: NEXT_DAY)

    @pytest.mark.asyncio
    async def test_creates_pending_record(self, db_session, tutor, student):
        record = await self.service.submit_late(
            db_session, LateSubmissionCreate(**_payload(tutor, student, reason="Network outage"))
        )
        assert record.status == "Pending Approval"
        assert record.payment_amount == 6450
        assert record.approval_request["reason"] == "Network outage"
        assert record.approval_request["request_date"] == NEXT_DAY
        assert record.approval_request["approved_by"] is None

    @pytest.mark.asyncio
    async def test_reason_checked_before_references(self, db_session, tutor, student):
        payload = _payload(tutor, student, tutor_id=str(uuid.uuid4()))
        with pytest.raises(ValidationError, match="Reason for late submission required"):
            await self.service.submit_late(db_session, LateSubmissionCreate(**payload))

    @pytest.mark.asyncio
    async def test_late_path_still_checks_overlap(self, db_session, tutor, student, make_record):
        db_session.add(make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0)))
        await db_session.commit()
        with pytest.raises(ConflictError):
            await self.service.submit_late(
                db_session, LateSubmissionCreate(**_payload(tutor, student, reason="Forgot"))
            )


class TestWorkflow:
    def setup_method(self):
        self.service = ClassRecordService(clock=lambda: NEXT_DAY)

    async def _pending(self, db_session, tutor, student):
        return await self.service.submit_late(
            db_session, LateSubmissionCreate(**_payload(tutor, student, reason="Forgot"))
        )

    @pytest.mark.asyncio
    async def test_approve_pending(self, db_session, tutor, student):
        record = await self._pending(db_session, tutor, student)
        decided = await self.service.decide(
            db_session, record.id, ApprovalDecision(approved=True, admin_id="admin-1")
        )
        assert decided.status == "Approved"
        assert decided.approval_request["approved_by"] == "admin-1"
        assert decided.approval_request["approval_date"] == NEXT_DAY

        logs = await self.service.list_action_logs(db_session, record_id=record.id)
        assert [entry.action_type for entry in logs] == [LATE_SUBMISSION_APPROVED]

    @pytest.mark.asyncio
    async def test_second_decision_refused(self, db_session, tutor, student):
        record = await self._pending(db_session, tutor, student)
        await self.service.decide(db_session, record.id, ApprovalDecision(approved=False, admin_id="a"))
        with pytest.raises(InvalidStateError):
            await self.service.decide(db_session, record.id, ApprovalDecision(approved=True, admin_id="a"))

    @pytest.mark.asyncio
    async def test_valid_record_cannot_be_decided(self, db_session, make_record):
        record = make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0))
        db_session.add(record)
        await db_session.commit()
        with pytest.raises(InvalidStateError):
            await self.service.decide(db_session, record.id, ApprovalDecision(approved=True, admin_id="a"))

    @pytest.mark.asyncio
    async def test_decide_unknown_record(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.decide(
                db_session, uuid.uuid4(), ApprovalDecision(approved=True, admin_id="a")
            )

    @pytest.mark.asyncio
    async def test_late_approve_repeat_logs_twice(self, db_session, make_record):
        record = make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0))
        db_session.add(record)
        await db_session.commit()

        await self.service.late_approve(db_session, record.id, "Mrs Okafor", "Checked register")
        again = await self.service.late_approve(db_session, str(record.id), "Mr Eze")

        assert again.status == "Late Approved"
        assert again.late_approved_by == "Mr Eze"
        logs = await self.service.list_action_logs(db_session, record_id=record.id)
        assert len(logs) == 2
        assert {entry.action_type for entry in logs} == {LATE_RECORD_OVERRIDE}


class TestUpdateAndDelete:
    def setup_method(self):
        self.service = ClassRecordService(clock=lambda: LESSON_DAY_NOON)

    @pytest.mark.asyncio
    async def test_update_recomputes_payment(self, db_session, tutor, student):
        record = await self.service.submit_same_day(
            db_session, ClassRecordCreate(**_payload(tutor, student))
        )
        # Shrinks inside its own interval: must not conflict with itself
        updated = await self.service.update(
            db_session,
            record.id,
            ClassRecordCreate(
                **_payload(tutor, student, end="2026-03-10T09:30:00+01:00", class_level="Year 11")
            ),
        )
        assert updated.id == record.id
        assert updated.payment_amount == 2500
        assert updated.class_level == "Year 11"
        assert updated.status == "Valid"

    @pytest.mark.asyncio
    async def test_update_into_other_record_conflicts(self, db_session, tutor, student):
        first = await self.service.submit_same_day(db_session, ClassRecordCreate(**_payload(tutor, student)))
        second = await self.service.submit_same_day(
            db_session,
            ClassRecordCreate(
                **_payload(tutor, student, start="2026-03-10T11:00:00+01:00", end="2026-03-10T12:00:00+01:00")
            ),
        )
        with pytest.raises(ConflictError) as exc:
            await self.service.update(
                db_session,
                second.id,
                ClassRecordCreate(
                    **_payload(tutor, student, start="2026-03-10T10:00:00+01:00", end="2026-03-10T11:00:00+01:00")
                ),
            )
        assert exc.value.context["conflicting_record_id"] == str(first.id)

    @pytest.mark.asyncio
    async def test_update_skips_same_day_rule(self, db_session, make_record, tutor, student):
        record = make_record(lagos(2026, 3, 1, 9, 0), lagos(2026, 3, 1, 10, 0))
        db_session.add(record)
        await db_session.commit()
        updated = await self.service.update(
            db_session,
            record.id,
            ClassRecordCreate(**_payload(tutor, student, start="2026-03-01T09:00:00+01:00", end="2026-03-01T11:00:00+01:00")),
        )
        assert updated.payment_amount == 8600

    @pytest.mark.asyncio
    async def test_delete(self, db_session, make_record):
        record = make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0))
        db_session.add(record)
        await db_session.commit()

        await self.service.delete(db_session, record.id)
        with pytest.raises(NotFoundError):
            await self.service.get_record(db_session, record.id)
        with pytest.raises(NotFoundError):
            await self.service.delete(db_session, record.id)

    @pytest.mark.asyncio
    async def test_bulk_delete(self, db_session, make_record):
        records = [
            make_record(lagos(2026, 3, 10, 9 + i, 0), lagos(2026, 3, 10, 10 + i, 0)) for i in range(3)
        ]
        db_session.add_all(records)
        await db_session.commit()

        deleted = await self.service.bulk_delete(
            db_session, [str(records[0].id), str(records[1].id), str(uuid.uuid4())]
        )
        assert deleted == 2
        remaining = await self.service.list_records(db_session)
        assert [r.id for r in remaining] == [records[2].id]

    @pytest.mark.asyncio
    async def test_bulk_delete_requires_ids(self, db_session):
        with pytest.raises(ValidationError, match="No records specified for deletion"):
            await self.service.bulk_delete(db_session, [])
        with pytest.raises(ValidationError, match="Invalid record id"):
            await self.service.bulk_delete(db_session, ["nope"])


class TestListing:
    def setup_method(self):
        self.service = ClassRecordService(clock=lambda: LESSON_DAY_NOON)

    @pytest.mark.asyncio
    async def test_filters_and_order(self, db_session, make_record, tutor):
        early = make_record(
            lagos(2026, 3, 1, 9, 0), lagos(2026, 3, 1, 10, 0), date_submitted=lagos(2026, 3, 1, 18, 0)
        )
        late_night = make_record(
            lagos(2026, 3, 5, 9, 0), lagos(2026, 3, 5, 10, 0), date_submitted=lagos(2026, 3, 5, 23, 30)
        )
        pending = make_record(
            lagos(2026, 3, 8, 9, 0),
            lagos(2026, 3, 8, 10, 0),
            date_submitted=lagos(2026, 3, 9, 8, 0),
            status="Pending Approval",
        )
        db_session.add_all([early, late_night, pending])
        await db_session.commit()

        everything = await self.service.list_records(db_session)
        assert [r.id for r in everything] == [pending.id, late_night.id, early.id]

        # A bare "to" date includes the whole day in Lagos
        window = await self.service.list_records(db_session, date_from="2026-03-02", date_to="2026-03-05")
        assert [r.id for r in window] == [late_night.id]

        by_tutor = await self.service.list_records(db_session, tutor_id=str(tutor.id))
        assert len(by_tutor) == 3
        assert await self.service.list_records(db_session, tutor_id=str(uuid.uuid4())) == []

        assert [r.id for r in await self.service.list_pending(db_session)] == [pending.id]

    @pytest.mark.asyncio
    async def test_reversed_range_rejected(self, db_session):
        with pytest.raises(ValidationError):
            await self.service.list_records(db_session, date_from="2026-03-05", date_to="2026-03-01")

    @pytest.mark.asyncio
    async def test_malformed_tutor_filter(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_records(db_session, tutor_id="abc")

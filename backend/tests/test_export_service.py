"""
TutorLedger Backend: Export Service Tests
==========================================

What we test:
    ✅ Tutor payroll CSV content and filename
    ✅ Date filters on date_submitted (bare dates cover whole days)
    ✅ Tutor filter
    ✅ Student summary CSV
    ✅ Monthly payroll filters on lesson start, buckets per month
    ✅ Empty result is header only
"""

import uuid

import pytest

from conftest import lagos
from tutorledger.models import Tutor
from tutorledger.services.export_service import ExportService


@pytest.fixture
def service():
    return ExportService()


class TestTutorPayroll:
    @pytest.mark.asyncio
    async def test_totals_per_tutor(self, service, db_session, make_record, tutor):
        db_session.add_all(
            [
                make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0), payment_amount=4300),
                make_record(lagos(2026, 3, 11, 9, 0), lagos(2026, 3, 11, 10, 30), payment_amount=6450),
            ]
        )
        await db_session.commit()

        export = await service.tutor_payroll(db_session)

        assert export.filename == "class_records.csv"
        assert export.row_count == 1
        assert export.content == (
            '"TutorID","Tutor","TutorBank","TutorAccountNumber","Hours","TotalPaymentAmount"\n'
            f'"{tutor.id}","Ada Obi","First Bank","0123456789","2.50","10750"'
        )

    @pytest.mark.asyncio
    async def test_date_filter_uses_submission_date(self, service, db_session, make_record):
        db_session.add_all(
            [
                # lesson in February, submitted in March: included
                make_record(
                    lagos(2026, 2, 27, 9, 0),
                    lagos(2026, 2, 27, 10, 0),
                    date_submitted=lagos(2026, 3, 1, 8, 0),
                    payment_amount=4300,
                ),
                make_record(
                    lagos(2026, 3, 31, 22, 0),
                    lagos(2026, 3, 31, 23, 0),
                    date_submitted=lagos(2026, 3, 31, 23, 30),
                    payment_amount=4300,
                ),
                make_record(
                    lagos(2026, 4, 1, 9, 0),
                    lagos(2026, 4, 1, 10, 0),
                    date_submitted=lagos(2026, 4, 1, 10, 0),
                    payment_amount=4300,
                ),
            ]
        )
        await db_session.commit()

        export = await service.tutor_payroll(db_session, date_from="2026-03-01", date_to="2026-03-31")
        assert export.content.splitlines()[1].endswith('"2.00","8600"')

    @pytest.mark.asyncio
    async def test_tutor_filter(self, service, db_session, make_record, tutor):
        other = Tutor(name="Bayo Ade", account_number="1", bank="GTBank", subjects=["Physics"])
        db_session.add(other)
        db_session.add_all(
            [
                make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0)),
                make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0), tutor=other, subject="Physics"),
            ]
        )
        await db_session.commit()

        everyone = await service.tutor_payroll(db_session)
        assert everyone.row_count == 2

        only_ada = await service.tutor_payroll(db_session, tutor_id=str(tutor.id))
        assert only_ada.row_count == 1
        assert "Ada Obi" in only_ada.content
        assert "Bayo Ade" not in only_ada.content

    @pytest.mark.asyncio
    async def test_empty_is_header_only(self, service, db_session, tutor):
        export = await service.tutor_payroll(db_session, tutor_id=str(uuid.uuid4()))
        assert export.row_count == 0
        assert "\n" not in export.content


class TestStudentSummary:
    @pytest.mark.asyncio
    async def test_hours_per_student(self, service, db_session, make_record, student):
        db_session.add_all(
            [
                make_record(lagos(2026, 3, 10, 9, 0), lagos(2026, 3, 10, 10, 0)),
                make_record(lagos(2026, 3, 12, 9, 0), lagos(2026, 3, 12, 9, 30)),
            ]
        )
        await db_session.commit()

        export = await service.student_summary(db_session)
        assert export.filename == "student_summary.csv"
        assert export.content == (
            '"StudentID","Student","Class","Hours"\n'
            f'"{student.id}","Tunde Bello","Year 9","1.50"'
        )


class TestMonthlyPayroll:
    @pytest.mark.asyncio
    async def test_buckets_by_lesson_month(self, service, db_session, make_record, tutor):
        db_session.add_all(
            [
                make_record(
                    lagos(2026, 1, 30, 9, 0),
                    lagos(2026, 1, 30, 10, 0),
                    date_submitted=lagos(2026, 2, 2, 9, 0),
                    payment_amount=4300,
                ),
                make_record(lagos(2026, 2, 3, 9, 0), lagos(2026, 2, 3, 10, 30), payment_amount=6450),
                make_record(lagos(2026, 2, 5, 9, 0), lagos(2026, 2, 5, 10, 0), payment_amount=4300),
            ]
        )
        await db_session.commit()

        export = await service.monthly_payroll(db_session)
        assert export.filename == "monthly_payroll.csv"
        lines = export.content.splitlines()
        assert lines[0] == (
            '"Year","Month","TutorID","Tutor","Records","Hours",'
            '"TotalPaymentAmount","TotalPaymentDisplay"'
        )
        assert lines[1] == f'"2026","1","{tutor.id}","Ada Obi","1","1.00","4300","₦4,300"'
        assert lines[2] == f'"2026","2","{tutor.id}","Ada Obi","2","2.50","10750","₦10,750"'

        # Range applies to the lesson start, not the submission date
        february = await service.monthly_payroll(db_session, date_from="2026-02-01", date_to="2026-02-28")
        assert february.row_count == 1
        assert '"2026","2"' in february.content

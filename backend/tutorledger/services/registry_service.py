"""
TutorLedger Backend: Tutor and Student Registry
================================================

What:  Registration and listing of tutors and students, plus the
       subject-based tutor suggestion used when enrolling a student.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.exceptions import ValidationError
from tutorledger.models import CLASS_LEVELS, Student, Tutor
from tutorledger.schemas.student import StudentCreate
from tutorledger.schemas.tutor import TutorCreate
from tutorledger.services.validation import require_fields
from tutorledger.store import RecordStore, record_store

logger = logging.getLogger(__name__)


def _clean_subjects(subjects) -> List[str]:
    cleaned = []
    for subject in subjects or []:
        if isinstance(subject, str) and subject.strip() and subject.strip() not in cleaned:
            cleaned.append(subject.strip())
    return cleaned


def normalize_class_level(value: str) -> str:
    """Maps 'year 7' / 'YEAR7' / ' nursery ' onto the canonical taxonomy."""
    compact = "".join(value.split()).lower()
    for level in CLASS_LEVELS:
        if "".join(level.split()).lower() == compact:
            return level
    raise ValidationError(
        message=f"Unknown class level '{value}'",
        field="class_level",
        context={"allowed": list(CLASS_LEVELS)},
    )


class RegistryService:
    def __init__(self, store: RecordStore = record_store):
        self.store = store

    async def create_tutor(self, db: AsyncSession, payload: TutorCreate) -> Tutor:
        require_fields(payload.model_dump(), ("name", "account_number", "bank"))
        subjects = _clean_subjects(payload.subjects)
        if not subjects:
            raise ValidationError(message="Missing required fields: subjects", field="subjects")

        tutor = Tutor(
            name=payload.name.strip(),
            account_number=payload.account_number.strip(),
            bank=payload.bank.strip(),
            subjects=subjects,
        )
        await self.store.add(db, tutor)
        logger.info("Tutor registered: %s (%d subjects)", tutor.id, len(subjects))
        return tutor

    async def list_tutors(self, db: AsyncSession) -> List[Tutor]:
        return await self.store.list_tutors(db)

    async def suggest_tutors(self, db: AsyncSession, subjects) -> List[Tutor]:
        wanted = _clean_subjects(subjects)
        if not wanted:
            raise ValidationError(message="subjects must be a non-empty array", field="subjects")
        return await self.store.find_tutors_teaching(db, wanted)

    async def create_student(self, db: AsyncSession, payload: StudentCreate) -> Student:
        require_fields(payload.model_dump(), ("name", "class_level"))
        student = Student(
            name=payload.name.strip(),
            class_level=normalize_class_level(payload.class_level),
            enrolled_subjects=_clean_subjects(payload.enrolled_subjects),
        )
        await self.store.add(db, student)
        logger.info("Student registered: %s (%s)", student.id, student.class_level)
        return student

    async def list_students(self, db: AsyncSession) -> List[Student]:
        return await self.store.list_students(db)


registry_service = RegistryService()

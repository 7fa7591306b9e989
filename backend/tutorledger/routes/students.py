"""TutorLedger Backend: Student Routes"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.database import get_db_session
from tutorledger.schemas.common import ErrorResponse
from tutorledger.schemas.student import StudentCreate, StudentResponse
from tutorledger.schemas.tutor import SuggestTutorsRequest, TutorResponse
from tutorledger.services.registry_service import registry_service

router = APIRouter(prefix="/api/students", tags=["Students"])


@router.post(
    "",
    status_code=201,
    response_model=StudentResponse,
    responses={400: {"description": "Missing fields or unknown class level", "model": ErrorResponse}},
    summary="Register a student",
)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    student = await registry_service.create_student(db, payload)
    return StudentResponse.model_validate(student)


@router.get("", response_model=List[StudentResponse], summary="List students by name")
async def list_students(db: AsyncSession = Depends(get_db_session)) -> List[StudentResponse]:
    students = await registry_service.list_students(db)
    return [StudentResponse.model_validate(s) for s in students]


@router.post(
    "/suggest-tutors",
    response_model=List[TutorResponse],
    summary="Tutors teaching any of the given subjects",
)
async def suggest_tutors(
    payload: SuggestTutorsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> List[TutorResponse]:
    tutors = await registry_service.suggest_tutors(db, payload.subjects)
    return [TutorResponse.model_validate(t) for t in tutors]

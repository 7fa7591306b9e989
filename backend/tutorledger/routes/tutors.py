"""TutorLedger Backend: Tutor Routes"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.database import get_db_session
from tutorledger.schemas.common import ErrorResponse
from tutorledger.schemas.tutor import TutorCreate, TutorResponse
from tutorledger.services.registry_service import registry_service

router = APIRouter(prefix="/api/tutors", tags=["Tutors"])


@router.post(
    "",
    status_code=201,
    response_model=TutorResponse,
    responses={400: {"description": "Missing fields", "model": ErrorResponse}},
    summary="Register a tutor",
)
async def create_tutor(
    payload: TutorCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TutorResponse:
    tutor = await registry_service.create_tutor(db, payload)
    return TutorResponse.model_validate(tutor)


@router.get("", response_model=List[TutorResponse], summary="List tutors by name")
async def list_tutors(db: AsyncSession = Depends(get_db_session)) -> List[TutorResponse]:
    tutors = await registry_service.list_tutors(db)
    return [TutorResponse.model_validate(t) for t in tutors]

"""
TutorLedger Backend: Class Record Routes
=========================================

What:  Submission (same-day and late), listing, approval, update, deletion.

Route order matters: the literal paths (/pending, /bulk-delete,
/late-submission) are declared before the /{record_id} patterns so they
are never captured as ids.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.auth import require_admin
from tutorledger.database import get_db_session
from tutorledger.schemas.class_record import (
    ApprovalDecision,
    BulkDeleteRequest,
    ClassRecordCreate,
    ClassRecordResponse,
    LateSubmissionCreate,
    RecordCreatedResponse,
)
from tutorledger.schemas.common import ErrorResponse, MessageResponse
from tutorledger.services.record_service import record_service

router = APIRouter(prefix="/api/class-records", tags=["Class Records"])

_SUBMIT_ERRORS = {
    400: {"description": "Missing, malformed or out-of-policy input", "model": ErrorResponse},
    404: {"description": "Tutor or student not found", "model": ErrorResponse},
    409: {"description": "Overlapping class record", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=RecordCreatedResponse,
    responses=_SUBMIT_ERRORS,
    summary="Submit a class record on the day of the lesson",
)
async def submit_record(
    payload: ClassRecordCreate,
    db: AsyncSession = Depends(get_db_session),
) -> RecordCreatedResponse:
    record = await record_service.submit_same_day(db, payload)
    return RecordCreatedResponse(
        message="Class record created successfully",
        record_id=record.id,
        status=record.status,
        payment_amount=record.payment_amount,
    )


@router.post(
    "/late-submission",
    status_code=201,
    response_model=RecordCreatedResponse,
    responses=_SUBMIT_ERRORS,
    summary="Submit a class record after the lesson day, for admin approval",
)
async def submit_late_record(
    payload: LateSubmissionCreate,
    db: AsyncSession = Depends(get_db_session),
) -> RecordCreatedResponse:
    record = await record_service.submit_late(db, payload)
    return RecordCreatedResponse(
        message="Late class record submitted successfully. Awaiting admin approval.",
        record_id=record.id,
        status=record.status,
        payment_amount=record.payment_amount,
    )


@router.get(
    "",
    response_model=List[ClassRecordResponse],
    summary="List class records, newest submission first",
)
async def list_records(
    tutor_id: Optional[str] = Query(default=None),
    date_from: Optional[str] = Query(
        default=None, alias="from", description="Submitted on or after (YYYY-MM-DD or ISO 8601)"
    ),
    date_to: Optional[str] = Query(
        default=None, alias="to", description="Submitted on or before (YYYY-MM-DD or ISO 8601)"
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[ClassRecordResponse]:
    records = await record_service.list_records(db, tutor_id, date_from, date_to)
    return [ClassRecordResponse.model_validate(r) for r in records]


@router.get(
    "/pending",
    response_model=List[ClassRecordResponse],
    summary="Late submissions awaiting a decision",
)
async def list_pending(db: AsyncSession = Depends(get_db_session)) -> List[ClassRecordResponse]:
    records = await record_service.list_pending(db)
    return [ClassRecordResponse.model_validate(r) for r in records]


@router.delete(
    "/bulk-delete",
    response_model=MessageResponse,
    responses={400: {"description": "No ids given", "model": ErrorResponse}},
    summary="Delete several class records",
)
async def bulk_delete(
    payload: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    deleted = await record_service.bulk_delete(db, payload.ids)
    return MessageResponse(message=f"{deleted} records deleted successfully")


@router.get(
    "/{record_id}",
    response_model=ClassRecordResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one class record",
)
async def get_record(
    record_id: str, db: AsyncSession = Depends(get_db_session)
) -> ClassRecordResponse:
    record = await record_service.get_record(db, record_id)
    return ClassRecordResponse.model_validate(record)


@router.patch(
    "/{record_id}/approve",
    response_model=ClassRecordResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"description": "Record is not pending approval", "model": ErrorResponse},
    },
    dependencies=[Depends(require_admin)],
    summary="Approve or reject a pending late submission",
)
async def decide_record(
    record_id: str,
    decision: ApprovalDecision,
    db: AsyncSession = Depends(get_db_session),
) -> ClassRecordResponse:
    record = await record_service.decide(db, record_id, decision)
    return ClassRecordResponse.model_validate(record)


@router.put(
    "/{record_id}",
    response_model=ClassRecordResponse,
    responses=_SUBMIT_ERRORS,
    summary="Correct a class record",
)
async def update_record(
    record_id: str,
    payload: ClassRecordCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ClassRecordResponse:
    record = await record_service.update(db, record_id, payload)
    return ClassRecordResponse.model_validate(record)


@router.delete(
    "/{record_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a class record",
)
async def delete_record(
    record_id: str, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    await record_service.delete(db, record_id)
    return MessageResponse(message="Record deleted successfully")

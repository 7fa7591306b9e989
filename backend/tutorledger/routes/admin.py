"""
TutorLedger Backend: Admin Routes
==================================

What:  Payroll exports, the late-approval override and the action log.
Who:   Administrators only; every route depends on require_admin.

Exports return text/csv as a download (Content-Disposition: attachment).
Browsers following a download link cannot set headers, so these routes
also accept the credential as the admin_password query parameter.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from tutorledger.auth import require_admin
from tutorledger.database import get_db_session
from tutorledger.schemas.admin import (
    AdminActionLogResponse,
    LateApproveRequest,
    LateApproveResponse,
)
from tutorledger.schemas.class_record import ClassRecordResponse
from tutorledger.schemas.common import ErrorResponse
from tutorledger.schemas.tutor import TutorResponse
from tutorledger.services.export_service import CsvExport, export_service
from tutorledger.services.record_service import record_service
from tutorledger.services.registry_service import registry_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Missing or wrong admin password", "model": ErrorResponse}},
)

_CSV_RESPONSE = {
    200: {"content": {"text/csv": {}}, "description": "CSV download"},
    400: {"description": "Invalid date filter", "model": ErrorResponse},
}


def _csv(export: CsvExport) -> Response:
    return Response(
        content=export.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/tutors", response_model=List[TutorResponse], summary="List tutors with bank details")
async def list_tutors(db: AsyncSession = Depends(get_db_session)) -> List[TutorResponse]:
    tutors = await registry_service.list_tutors(db)
    return [TutorResponse.model_validate(t) for t in tutors]


@router.get(
    "/export",
    response_class=Response,
    responses=_CSV_RESPONSE,
    summary="Tutor payroll CSV, filtered on submission date",
)
async def export_tutor_payroll(
    tutor_id: Optional[str] = Query(default=None),
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return _csv(await export_service.tutor_payroll(db, tutor_id, date_from, date_to))


@router.get(
    "/export-student-summary",
    response_class=Response,
    responses=_CSV_RESPONSE,
    summary="Per-student summary CSV, filtered on submission date",
)
async def export_student_summary(
    tutor_id: Optional[str] = Query(default=None),
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return _csv(await export_service.student_summary(db, tutor_id, date_from, date_to))


@router.get(
    "/export-monthly",
    response_class=Response,
    responses=_CSV_RESPONSE,
    summary="Tutor payroll by lesson month CSV, filtered on lesson start",
)
async def export_monthly_payroll(
    tutor_id: Optional[str] = Query(default=None),
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return _csv(await export_service.monthly_payroll(db, tutor_id, date_from, date_to))


@router.post(
    "/late-approve/{record_id}",
    response_model=LateApproveResponse,
    responses={
        400: {"description": "admin_name missing", "model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Override: mark a record Late Approved",
)
async def late_approve(
    record_id: str,
    payload: LateApproveRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LateApproveResponse:
    record = await record_service.late_approve(db, record_id, payload.admin_name, payload.notes)
    logger.info("Record %s late-approved by %s", record_id, payload.admin_name)
    return LateApproveResponse(
        message="Late submission approved. Tutor can re-submit record.",
        record=ClassRecordResponse.model_validate(record),
    )


@router.get(
    "/action-logs",
    response_model=List[AdminActionLogResponse],
    summary="Administrative actions, newest first",
)
async def list_action_logs(
    record_id: Optional[UUID] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db_session),
) -> List[AdminActionLogResponse]:
    entries = await record_service.list_action_logs(db, record_id=record_id, limit=limit)
    return [AdminActionLogResponse.model_validate(e) for e in entries]

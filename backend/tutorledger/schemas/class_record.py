"""
TutorLedger Backend: Class Record Schemas
==========================================

What:  Request payloads for the two submission paths, updates, approval
       decisions and bulk delete; the class record response.

Timestamps are accepted as ISO 8601 strings. Values without an offset are
read as wall-clock time in the reference timezone (see
services/validation.py: parse_instant).
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from tutorledger.schemas.student import StudentSummary
from tutorledger.schemas.tutor import TutorSummary


class ClassRecordCreate(BaseModel):
    tutor_id: Optional[str] = None
    student_id: Optional[str] = None
    class_level: Optional[str] = None
    subject: Optional[str] = None
    topic: Optional[str] = None
    start_time: Optional[str] = Field(default=None, description="ISO 8601 lesson start")
    end_time: Optional[str] = Field(default=None, description="ISO 8601 lesson end")
    comment: Optional[str] = None


class LateSubmissionCreate(ClassRecordCreate):
    reason: Optional[str] = Field(default=None, description="Why the record is late")


class ApprovalDecision(BaseModel):
    approved: bool = False
    admin_id: Optional[str] = None


class BulkDeleteRequest(BaseModel):
    ids: Optional[List[str]] = None


class RecordCreatedResponse(BaseModel):
    message: str
    record_id: uuid.UUID
    status: str
    payment_amount: int


class ClassRecordResponse(BaseModel):
    """Class record with tutor and student resolved inline."""
    id: uuid.UUID
    tutor_id: uuid.UUID
    student_id: uuid.UUID
    tutor: Optional[TutorSummary] = None
    student: Optional[StudentSummary] = None
    class_level: str
    subject: str
    topic: str
    comment: Optional[str] = None
    start_time: datetime
    end_time: datetime
    date_submitted: datetime
    payment_amount: int
    status: str
    late_approved_by: Optional[str] = None
    late_approved_at: Optional[datetime] = None
    approval_request: Optional[Dict[str, Any]] = None

    model_config = {"from_attributes": True}

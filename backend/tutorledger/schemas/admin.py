"""TutorLedger Backend: Admin Schemas"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from tutorledger.schemas.class_record import ClassRecordResponse


class LateApproveRequest(BaseModel):
    admin_name: Optional[str] = None
    notes: Optional[str] = None


class LateApproveResponse(BaseModel):
    message: str
    record: ClassRecordResponse


class AdminActionLogResponse(BaseModel):
    id: uuid.UUID
    admin_name: str
    tutor_id: Optional[uuid.UUID] = None
    record_id: Optional[uuid.UUID] = None
    action_type: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

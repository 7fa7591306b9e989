"""TutorLedger Backend: Student Schemas"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class StudentCreate(BaseModel):
    name: Optional[str] = None
    class_level: Optional[str] = Field(default=None, description="Nursery or Year 1 to Year 12")
    enrolled_subjects: Optional[List[str]] = None


class StudentResponse(BaseModel):
    id: uuid.UUID
    name: str
    class_level: str
    enrolled_subjects: List[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentSummary(BaseModel):
    id: uuid.UUID
    name: str
    class_level: str

    model_config = {"from_attributes": True}

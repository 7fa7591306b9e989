"""
TutorLedger Backend: Tutor Schemas
===================================

Create payloads keep every field optional so that missing values reach the
service and come back as a 400 `validation_error` naming the fields, the
same shape every other business-rule failure uses.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TutorCreate(BaseModel):
    name: Optional[str] = None
    account_number: Optional[str] = None
    bank: Optional[str] = None
    subjects: Optional[List[str]] = Field(default=None, description="Non-empty list of subjects")


class TutorResponse(BaseModel):
    id: uuid.UUID
    name: str
    account_number: str
    bank: str
    subjects: List[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class TutorSummary(BaseModel):
    """Tutor as embedded in a class record response."""
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class SuggestTutorsRequest(BaseModel):
    subjects: Optional[List[str]] = None

"""
TutorLedger Backend: Tutor Model
=================================

What:  ORM model for the `tutors` table.
Who:   Read by the record validator (subject eligibility) and by the report
       aggregator (name and bank details on the payroll export).
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tutorledger.database import Base, utcnow


class Tutor(Base):
    """A tutor who submits class records and gets paid per session."""

    __tablename__ = "tutors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    bank: Mapped[str] = mapped_column(String(200), nullable=False)
    # Subjects this tutor may record sessions for; never empty
    subjects: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Tutor(id={self.id}, name='{self.name}')>"

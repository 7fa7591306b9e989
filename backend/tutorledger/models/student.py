"""
TutorLedger Backend: Student Model
===================================

What:  ORM model for the `students` table.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tutorledger.database import Base, utcnow

# Fixed grade taxonomy accepted at registration
CLASS_LEVELS = ("Nursery",) + tuple(f"Year {n}" for n in range(1, 13))


class Student(Base):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    class_level: Mapped[str] = mapped_column(String(20), nullable=False)
    enrolled_subjects: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name='{self.name}', class_level='{self.class_level}')>"

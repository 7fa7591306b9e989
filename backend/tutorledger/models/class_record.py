"""
TutorLedger Backend: Class Record Model
========================================

What:  ORM model for the `class_records` table, one row per tutoring session.
Who:   Written by ClassRecordService; read by the report aggregator.

Lifecycle (see services/workflow.py):
    same-day submission   → Valid
    late submission       → Pending Approval → Approved | Rejected
    admin override        → Late Approved (from any status)

Relationships:
    `tutor` and `student` use lazy="raise": they are only available when the
    store loads them explicitly (RecordStore.find_records with hydrate=True).

Indexes:
    idx_class_records_overlap covers the overlap lookup
    (tutor_id, student_id, subject, start_time).
"""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorledger.database import Base, utcnow

if TYPE_CHECKING:
    from tutorledger.models.student import Student
    from tutorledger.models.tutor import Tutor


class RecordStatus(str, enum.Enum):
    VALID = "Valid"
    PENDING_APPROVAL = "Pending Approval"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    LATE_APPROVED = "Late Approved"


class ClassRecord(Base):
    """A single tutoring session and the payment it earns."""

    __tablename__ = "class_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tutors.id"), nullable=False)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id"), nullable=False)

    class_level: Mapped[str] = mapped_column(String(20), nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    topic: Mapped[str] = mapped_column(String(500), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Half-open interval [start_time, end_time)
    start_time: Mapped[datetime] = mapped_column(nullable=False)
    end_time: Mapped[datetime] = mapped_column(nullable=False)
    date_submitted: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    # Whole currency units (naira)
    payment_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=RecordStatus.VALID.value
    )

    # ── Administrative override (Late Approved) ───────────────────────────
    late_approved_by: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    late_approved_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    # ── Approval request (late submission path) ───────────────────────────
    approval_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approval_requested_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    approved_by: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    approval_date: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    tutor: Mapped["Tutor"] = relationship(lazy="raise")
    student: Mapped["Student"] = relationship(lazy="raise")

    __table_args__ = (
        Index("idx_class_records_overlap", "tutor_id", "student_id", "subject", "start_time"),
        Index("idx_class_records_date_submitted", "date_submitted"),
        Index("idx_class_records_status", "status"),
    )

    @property
    def approval_request(self) -> Optional[dict]:
        """The late-submission request as a sub-object, or None for same-day records."""
        if self.approval_reason is None:
            return None
        return {
            "reason": self.approval_reason,
            "request_date": self.approval_requested_at,
            "approved_by": self.approved_by,
            "approval_date": self.approval_date,
        }

    def __repr__(self) -> str:
        return (
            f"<ClassRecord(id={self.id}, subject='{self.subject}', "
            f"status='{self.status}', start_time='{self.start_time}')>"
        )

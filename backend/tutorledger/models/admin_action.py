"""
TutorLedger Backend: Admin Action Log Model
============================================

What:  Append-only audit trail of administrative overrides.
When:  A row is written whenever an admin late-approves a record or decides
       a pending late submission. Rows are never updated or deleted.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tutorledger.database import Base, utcnow

# action_type tags
LATE_RECORD_OVERRIDE = "Late Record Override"
LATE_SUBMISSION_APPROVED = "Late Submission Approved"
LATE_SUBMISSION_REJECTED = "Late Submission Rejected"


class AdminActionLog(Base):
    __tablename__ = "admin_action_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_name: Mapped[str] = mapped_column(String(200), nullable=False)
    tutor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("tutors.id"), nullable=True
    )
    # Plain reference: the log outlives deleted class records
    record_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    action_type: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_admin_action_logs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AdminActionLog(id={self.id}, action_type='{self.action_type}', "
            f"admin_name='{self.admin_name}')>"
        )

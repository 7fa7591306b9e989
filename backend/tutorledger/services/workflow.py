"""
TutorLedger Backend: Approval Workflow
=======================================

What:  Status transitions for class records.
How:   Functions mutate the ORM record in memory and return the admin action
       log entry to append; the caller persists both in one transaction.

State Machine:
    (same-day create) ──────────────▶ Valid
    (late create) ──────────────────▶ Pending Approval
    Pending Approval ── decide ─────▶ Approved | Rejected
    any status ─────── late-approve ▶ Late Approved

    decide() from anything but Pending Approval raises InvalidStateError,
    checked before the admin_id is looked at.
    late_approve() has no prior-state requirement; applying it to a record
    that is already Late Approved re-stamps approver and time and produces a
    fresh log entry.
"""

import logging
from datetime import datetime
from typing import Optional

from tutorledger.exceptions import InvalidStateError, ValidationError
from tutorledger.models.admin_action import (
    LATE_RECORD_OVERRIDE,
    LATE_SUBMISSION_APPROVED,
    LATE_SUBMISSION_REJECTED,
    AdminActionLog,
)
from tutorledger.models.class_record import ClassRecord, RecordStatus

logger = logging.getLogger(__name__)


def mark_valid(record: ClassRecord) -> None:
    record.status = RecordStatus.VALID.value


def mark_pending(record: ClassRecord, reason: str, requested_at: datetime) -> None:
    record.status = RecordStatus.PENDING_APPROVAL.value
    record.approval_reason = reason
    record.approval_requested_at = requested_at


def decide(
    record: ClassRecord,
    approved: bool,
    admin_id: Optional[str],
    decided_at: datetime,
) -> AdminActionLog:
    """Resolves a pending late submission to Approved or Rejected."""
    if record.status != RecordStatus.PENDING_APPROVAL.value:
        raise InvalidStateError(
            message="Record is not pending approval",
            current_status=record.status,
        )
    if not admin_id or not admin_id.strip():
        raise ValidationError(message="admin_id is required", field="admin_id")

    record.status = (RecordStatus.APPROVED if approved else RecordStatus.REJECTED).value
    record.approved_by = admin_id.strip()
    record.approval_date = decided_at
    logger.info("Class record %s %s by %s", record.id, record.status.lower(), record.approved_by)

    return AdminActionLog(
        admin_name=record.approved_by,
        tutor_id=record.tutor_id,
        record_id=record.id,
        action_type=LATE_SUBMISSION_APPROVED if approved else LATE_SUBMISSION_REJECTED,
        notes=record.approval_reason,
        created_at=decided_at,
    )


def late_approve(
    record: ClassRecord,
    admin_name: Optional[str],
    approved_at: datetime,
    notes: Optional[str] = None,
) -> AdminActionLog:
    """Administrative override to Late Approved from any status."""
    if not admin_name or not admin_name.strip():
        raise ValidationError(message="admin_name is required", field="admin_name")

    previous = record.status
    record.status = RecordStatus.LATE_APPROVED.value
    record.late_approved_by = admin_name.strip()
    record.late_approved_at = approved_at
    logger.info(
        "Class record %s late-approved by %s (was %s)",
        record.id,
        record.late_approved_by,
        previous,
    )

    return AdminActionLog(
        admin_name=record.late_approved_by,
        tutor_id=record.tutor_id,
        record_id=record.id,
        action_type=LATE_RECORD_OVERRIDE,
        notes=notes,
        created_at=approved_at,
    )

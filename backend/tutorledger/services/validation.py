"""
TutorLedger Backend: Class Record Validation Rules
===================================================

What:  The business rules a class record must satisfy before it is stored.
How:   Each rule is a plain function that raises ValidationError or
       ConflictError; ClassRecordService calls them in order and supplies
       the store lookups (tutor, student, overlapping records).
Who:   ClassRecordService for both submission paths and for updates.

Rule order (first failure wins):
    1. required fields present
    2. late path only: reason present
    3. tutor and student exist            (NotFoundError, raised by service)
    4. subject taught by the tutor
    5. start/end parse, end after start
    6. duration in {30, 60, 90, 120} minutes ±1
    7. no overlapping record              (ConflictError)
    8. same-day path only: lesson date == submission date
"""

import logging
from datetime import date, datetime, time, tzinfo
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from tutorledger.exceptions import ConflictError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: Tuple[str, ...] = (
    "tutor_id",
    "student_id",
    "class_level",
    "subject",
    "topic",
    "start_time",
    "end_time",
)

ALLOWED_DURATIONS_MINUTES: Tuple[int, ...] = (30, 60, 90, 120)
DURATION_TOLERANCE_MINUTES = 1

DURATION_MESSAGE = "Class duration must be 30 minutes, 1 hour, 1 hour 30 minutes, or 2 hours."
SAME_DAY_MESSAGE = (
    "Class records must be submitted the same day as the lesson. "
    "Please use the late-submission endpoint for late submissions."
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_fields(payload: Mapping[str, Any], fields: Sequence[str] = REQUIRED_FIELDS) -> None:
    """Raises ValidationError naming every missing or blank field."""
    missing = [name for name in fields if _is_blank(payload.get(name))]
    if missing:
        raise ValidationError(
            message=f"Missing required fields: {', '.join(missing)}",
            context={"missing_fields": missing},
        )


def require_reason(reason: Optional[str]) -> str:
    if _is_blank(reason):
        raise ValidationError(
            message="Reason for late submission required",
            field="reason",
        )
    return reason.strip()


def require_subject_taught(subject: str, tutor_subjects: Iterable[str]) -> None:
    if subject not in list(tutor_subjects or []):
        raise ValidationError(
            message="Selected subject is not in tutor's subjects",
            field="subject",
        )


def parse_instant(value: Any, tz: tzinfo) -> Optional[datetime]:
    """
    Parses an ISO 8601 timestamp into an aware datetime.

    Naive values are read as wall-clock time in the reference timezone.
    Returns None for anything that is not a valid instant.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_interval(start_raw: Any, end_raw: Any, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Parses both bounds and enforces end > start."""
    start = parse_instant(start_raw, tz)
    end = parse_instant(end_raw, tz)
    if start is None or end is None:
        raise ValidationError(message="Invalid start or end time")
    if end <= start:
        raise ValidationError(message="End time must be after start time", field="end_time")
    return start, end


def parse_day_bounds(
    date_from: Optional[str], date_to: Optional[str], tz: tzinfo
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Inclusive range filter bounds from `from`/`to` query values.

    A bare date (YYYY-MM-DD) covers the whole day in the reference timezone:
    `from` becomes 00:00:00 and `to` becomes 23:59:59.999999. Full
    timestamps are used as given.
    """

    def bound(raw: Optional[str], end_of_day: bool, name: str) -> Optional[datetime]:
        if _is_blank(raw):
            return None
        raw = raw.strip()
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            parsed = parse_instant(raw, tz)
            if parsed is None:
                raise ValidationError(message=f"Invalid date '{raw}'", field=name)
            return parsed
        clock = time.max if end_of_day else time.min
        return datetime.combine(day, clock, tzinfo=tz)

    start = bound(date_from, False, "from")
    end = bound(date_to, True, "to")
    if start is not None and end is not None and end < start:
        raise ValidationError(message="'to' must not be before 'from'", field="to")
    return start, end


def duration_minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def is_allowed_duration(minutes: float) -> bool:
    return any(
        abs(minutes - allowed) <= DURATION_TOLERANCE_MINUTES
        for allowed in ALLOWED_DURATIONS_MINUTES
    )


def require_allowed_duration(start: datetime, end: datetime) -> None:
    minutes = duration_minutes(start, end)
    if not is_allowed_duration(minutes):
        raise ValidationError(
            message=DURATION_MESSAGE,
            context={
                "duration_minutes": round(minutes, 2),
                "allowed_minutes": list(ALLOWED_DURATIONS_MINUTES),
            },
        )


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open [start, end) overlap: touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


def require_no_overlap(start: datetime, end: datetime, existing: Iterable[Any]) -> None:
    """
    `existing` holds records for the same tutor/student/subject; anything
    with start_time/end_time/id attributes works.
    """
    for record in existing:
        if intervals_overlap(record.start_time, record.end_time, start, end):
            logger.warning("Overlap with class record %s rejected", record.id)
            raise ConflictError(conflicting_id=str(record.id))


def lesson_date_matches_submission(start: datetime, submitted_at: datetime, tz: tzinfo) -> bool:
    return start.astimezone(tz).date() == submitted_at.astimezone(tz).date()


def require_same_day(start: datetime, submitted_at: datetime, tz: tzinfo) -> None:
    if not lesson_date_matches_submission(start, submitted_at, tz):
        raise ValidationError(
            message=SAME_DAY_MESSAGE,
            context={
                "lesson_date": start.astimezone(tz).date().isoformat(),
                "submission_date": submitted_at.astimezone(tz).date().isoformat(),
                "late_submission_path": "/api/class-records/late-submission",
            },
        )

"""
ORM models. Importing this package registers every table with Base.metadata,
which Alembic autogenerate and the test schema setup rely on.
"""

from tutorledger.models.admin_action import AdminActionLog
from tutorledger.models.class_record import ClassRecord, RecordStatus
from tutorledger.models.student import CLASS_LEVELS, Student
from tutorledger.models.tutor import Tutor

__all__ = [
    "AdminActionLog",
    "CLASS_LEVELS",
    "ClassRecord",
    "RecordStatus",
    "Student",
    "Tutor",
]

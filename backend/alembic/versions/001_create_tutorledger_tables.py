"""Create tutors, students, class_records and admin_action_logs tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Initial schema. Column docs live on the models in tutorledger/models/.
How:   Timestamps are TIMESTAMP WITH TIME ZONE stored in UTC; ids are UUIDs
       generated by the application.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "tutors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("account_number", sa.String(50), nullable=False),
        sa.Column("bank", sa.String(200), nullable=False),
        sa.Column(
            "subjects",
            sa.JSON(),
            nullable=False,
            comment="Subjects the tutor may record sessions for",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("class_level", sa.String(20), nullable=False, comment="Nursery or Year 1..12"),
        sa.Column("enrolled_subjects", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "class_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tutor_id", sa.Uuid(), nullable=False),
        sa.Column("student_id", sa.Uuid(), nullable=False),
        sa.Column("class_level", sa.String(20), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("topic", sa.String(500), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("start_time", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_time", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("date_submitted", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "payment_amount",
            sa.Integer(),
            nullable=False,
            comment="Whole naira, rounded half-up at submission",
        ),
        sa.Column(
            "status",
            sa.String(30),
            nullable=False,
            server_default=sa.text("'Valid'"),
            comment="Valid, Pending Approval, Approved, Rejected, Late Approved",
        ),
        sa.Column("late_approved_by", sa.String(200), nullable=True),
        sa.Column("late_approved_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("approval_reason", sa.Text(), nullable=True),
        sa.Column("approval_requested_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(200), nullable=True),
        sa.Column("approval_date", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutors.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    # Overlap lookup: same tutor, student and subject, ordered by start
    op.create_index(
        "idx_class_records_overlap",
        "class_records",
        ["tutor_id", "student_id", "subject", "start_time"],
    )
    op.create_index("idx_class_records_date_submitted", "class_records", ["date_submitted"])
    op.create_index("idx_class_records_status", "class_records", ["status"])

    op.create_table(
        "admin_action_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("admin_name", sa.String(200), nullable=False),
        sa.Column("tutor_id", sa.Uuid(), nullable=True),
        sa.Column(
            "record_id",
            sa.Uuid(),
            nullable=True,
            comment="No foreign key: entries outlive deleted class records",
        ),
        sa.Column("action_type", sa.String(100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutors.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_admin_action_logs_created_at",
        "admin_action_logs",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_admin_action_logs_created_at", table_name="admin_action_logs")
    op.drop_table("admin_action_logs")
    op.drop_index("idx_class_records_status", table_name="class_records")
    op.drop_index("idx_class_records_date_submitted", table_name="class_records")
    op.drop_index("idx_class_records_overlap", table_name="class_records")
    op.drop_table("class_records")
    op.drop_table("students")
    op.drop_table("tutors")

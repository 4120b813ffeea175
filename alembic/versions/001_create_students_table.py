"""Create students table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `students` table and the unique index on student_id.
How:   Portable column types only, so the revision runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table (all student data is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the students table, see student_records/models/student.py."""
    op.create_table(
        "students",

        # Internal key, never exposed by the API
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),

        sa.Column(
            "student_id",
            sa.BigInteger(),
            nullable=False,
            comment="Business identifier used by every endpoint",
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("dob", sa.Date(), nullable=False, comment="Date of birth"),
        sa.Column("marks", sa.Float(), nullable=True),

        sa.PrimaryKeyConstraint("id"),
    )

    # One row per student_id; inserts of an existing id fail here
    op.create_index(
        "ix_students_student_id",
        "students",
        ["student_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_students_student_id", table_name="students")
    op.drop_table("students")

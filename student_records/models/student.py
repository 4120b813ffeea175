"""
Student Records — Student SQLAlchemy Model
============================================

What:  ORM model representing the `students` table.
How:   Inherits from the shared DeclarativeBase; Alembic and
       Database.create_tables() read its metadata.
Who:   Used by StudentService for every store operation.

Table Design:
    - id: internal surrogate key; never serialized, never used for addressing
    - student_id: business identifier (64-bit), unique index enforces one row per id
    - dob: calendar date only (no time component)
    - marks: nullable; a student may be created without marks
"""

from datetime import date
from typing import Optional

from sqlalchemy import BigInteger, Date, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from student_records.database import Base


class Student(Base):
    """
    One student record.

    Lifecycle:
        1. Inserted by POST /students
        2. name / dob replaced in place by PUT /students/{student_id}
        3. Removed by DELETE /students/{student_id}
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Uniqueness is enforced here and nowhere else; an insert that violates
    # it raises IntegrityError, which the service maps to DuplicateStudentError.
    student_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
        index=True,
        comment="Business identifier used by every endpoint",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    dob: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Date of birth",
    )

    marks: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        default=None,
    )

    def __repr__(self) -> str:
        return f"<Student(student_id={self.student_id}, name='{self.name}')>"

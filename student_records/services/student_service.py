"""
Student Records — Student Service (Store Operations)
======================================================

What:  Translates each record operation into exactly one store statement
       (plus a COUNT for listing) and converts store failures into typed errors.
Why:   Keeps HTTP concerns in the routes and SQL concerns here.
How:   Stateless class; every method receives the request's AsyncSession.
Who:   Called by the handlers in routes/students.py.

Operation → statement:
    create_student  → INSERT (flush surfaces unique-index violations)
    list_students   → SELECT count(*) WHERE <filter>;
                      SELECT ... WHERE <filter> ORDER BY id OFFSET skip LIMIT page_size
    get_student     → SELECT ... WHERE student_id = :id
    update_student  → UPDATE ... SET name, dob WHERE student_id = :id RETURNING *
    delete_student  → DELETE ... WHERE student_id = :id RETURNING *

Error translation:
    IntegrityError        → DuplicateStudentError
    other SQLAlchemyError → DatabaseError (driver detail kept in context)
    no matching row       → NotFoundError
"""

import logging
import math
from typing import Any, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_records.exceptions import DatabaseError, DuplicateStudentError, NotFoundError
from student_records.models.student import Student
from student_records.schemas.student import (
    MAX_INT64,
    StudentCreate,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
)

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the name filter matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_filters(name: Optional[str] = None, marks: Optional[float] = None) -> List[Any]:
    """
    Build the WHERE clauses for listing.

    name:   case-insensitive substring match; empty string means no filter
    marks:  exact equality; 0 is a valid filter value
    Both clauses are ANDed by the caller.
    """
    filters: List[Any] = []
    if name:
        filters.append(Student.name.ilike(f"%{_escape_like(name)}%", escape="\\"))
    if marks is not None:
        filters.append(Student.marks == marks)
    return filters


class StudentService:
    """
    Store operations for student records.

    Each method either returns response models or raises one of the
    application exceptions; SQLAlchemy exceptions never escape.
    """

    async def create_student(self, db: AsyncSession, payload: StudentCreate) -> StudentCreate:
        """
        Insert a new record.

        Returns the accepted payload, which the route echoes back.

        Raises:
            DuplicateStudentError: student_id already exists
            DatabaseError: any other store failure
        """
        student = Student(
            student_id=payload.student_id,
            name=payload.name,
            dob=payload.dob,
            marks=payload.marks,
        )
        try:
            db.add(student)
            # flush (not commit) so constraint violations surface here;
            # the commit happens in get_db_session
            await db.flush()
        except IntegrityError as e:
            logger.warning("Duplicate student_id %s rejected by store", payload.student_id)
            raise DuplicateStudentError(
                payload.student_id,
                context={"original_error": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating student %s: %s", payload.student_id, e)
            raise DatabaseError(
                message="Error creating student",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Student %s created", payload.student_id)
        return payload

    async def list_students(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        name: Optional[str] = None,
        marks: Optional[float] = None,
    ) -> StudentListResponse:
        """
        Return one page of records matching the optional filters.

        skip = (page - 1) * page_size. Rows come back in insertion order.
        A page past the end yields an empty list with the real total; when
        skip exceeds the 64-bit range the page query is not sent at all.

        Args:
            page:       1-based page number (validated >= 1 by the route)
            page_size:  rows per page (validated >= 1 by the route)
            name:       case-insensitive substring filter
            marks:      exact-match filter
        """
        filters = build_filters(name=name, marks=marks)
        skip = (page - 1) * page_size

        try:
            count_result = await db.execute(
                select(func.count()).select_from(Student).where(*filters)
            )
            total_students = count_result.scalar() or 0

            if skip > MAX_INT64:
                # No table holds that many rows, and the driver cannot bind the offset
                students = []
            else:
                result = await db.execute(
                    select(Student)
                    .where(*filters)
                    .order_by(Student.id)
                    .offset(skip)
                    .limit(page_size)
                )
                students = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing students: %s", e, exc_info=True)
            raise DatabaseError(
                message="Error retrieving students",
                context={"error_type": type(e).__name__},
            ) from e

        return StudentListResponse(
            data=[StudentResponse.model_validate(s) for s in students],
            result=len(students),
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total_students / page_size),
            total_students=total_students,
        )

    async def get_student(self, db: AsyncSession, student_id: int) -> StudentResponse:
        """
        Fetch the record with the given business identifier.

        Raises:
            NotFoundError: no record has this student_id
            DatabaseError: query failed
        """
        try:
            result = await db.execute(
                select(Student).where(Student.student_id == student_id)
            )
            student = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching student %s: %s", student_id, e)
            raise DatabaseError(
                message="Error retrieving student",
                context={"student_id": student_id, "error_type": type(e).__name__},
            ) from e

        if student is None:
            raise NotFoundError(resource="Student", resource_id=student_id)
        return StudentResponse.model_validate(student)

    async def update_student(
        self,
        db: AsyncSession,
        student_id: int,
        payload: StudentUpdate,
    ) -> StudentResponse:
        """
        Replace name and/or dob of the matching record in one statement.

        marks and student_id are never modified here. When the body carries
        neither name nor dob there is nothing to write, and the current
        record is returned (or NotFoundError raised) as for a read.

        Raises:
            NotFoundError: no record has this student_id
            DatabaseError: statement failed
        """
        changes = payload.changes()
        if not changes:
            return await self.get_student(db, student_id)

        try:
            result = await db.execute(
                update(Student)
                .where(Student.student_id == student_id)
                .values(**changes)
                .returning(Student)
            )
            student = result.scalar_one_or_none()
            updated = StudentResponse.model_validate(student) if student is not None else None
        except SQLAlchemyError as e:
            logger.error("Database error updating student %s: %s", student_id, e)
            raise DatabaseError(
                message="Error updating student",
                context={"student_id": student_id, "error_type": type(e).__name__},
            ) from e

        if updated is None:
            raise NotFoundError(resource="Student", resource_id=student_id)
        logger.info("Student %s updated (%s)", student_id, ", ".join(sorted(changes)))
        return updated

    async def delete_student(self, db: AsyncSession, student_id: int) -> StudentResponse:
        """
        Remove the matching record and return it as it was before deletion.

        Raises:
            NotFoundError: no record has this student_id
            DatabaseError: statement failed
        """
        try:
            result = await db.execute(
                delete(Student)
                .where(Student.student_id == student_id)
                .returning(Student)
            )
            student = result.scalar_one_or_none()
            # Serialize before the session expunges the deleted instance
            removed = StudentResponse.model_validate(student) if student is not None else None
        except SQLAlchemyError as e:
            logger.error("Database error deleting student %s: %s", student_id, e)
            raise DatabaseError(
                message="Error deleting student",
                context={"student_id": student_id, "error_type": type(e).__name__},
            ) from e

        if removed is None:
            raise NotFoundError(resource="Student", resource_id=student_id)
        logger.info("Student %s deleted", student_id)
        return removed


# ── Singleton Instance ────────────────────────────────────────────────────
student_service = StudentService()

"""
Student Records — Student Route Handlers
==========================================

What:  The five record endpoints under /students.
How:   Each handler extracts path/query/body data, delegates to
       StudentService, and wraps the result in the response envelope.
       Errors are raised as application exceptions and rendered by the
       global handlers in main.py.

Endpoints:
    POST   /students                 → 201 created
    GET    /students                 → 200 paginated list
    GET    /students/{student_id}    → 200 | 404
    PUT    /students/{student_id}    → 202 | 404
    DELETE /students/{student_id}    → 200 | 404
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from student_records.database import get_db_session
from student_records.schemas.student import (
    MAX_INT64,
    MIN_INT64,
    ErrorResponse,
    StudentCreate,
    StudentCreatedEnvelope,
    StudentEnvelope,
    StudentListResponse,
    StudentUpdate,
)
from student_records.services.student_service import student_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["Students"])

_NOT_FOUND = {404: {"description": "Student not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Store failure", "model": ErrorResponse}}

# Path ids outside the 64-bit range cannot match a stored record and are
# rejected with 422 before reaching the store
StudentIdPath = Annotated[
    int,
    Path(ge=MIN_INT64, le=MAX_INT64, description="Business identifier of the student"),
]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=StudentCreatedEnvelope,
    responses={**_SERVER_ERROR},
    summary="Create a student",
)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> StudentCreatedEnvelope:
    """
    Insert a new student and echo the accepted payload.

    A student_id that already exists is rejected by the store's unique
    index and reported as 500.
    """
    logger.info("Received create request: student_id=%s", payload.student_id)
    created = await student_service.create_student(db=db, payload=payload)
    return StudentCreatedEnvelope(
        message="Student created successfully",
        status_code=status.HTTP_201_CREATED,
        data=created,
    )


@router.get(
    "",
    response_model=StudentListResponse,
    responses={**_SERVER_ERROR},
    summary="List students with pagination and filtering",
)
async def list_students(
    page: int = Query(default=1, ge=1, le=MAX_INT64, description="1-based page number"),
    page_size: int = Query(
        default=10, ge=1, le=MAX_INT64, alias="pageSize", description="Records per page"
    ),
    name: str = Query(default="", description="Case-insensitive substring of the name"),
    marks: Optional[float] = Query(default=None, description="Exact marks value"),
    db: AsyncSession = Depends(get_db_session),
) -> StudentListResponse:
    """
    Return one page of students.

    Example:
        GET /students?page=2&pageSize=5&name=ana&marks=75
    """
    logger.debug(
        "List request: page=%d, pageSize=%d, name=%r, marks=%s",
        page,
        page_size,
        name,
        marks,
    )
    return await student_service.list_students(
        db=db,
        page=page,
        page_size=page_size,
        name=name,
        marks=marks,
    )


@router.get(
    "/{student_id}",
    response_model=StudentEnvelope,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a student by student_id",
)
async def get_student(
    student_id: StudentIdPath,
    db: AsyncSession = Depends(get_db_session),
) -> StudentEnvelope:
    student = await student_service.get_student(db=db, student_id=student_id)
    return StudentEnvelope(message="success", status_code=status.HTTP_200_OK, data=student)


@router.put(
    "/{student_id}",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=StudentEnvelope,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Update a student's name and date of birth",
)
async def update_student(
    student_id: StudentIdPath,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> StudentEnvelope:
    """
    Apply name and dob from the body. marks is never changed by this endpoint.
    """
    student = await student_service.update_student(db=db, student_id=student_id, payload=payload)
    return StudentEnvelope(message="success", status_code=status.HTTP_202_ACCEPTED, data=student)


@router.delete(
    "/{student_id}",
    response_model=StudentEnvelope,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete a student",
)
async def delete_student(
    student_id: StudentIdPath,
    db: AsyncSession = Depends(get_db_session),
) -> StudentEnvelope:
    """Remove the student and return the record as it was."""
    student = await student_service.delete_student(db=db, student_id=student_id)
    return StudentEnvelope(message="success", status_code=status.HTTP_200_OK, data=student)

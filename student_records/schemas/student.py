"""
Student Records — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the HTTP contract of the service.
How:   FastAPI validates request bodies against the request models and
       serializes handler results through the response models, which also
       drive the OpenAPI documentation.
Who:   Used by route handlers, the service layer and the exception handlers.

Envelopes:
    Single-record and error responses share one envelope:
        {"message": str, "status_code": int, "data": <payload or null>}
    The list endpoint uses its own envelope:
        {"data": [...], "result": int, "page": int, "pageSize": int,
         "totalPages": int, "totalStudents": int}
"""

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Bounds of a signed 64-bit integer, the widest value the store binds.
# Ids and paging values outside this range are rejected with 422.
MIN_INT64 = -(2**63)
MAX_INT64 = 2**63 - 1


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class StudentCreate(BaseModel):
    """
    Body of POST /students.

    Only presence, basic type coercion and the 64-bit range of student_id
    are validated here; the unique index on student_id is checked by the
    store on insert.
    """
    student_id: int = Field(
        ge=MIN_INT64, le=MAX_INT64, description="Unique business identifier"
    )
    name: str = Field(description="Student name")
    dob: date = Field(description="Date of birth (ISO 8601 date)")
    marks: Optional[float] = Field(default=None, description="Marks, if known")


class StudentUpdate(BaseModel):
    """
    Body of PUT /students/{student_id}.

    Only name and dob are applied. Other keys in the body (marks,
    student_id) are ignored, and an omitted field keeps its stored value.
    """
    name: Optional[str] = Field(default=None, description="New name")
    dob: Optional[date] = Field(default=None, description="New date of birth")

    def changes(self) -> dict:
        """Fields explicitly provided by the client, excluding nulls."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class StudentResponse(BaseModel):
    """Serialized student record. The internal key is not exposed."""
    student_id: int
    name: str
    dob: date
    marks: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class Envelope(BaseModel):
    """Common wrapper for single-record and error responses."""
    message: str = Field(description="Human-readable outcome")
    status_code: int = Field(description="HTTP status, repeated in the body")
    data: Optional[Any] = Field(default=None, description="Payload; null on errors")


class StudentEnvelope(Envelope):
    """Envelope around one stored record (GET, PUT and DELETE by id)."""
    data: Optional[StudentResponse] = None


class StudentCreatedEnvelope(Envelope):
    """Envelope returned by POST /students; data echoes the accepted payload."""
    data: Optional[StudentCreate] = None


class StudentListResponse(BaseModel):
    """
    Paginated response of GET /students.

    totalPages = ceil(totalStudents / pageSize)
    """
    data: List[StudentResponse] = Field(description="Records on this page")
    result: int = Field(description="Number of records on this page")
    page: int = Field(description="Requested page number (1-based)")
    page_size: int = Field(alias="pageSize", description="Requested page size")
    total_pages: int = Field(alias="totalPages", description="Number of pages for this filter")
    total_students: int = Field(alias="totalStudents", description="Records matching the filter")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(Envelope):
    """Error envelope; data is always null."""
    data: None = None


class HealthResponse(BaseModel):
    """Health check response showing service and store status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")

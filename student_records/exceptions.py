"""
Student Records — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the failure categories of the service.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the JSON envelope with the matching HTTP status code.
Who:   Raised by the service layer; caught by the global handlers.
When:  During request processing, after a store call returns or fails.

Exception Hierarchy:
    StudentRecordsError (base)      → 500 Internal Server Error
    ├── NotFoundError               → 404 Not Found
    ├── DuplicateStudentError       → 500 Internal Server Error (unique index violated)
    └── DatabaseError               → 500 Internal Server Error (transport / other store failure)

    DuplicateStudentError is answered with 500, the status existing clients
    of the /students API expect for a rejected insert; the handler logs it at
    WARNING instead of ERROR.
"""

from typing import Any, Dict, Optional


class StudentRecordsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (returned in the envelope)
        context:      Additional debug info (logged, NOT returned to the client)
        status_code:  HTTP status the global handler responds with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(StudentRecordsError):
    """
    Raised when no record matches the requested business identifier.

    When:    GET/PUT/DELETE /students/{student_id} with an unknown id.
    HTTP:    404 Not Found, envelope data is null.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Student",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource_id = resource_id


class DuplicateStudentError(StudentRecordsError):
    """
    Raised when an insert violates the unique index on student_id.

    When:    POST /students with a student_id that already exists, including
             two concurrent creates racing for the same id (the index decides).
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        student_id: Any,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["student_id"] = student_id
        super().__init__(
            message=f"Student with student_id {student_id} already exists",
            context=ctx,
        )
        self.student_id = student_id


class DatabaseError(StudentRecordsError):
    """
    Raised when a store operation fails for any other reason.

    When:    Connection lost, pool exhausted, malformed query, driver error.
    HTTP:    500 Internal Server Error

    The message is a fixed per-operation description ("Error updating
    student"); the driver's exception type and text go into `context` and
    are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

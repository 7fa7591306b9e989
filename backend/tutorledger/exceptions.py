"""
TutorLedger Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each business-rule failure kind.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) map them to HTTP
       responses with a consistent JSON body.
Who:   Raised by services, the store and the admin gate.

Exception Hierarchy:
    TutorLedgerError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── AuthenticationError  → 401 Unauthorized
    ├── NotFoundError        → 404 Not Found
    ├── ConflictError        → 409 Conflict (overlapping class record)
    ├── InvalidStateError    → 409 Conflict (workflow transition refused)
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TutorLedgerError(Exception):
    """
    Base exception for all TutorLedger application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info; returned as `details` only for
                  client-side errors, logged for server-side ones
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TutorLedgerError):
    """
    Raised when client input is missing, malformed or out of policy.

    Examples: missing required fields, subject not taught by the tutor,
    end before start, duration not in the whitelist, same-day rule broken.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(TutorLedgerError):
    """Raised when an admin-only endpoint is called without the shared secret."""

    def __init__(self, message: str = "Unauthorized", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class NotFoundError(TutorLedgerError):
    """
    Raised when a referenced entity does not exist.

    The store returns None for missing rows; services convert that into
    NotFoundError so routes never deal with None checks.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(TutorLedgerError):
    """
    Raised when a class record overlaps an existing record for the same
    tutor, student and subject.
    """

    def __init__(
        self,
        message: str = "Duplicate or overlapping class record already exists.",
        conflicting_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if conflicting_id:
            ctx["conflicting_record_id"] = conflicting_id
        super().__init__(message=message, context=ctx)


class InvalidStateError(TutorLedgerError):
    """Raised when a workflow transition is attempted from the wrong status."""

    def __init__(
        self,
        message: str = "Record is not in a state that allows this action",
        current_status: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if current_status:
            ctx["current_status"] = current_status
        super().__init__(message=message, context=ctx)
        self.current_status = current_status


class DatabaseError(TutorLedgerError):
    """
    Raised when the record store fails unexpectedly.

    The message returned to the client is always generic; the underlying
    error type is kept in context for the server-side log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

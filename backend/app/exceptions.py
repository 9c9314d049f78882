"""
Blog Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the failure outcomes of the
       user handlers and the post/comment services.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       JSON error responses with the matching HTTP status code.
Who:   Raised by models (validation, pre-insert hook) and services;
       caught by the global handlers.

Exception Hierarchy:
    BlogError (base)
    ├── ValidationError   → 500 Internal Server Error (raw validation message)
    ├── ConflictError     → 400 Bad Request ("Email already exists.")
    ├── NotFoundError     → 404 Not Found ("User not found.")
    └── DatabaseError     → 500 Internal Server Error (underlying message)

Validation failures are reported as 500 at the HTTP layer, the same status
as any other internal failure. Only conflict and not-found have their own
status codes.
"""

from typing import Any, Dict, List, Optional


class BlogError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Error description returned in the API response
        context:  Additional debug info (logged, not returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogError):
    """
    Raised when a record fails a field constraint or the pre-insert hook.

    A single ValidationError can carry several failures; each one is kept in
    `errors` and the message lists them as "Validation error: <msg>" lines.
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
        self.errors: List[str] = [message]

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationError":
        """Builds one exception out of every failed constraint of a record."""
        message = ",\n".join(f"Validation error: {error}" for error in errors)
        exc = cls(message=message, context={"errors": list(errors)})
        exc.errors = list(errors)
        return exc


class ConflictError(BlogError):
    """
    Raised when signup uses an email that is already registered.

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Email already exists.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BlogError):
    """
    Raised when a record looked up by identity does not exist.

    HTTP: 404 Not Found

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception.
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found."
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(BlogError):
    """
    Raised when a database operation fails unexpectedly.

    What:    A query, insert, or update failed in the store.
    When:    Constraint violation (e.g. a racing duplicate signup hitting the
             UNIQUE index on users.email), foreign key violation, lost connection.
    HTTP:    500 Internal Server Error, carrying the driver's message.
    """

    def __init__(
        self,
        message: str = "A database error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

"""
Online Retail API - Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the product resource.
Why:   Services raise these instead of returning error values; the global
       handlers registered in main.py map each type to a status code and a
       structured JSON body.
How:   Each exception carries a client-safe message and an optional context
       dict that is logged server-side but never returned.

Exception Hierarchy:
    RetailAPIError (base)
    ├── ValidationError   → 400 Bad Request
    ├── ConflictError     → 400 Bad Request (duplicate natural key)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class RetailAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RetailAPIError):
    """
    Raised when client input fails validation outside the request schema.

    HTTP: 400 Bad Request. Schema-level failures raised by FastAPI itself
    (RequestValidationError) are mapped to the same status and error code.
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


class ConflictError(RetailAPIError):
    """
    Raised when an insert collides with an existing natural key.

    HTTP: 400 Bad Request. Detected from the database's uniqueness
    constraint violation, not from a pre-check, so concurrent creates of the
    same stock_code resolve to exactly one 201.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The {resource} already exists"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' already exists"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class NotFoundError(RetailAPIError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None (or a zero row count) for missing records; the
    service layer converts that into this exception.
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


class DatabaseError(RetailAPIError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic. Driver errors,
    SQL text and constraint names stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

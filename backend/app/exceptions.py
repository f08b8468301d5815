"""
Structured exceptions and error responses for Taskhive.

Every error leaves the API in the same shape::

    {"error": "<code>", "message": "<human readable>", "details": [...] | null}

Policy denials on reads and on update/delete targets surface as
``not_found``, so a caller cannot tell a hidden row from a missing one.
"""

from typing import Any, Dict, Optional, List, Union
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from app.logging_config import get_logger

logger = get_logger("error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str
    message: str
    details: Optional[List[ErrorDetail]] = None


# Error bodies every authenticated router can produce, for the OpenAPI schema
ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Foreign-key or check constraint violation"},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "Row-level security check failed"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Missing or not visible to the caller"},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "Uniqueness violation"},
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse, "description": "Invalid request"},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse, "description": "Identity provider unavailable"},
}


# =============================================================================
# Custom Exceptions
# =============================================================================

class TaskhiveException(Exception):
    """Base exception for all Taskhive errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(TaskhiveException):
    """Resource not found, or not visible to the caller."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class PolicyViolationError(TaskhiveException):
    """A written row does not satisfy the table's row-level security check."""

    def __init__(self, table: str, operation: str):
        super().__init__(
            message=f'new row violates row-level security policy for table "{table}"',
            error_code="policy_violation",
            status_code=status.HTTP_403_FORBIDDEN,
            details=[{
                "loc": [table],
                "msg": f"{operation} rejected by row-level security",
                "type": "policy_error",
            }],
        )
        self.table = table
        self.operation = operation


class ConstraintViolationError(TaskhiveException):
    """A uniqueness, foreign-key or check constraint rejected the write."""

    def __init__(self, message: str, constraint: str):
        status_code = (
            status.HTTP_409_CONFLICT if constraint == "unique" else status.HTTP_400_BAD_REQUEST
        )
        super().__init__(
            message=message,
            error_code=f"{constraint}_violation",
            status_code=status_code,
        )
        self.constraint = constraint

    @classmethod
    def from_integrity_error(cls, exc: IntegrityError) -> "ConstraintViolationError":
        """Classify a driver error by the wording both PostgreSQL and SQLite use."""
        text = str(exc.orig).lower()
        if "unique" in text or "duplicate" in text:
            constraint = "unique"
        elif "foreign key" in text:
            constraint = "foreign_key"
        elif "check" in text:
            constraint = "check"
        else:
            constraint = "integrity"
        return cls(str(exc.orig), constraint)


class IdentityProviderError(TaskhiveException):
    """The identity provider could not be reached or answered with an error."""

    def __init__(self, message: str = "Identity provider unavailable"):
        super().__init__(
            message=message,
            error_code="identity_provider_error",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )


class ProvisioningError(TaskhiveException):
    """The profile for a new account could not be created."""

    def __init__(self, provider_uid: str, reason: str):
        super().__init__(
            message=f"Could not provision profile for account {provider_uid}: {reason}",
            error_code="provisioning_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        self.provider_uid = provider_uid


class ValidationError(TaskhiveException):
    """Request validation error."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def taskhive_exception_handler(request: Request, exc: TaskhiveException) -> JSONResponse:
    """Handle TaskhiveException and return structured response."""
    body = ErrorResponse(
        error=exc.error_code,
        message=exc.message,
        details=[ErrorDetail(**detail) for detail in exc.details] if exc.details else None,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Surface database constraint violations as-is."""
    error = ConstraintViolationError.from_integrity_error(exc)
    logger.warning(f"Constraint violation on {request.method} {request.url.path}: {error.message}")
    return await taskhive_exception_handler(request, error)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and parameters in the common error shape."""
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]
    return await taskhive_exception_handler(
        request, ValidationError("Request validation failed", details=details)
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(TaskhiveException, taskhive_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)

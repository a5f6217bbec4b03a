"""
Standardized error handling for the Scriptorium editor.

Provides consistent error codes, exception classes, and response formatting.

Propagation policy:
- ValidationError / ConflictError are recovered by the editor and folded
  into the next rendered view.
- PersistenceError is raised by the article writes and turned into a
  message by the editor step.
- ConfigurationError halts the request (see EditorErrorMiddleware).
- TokenMismatchError terminates the request with 403.
"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from django.http import JsonResponse

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for editor failures."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_POSTDATE = "INVALID_POSTDATE"
    INVALID_EXPIRYDATE = "INVALID_EXPIRYDATE"
    EXPIRES_BEFORE_POSTDATE = "EXPIRES_BEFORE_POSTDATE"
    INVALID_DRAFT = "INVALID_DRAFT"

    # Authentication/Authorization (403)
    PERMISSION_DENIED = "PERMISSION_DENIED"
    TOKEN_MISMATCH = "TOKEN_MISMATCH"

    # Resource errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Server errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Error Response Schema
# =============================================================================

@dataclass
class ErrorDetail:
    """Detailed error information."""
    code: ErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorResponse:
    """Standardized error response."""
    error: ErrorDetail
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error.to_dict(),
            "request_id": self.request_id,
        }

    def to_response(self, status_code: int = 400) -> JsonResponse:
        return JsonResponse(self.to_dict(), status=status_code)


# =============================================================================
# Custom Exceptions
# =============================================================================

class EditorError(Exception):
    """Base exception for editor errors."""

    status_code = 400
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code
        self.field = field
        self.error_details = details or {}
        super().__init__(self.message)

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                field=self.field,
                details=self.error_details if self.error_details else None,
            ),
            request_id=request_id or str(uuid.uuid4()),
        )


class ValidationError(EditorError):
    """User-correctable input error."""
    status_code = 400
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation failed"


class ConflictError(EditorError):
    """Another principal saved the record after the form was rendered."""
    status_code = 409
    error_code = ErrorCode.CONFLICT
    default_detail = "Concurrent edit detected"

    def __init__(self, message: Optional[str] = None, modified_by: str = '', **kwargs):
        self.modified_by = modified_by
        details = kwargs.pop('details', None) or {}
        if modified_by:
            details.setdefault('modified_by', modified_by)
        super().__init__(message, details=details, **kwargs)


class ConfigurationError(EditorError):
    """Programming or plugin defect. Never caused by user input."""
    status_code = 500
    error_code = ErrorCode.CONFIGURATION_ERROR
    default_detail = "Editor configuration error"


class PersistenceError(EditorError):
    """Storage write failed."""
    status_code = 500
    error_code = ErrorCode.DATABASE_ERROR
    default_detail = "Article save failed"


class AuthorizationError(EditorError):
    """Principal lacks the privilege for the mutation."""
    status_code = 403
    error_code = ErrorCode.PERMISSION_DENIED
    default_detail = "Permission denied"


class TokenMismatchError(AuthorizationError):
    """Form token missing or stale."""
    error_code = ErrorCode.TOKEN_MISMATCH
    default_detail = "Form token mismatch"


class NotFoundError(EditorError):
    """Record not found."""
    status_code = 404
    error_code = ErrorCode.NOT_FOUND
    default_detail = "Article not found"


# =============================================================================
# Exception Handler
# =============================================================================

def get_request_id(request) -> str:
    """Get or generate request ID from request."""
    if hasattr(request, 'request_id'):
        return request.request_id
    return str(uuid.uuid4())


def editor_exception_response(exc, request=None) -> Optional[JsonResponse]:
    """
    Convert an editor exception that escaped the view into a response.

    Returns None for anything that is not an EditorError so Django's own
    handling applies.
    """
    if not isinstance(exc, EditorError):
        return None

    request_id = get_request_id(request) if request is not None else str(uuid.uuid4())
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Editor error: %s",
        exc.error_code.value,
        extra={
            "request_id": request_id,
            "error_code": exc.error_code.value,
            "error_message": exc.message,
            "status_code": exc.status_code,
        },
    )
    return exc.get_error_response(request_id).to_response(exc.status_code)

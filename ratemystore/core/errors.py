"""Error hierarchy for every domain failure the API can report.

Invariants:
    - Every error carries a code, a category and an HTTP status
    - Messages are safe to show to clients; internals never reach to_response()
"""

from enum import Enum
from typing import Any, List, Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class RateMyStoreError(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
        details: Optional[List[dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status
        self.details = details

    def to_response(self) -> dict:
        error: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
        }
        if self.details:
            error["details"] = self.details
        return {
            "statusCode": self.http_status,
            "success": False,
            "message": self.message,
            "error": error,
        }


class ValidationError(RateMyStoreError):
    """Malformed or out-of-range input."""
    def __init__(self, message: str, field: Optional[str] = None):
        details = [{"field": field, "message": message}] if field else None
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION, 400, details,
        )
        self.field = field


class UnauthenticatedError(RateMyStoreError):
    """No principal, or the credential presented could not be verified."""
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION, 401,
        )


class ForbiddenError(RateMyStoreError):
    """Principal present but not allowed to perform the operation."""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION, 403,
        )


class NotFoundError(RateMyStoreError):
    def __init__(self, message: str):
        super().__init__(
            message, "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )


class ConflictError(RateMyStoreError):
    """Uniqueness or ownership invariant would be violated."""
    def __init__(self, message: str):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT, 409,
        )

"""
Custom Exception Classes for MeetMe Search

This module defines custom exceptions for better error handling and
consistent error responses across the application.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Machine-readable error codes returned in the error envelope"""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    SEARCH_FAILED = "SEARCH_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class MeetMeError(Exception):
    """Base exception class for all MeetMe-related exceptions"""

    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Validation & Search Exceptions
# ============================================================================


class ValidationError(MeetMeError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class SearchError(MeetMeError):
    """Raised by the HTTP layer when a search operation returns a failure result"""

    error_code = ErrorCode.SEARCH_FAILED

    def __init__(self, message: str, operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class OperationCancelledError(MeetMeError):
    """Raised when the caller's cancel signal is set before or during an operation"""

    error_code = ErrorCode.OPERATION_CANCELLED

    def __init__(self, message: str = "Operation was cancelled"):
        super().__init__(message=message, status_code=499)


"""
Custom Exceptions for the Helpdesk Service

This module defines custom exception classes used throughout the application
for better error handling and debugging. Each exception carries the HTTP
status code it maps to so the API layer can render it uniformly.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Business logic errors
    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"

    # External service errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, 422)


class MissingFieldError(ValidationError):
    """A required input field was missing or blank"""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(
            message or f"{field} is required",
            field_errors={field: ["required"]},
            error_code=ErrorCode.MISSING_REQUIRED_FIELD,
        )
        self.field = field


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            message = (
                f"{resource_type} with id {resource_id} not found"
                if resource_id is not None
                else f"{resource_type} not found"
            )
        details = {"resource_type": resource_type}
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)
        self.resource_type = resource_type
        self.resource_id = resource_id


# ========================================
# Authentication & Authorization Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when the caller's identity is missing or unknown"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, None, 401)


class AuthorizationError(BaseAppException):
    """Exception raised when the caller lacks the role for an action"""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message, ErrorCode.AUTHORIZATION_FAILED, None, 403)


class OwnershipError(BaseAppException):
    """Exception raised when a record does not belong to the expected user"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.OWNERSHIP_MISMATCH, details, 403)


# ========================================
# Business Logic Exceptions
# ========================================

class InvalidStateError(BaseAppException):
    """Exception raised when a lifecycle transition is not allowed"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_STATE, details, 409)


class ConflictError(BaseAppException):
    """Exception raised when a write conflicts with existing data"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFLICT, details, 409)


# ========================================
# Database Exceptions
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised for database-related errors"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
    ):
        super().__init__(message, error_code, details, status_code)


class DuplicateEntryError(DatabaseError):
    """Exception raised when attempting to create a duplicate entry"""

    def __init__(self, message: str = "Entry already exists", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, ErrorCode.DUPLICATE_ENTRY, 409)


# ========================================
# External Service Exceptions
# ========================================

class ExternalServiceError(BaseAppException):
    """Exception raised when an external service fails"""

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"External service '{service_name}' is unavailable"
        payload = {"service": service_name}
        payload.update(details or {})
        super().__init__(message, ErrorCode.EXTERNAL_SERVICE_ERROR, payload, 502)
        self.service_name = service_name


class ConfigurationError(BaseAppException):
    """Exception raised for missing or invalid configuration"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, None, 500)


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "MissingFieldError",
    "ResourceNotFoundError",
    "AuthenticationError",
    "AuthorizationError",
    "OwnershipError",
    "InvalidStateError",
    "ConflictError",
    "DatabaseError",
    "DuplicateEntryError",
    "ExternalServiceError",
    "ConfigurationError",
]

"""Custom exceptions for the application"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """Base exception for the application"""
    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_FOUND", status_code=404, details=details)

    @classmethod
    def for_resource(cls, resource: str, resource_id: str) -> "NotFoundError":
        """Build the error for a transaction, activity or document id that does not resolve"""
        return cls(
            message=f"{resource.capitalize()} with ID {resource_id} not found",
            details={"resource": resource, "id": resource_id},
        )

    @property
    def resource(self) -> Optional[str]:
        return self.details.get("resource")

    @property
    def resource_id(self) -> Optional[str]:
        return self.details.get("id")


class AuthenticationError(AppException):
    """Authentication failed"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class AuthorizationError(AppException):
    """Authorization failed"""
    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ACCESS_DENIED", status_code=403, details=details)


class ValidationError(AppException):
    """Validation error"""
    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=422, details=details)

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")


class ConflictError(AppException):
    """Resource conflict"""
    def __init__(self, message: str = "Resource conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CONFLICT", status_code=409, details=details)


class StorageError(AppException):
    """Persistence layer failure"""
    def __init__(self, message: str = "Storage error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STORAGE_ERROR", status_code=503, details=details)
